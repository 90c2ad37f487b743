"""
Pure-Python FRACT-256/512 sponge hash.

FRACT is a small sponge construction: a 256-bit state of four 64-bit words,
a 128-bit rate, and a permutation built from a hybrid logistic-tent map on
the integers modulo 2**64. This module implements the streaming engine, the
one-shot helpers and a couple of analysis hooks for probing the permutation.

All arithmetic is done on Python ints and masked back to 64 bits after every
step, so the output is bit-for-bit identical to a fixed-width implementation.
The design carries no verified security claims; use it for fingerprinting,
not for anything that needs a vetted cryptographic hash.
"""
import logging
from typing import Iterable, Tuple

logger = logging.getLogger(__name__)


# 64-bit mask (all ones)
_MASK: int = 0xFFFFFFFFFFFFFFFF
# Top bit of a 64-bit word (2**63)
_TOP: int = 0x8000000000000000

# Rate in bytes: the first two state words take input and give output
RATE: int = 16
# Rounds of phi per permutation call
ROUNDS: int = 8

DIGEST_SIZE: int = 32
DIGEST_SIZE_512: int = 64

# Initialization vector (first 256 bits of sqrt(2))
IV: Tuple[int, int, int, int] = (
    0x6A09E667F3BCC908,
    0xBB67AE8584CAA73B,
    0x3C6EF372FE94F82B,
    0xA54FF53A5F1D36F1,
)

State = Tuple[int, int, int, int]


class FinalizedError(ValueError):
    """Raised when an engine is used after its digest has been taken."""


def hltm(x: int) -> int:
    """Hybrid logistic-tent map on Z/2**64.

    f(x) = 4x(1-x)                mod 2**64   if x <  2**63
    f(x) = 4(2**64 - x)(x - 2**63) mod 2**64  if x >= 2**63

    The logistic branch works in fixed point: 4x minus four times the high
    word of x*x. Python ints never overflow, so the only truncation is the
    final mask.
    """
    if x < _TOP:
        return (4 * x - 4 * ((x * x) >> 64)) & _MASK
    x_prime = x ^ _TOP          # x - 2**63
    x_comp = (-x) & _MASK       # 2**64 - x, two's complement
    return (4 * x_prime * x_comp) & _MASK


def phi(state: Iterable[int]) -> State:
    """Apply one round of the coupled lattice map to a 4-word state.

    Every word goes through hltm, then picks up shifted copies of two of its
    neighbours. Left shifts are masked so they drop bits past 64 exactly like
    a u64 shift, and the sums wrap modulo 2**64.
    """
    s0, s1, s2, s3 = state
    return (
        (hltm(s0) + ((s1 >> 31) ^ ((s3 << 17) & _MASK))) & _MASK,
        (hltm(s1) + ((s2 >> 23) ^ ((s0 << 11) & _MASK))) & _MASK,
        (hltm(s2) + ((s3 >> 47) ^ ((s1 << 29) & _MASK))) & _MASK,
        (hltm(s3) + ((s0 >> 13) ^ ((s2 << 5) & _MASK))) & _MASK,
    )


def permute(state: Iterable[int]) -> State:
    """Apply the full permutation (ROUNDS rounds of phi)."""
    s = tuple(state)
    for _ in range(ROUNDS):
        s = phi(s)
    return s


class Fract:
    """Streaming FRACT hash engine.

    Simple usage:
      h = Fract().update(b"hello ").update(b"cat")
      digest = h.finalize()       # 32 bytes
      # or: Fract().update(data).finalize512() for 64 bytes

    Notes:
    - update() can be called any number of times; splitting the input into
      different chunks never changes the digest.
    - finalize()/finalize512() consume the engine. Any later update() or
      second terminal call raises FinalizedError.
    - The first 32 bytes of finalize512() always equal finalize() for the
      same input.
    """

    def __init__(self) -> None:
        # Four 64-bit words; words 0-1 are the rate, 2-3 the hidden capacity
        self._s: State = IV
        # Bytes that have not filled a whole rate block yet
        self._buf: bytearray = bytearray(RATE)
        self._buf_len: int = 0
        # Running count of everything passed to update(); diagnostic only
        self._total_len: int = 0
        self._finalized: bool = False

    # -- analysis hooks -----------------------------------------------------

    @classmethod
    def from_state(cls, words: Iterable[int]) -> "Fract":
        """Build an engine seeded with an arbitrary 4-word state.

        Analysis/debug escape hatch: this bypasses the standard IV, so the
        resulting digests are NOT FRACT digests of anything. Buffer and
        counters start from their normal reset values.
        """
        s = tuple(words)
        if len(s) != 4:
            raise ValueError("state must have exactly 4 words, got %d" % len(s))
        for w in s:
            if type(w) is not int or not 0 <= w <= _MASK:
                raise ValueError("state word out of 64-bit range: %r" % (w,))
        eng = cls()
        eng._s = s
        logger.debug("engine seeded from caller state %s", ["%016x" % w for w in s])
        return eng

    def state_snapshot(self) -> State:
        """Return the current 4-word state (analysis/debug only)."""
        return self._s

    # -- properties ---------------------------------------------------------

    @property
    def total_len(self) -> int:
        return self._total_len

    @property
    def finalized(self) -> bool:
        return self._finalized

    # -- absorbing ----------------------------------------------------------

    def update(self, data: bytes) -> "Fract":
        """Absorb more input bytes into the state.

        - Bytes left over from the previous call are topped up first; a full
          16-byte buffer is absorbed immediately.
        - Whole 16-byte blocks are then absorbed straight from the input.
        - A tail shorter than 16 bytes waits in the buffer for the next call.
        - Returns self so you can chain calls: h.update(a).update(b)
        """
        if self._finalized:
            raise FinalizedError("already finalized")
        if isinstance(data, str):
            raise TypeError("Strings must be encoded before hashing")
        mv = memoryview(data).cast("B")
        n = len(mv)
        self._total_len += n
        i = 0
        # Top up a partially filled buffer
        if self._buf_len:
            take = min(n, RATE - self._buf_len)
            self._buf[self._buf_len:self._buf_len + take] = mv[:take]
            self._buf_len += take
            i = take
            if self._buf_len == RATE:
                self._absorb_block()
                self._buf_len = 0
        # Whole blocks
        while n - i >= RATE:
            self._buf[:] = mv[i:i + RATE]
            self._absorb_block()
            i += RATE
        # Keep the tail for later
        if i < n:
            rest = n - i
            self._buf[:rest] = mv[i:]
            self._buf_len = rest
        return self

    def _absorb_block(self) -> None:
        # XOR the buffer into the rate words (little-endian) and permute
        s0, s1, s2, s3 = self._s
        s0 ^= int.from_bytes(self._buf[0:8], "little")
        s1 ^= int.from_bytes(self._buf[8:16], "little")
        self._s = permute((s0, s1, s2, s3))

    def _pad(self) -> None:
        """Apply 10*1 padding to the buffered tail and absorb it.

        update() flushes a buffer as soon as it reaches RATE, so there is
        always room for at least the 0x01 marker here.
        """
        b = self._buf
        b[self._buf_len] = 0x01
        for j in range(self._buf_len + 1, RATE):
            b[j] = 0x00
        b[RATE - 1] = 0x80
        self._absorb_block()
        self._buf_len = 0
        self._finalized = True

    # -- squeezing ----------------------------------------------------------

    def _rate_bytes(self) -> bytes:
        return self._s[0].to_bytes(8, "little") + self._s[1].to_bytes(8, "little")

    def _squeeze(self, outlen: int) -> bytes:
        if self._finalized:
            raise FinalizedError("already finalized")
        self._pad()
        out = bytearray(self._rate_bytes())
        while len(out) < outlen:
            self._s = permute(self._s)
            out += self._rate_bytes()
        return bytes(out)

    def finalize(self) -> bytes:
        """Pad, absorb the last block and return the 32-byte digest."""
        return self._squeeze(DIGEST_SIZE)

    def finalize512(self) -> bytes:
        """Like finalize() but squeezes 64 bytes."""
        return self._squeeze(DIGEST_SIZE_512)

    def hexdigest(self) -> str:
        return self.finalize().hex()

    def hexdigest512(self) -> str:
        return self.finalize512().hex()

    def copy(self) -> "Fract":
        """Return an independent engine with the same absorbed prefix."""
        if self._finalized:
            raise FinalizedError("already finalized")
        other = type(self)()
        other._s = self._s
        other._buf = bytearray(self._buf)
        other._buf_len = self._buf_len
        other._total_len = self._total_len
        return other

    # -- one-shot -----------------------------------------------------------

    @staticmethod
    def hash(data: bytes) -> bytes:
        return Fract().update(data).finalize()

    @staticmethod
    def hash512(data: bytes) -> bytes:
        return Fract().update(data).finalize512()


def new() -> Fract:
    """Return a fresh engine at the standard IV."""
    return Fract()


def fract256(data: bytes) -> bytes:
    """One-shot FRACT-256: absorb data and return 32 bytes."""
    return Fract.hash(data)


def fract512(data: bytes) -> bytes:
    """One-shot FRACT-512: absorb data and return 64 bytes.

    The first 32 bytes equal fract256(data).
    """
    return Fract.hash512(data)


def fract256_hex(data: bytes) -> str:
    return fract256(data).hex()


def fract512_hex(data: bytes) -> str:
    return fract512(data).hex()
