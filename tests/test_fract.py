"""
Pytest tests for the FRACT engine in fract.py.

The regression vectors were recorded once from a conforming fixed-width
implementation and are pinned here so any change in the arithmetic shows up.
"""
import pytest

import fract
from fract import Fract, FinalizedError, IV, RATE, fract256, fract512, hltm, permute, phi

EMPTY_256 = "89725f1118452e010a45e713ca6402a460627476dfdb937f7d17eb87890ac73b"
EMPTY_512 = (
    "89725f1118452e010a45e713ca6402a460627476dfdb937f7d17eb87890ac73b"
    "eca01b6badcab80f0e0a54a9bae488447ba617dde272d596edaa8cdd4d01b240"
)
HELLO_CAT_256 = "7064371307216bbf3b7d91349eabd8c3ec2aa6e6d878f5c3052014389d2d3992"
HELLO_WORLD_512 = (
    "6e43711622a571831c32b52868efe8750b6acf9a049d0c49d0a4e954223dbe7a"
    "bd8e8c524e9b91e94fe30cb06767f7a8f8b8f530c41eafa3f5cdfe54f5aae4e6"
)
ONE_BLOCK_256 = "de2852ea3b57cf79f8f84f4552c8be5802830ebdf71b83b90ef51d11d8bde9af"
MIB_OF_A_256 = "d1f7ef56d0fdafb1edba2d11dba3f223362d4c45a1e33dddff97e712738e7c20"

AVALANCHE_MIN_BITS = 100

MSG = bytes(range(256)) * 3


@pytest.mark.parametrize(
    "x,expected",
    [
        (0x0000000000000000, 0x0000000000000000),
        (0x0000000000000001, 0x0000000000000004),
        (0x0123456789ABCDEF, 0x0487E802B5DF5D0C),
        (0x7FFFFFFFFFFFFFFF, 0x0000000000000000),
        (0x8000000000000000, 0x0000000000000000),
        (0xFEDCBA9876543210, 0x844E4CA16ED6FC00),
        (0xFFFFFFFFFFFFFFFF, 0xFFFFFFFFFFFFFFFC),
    ],
)
def test_hltm_known_values(x, expected):
    assert hltm(x) == expected


def test_phi_small_state():
    assert phi((1, 2, 3, 4)) == (0x80004, 0x808, 0x4000000C, 0x70)


def test_permute_stays_in_64_bits():
    s = permute((0xFFFFFFFFFFFFFFFF,) * 4)
    assert len(s) == 4
    assert all(0 <= w < 2 ** 64 for w in s)
    assert permute((0, 0, 0, 0)) == (0, 0, 0, 0)


def test_empty_vector():
    assert fract256(b"").hex() == EMPTY_256
    assert Fract().hexdigest() == EMPTY_256
    assert fract512(b"").hex() == EMPTY_512
    assert fract.fract256_hex(b"") == EMPTY_256
    assert fract.fract512_hex(b"") == Fract().hexdigest512() == EMPTY_512


def test_known_vectors():
    assert fract256(b"hello cat").hex() == HELLO_CAT_256
    assert fract512(b"hello world").hex() == HELLO_WORLD_512
    # Exactly one rate block: padding goes into a fresh block
    assert fract256(b"0123456789abcdef").hex() == ONE_BLOCK_256


def test_hello_cat_chunked():
    h = Fract()
    h.update(b"hello ")
    h.update(b"cat")
    assert h.finalize() == Fract.hash(b"hello cat")


@pytest.mark.parametrize("length", [0, 1, 15, 16, 17, 31, 32, 33, 100, 700])
@pytest.mark.parametrize("step", [1, 3, 7, 15, 16, 17, 64])
def test_chunked_equals_oneshot(length, step):
    msg = MSG[:length]
    h = Fract()
    for i in range(0, length, step):
        h.update(msg[i:i + step])
    assert h.finalize() == fract256(msg)


@pytest.mark.parametrize("chunks", [
    [b"", b"abc", b""],
    [b"a" * 5, b"b" * 11, b"c" * 16, b"d"],
    [b"x" * 15, b"y", b"z" * 15],
    [b"q" * 40],
])
def test_uneven_chunks(chunks):
    h = Fract()
    for c in chunks:
        h.update(c)
    msg = b"".join(chunks)
    assert h.total_len == len(msg)
    assert h.finalize512() == fract512(msg)


def test_bytes_like_inputs():
    ref = fract256(b"hello cat")
    assert Fract().update(bytearray(b"hello cat")).finalize() == ref
    assert Fract().update(memoryview(b"xxhello catxx")[2:-2]).finalize() == ref


def test_str_rejected_without_mutation():
    h = Fract().update(b"abc")
    with pytest.raises(TypeError):
        h.update("abc")
    assert h.total_len == 3
    assert h.finalize() == fract256(b"abc")


@pytest.mark.parametrize("msg", [b"", b"abc", b"hello world", MSG])
def test_output_lengths_and_mode_consistency(msg):
    d256 = fract256(msg)
    d512 = fract512(msg)
    assert len(d256) == 32
    assert len(d512) == 64
    assert d512[:32] == d256


def test_deterministic():
    msg = b"test data for consistency"
    assert fract256(msg) == fract256(msg)
    assert fract512(msg) == fract512(msg)


def test_update_after_finalize_raises():
    h = Fract().update(b"abc")
    h.finalize()
    assert h.finalized
    before = h.state_snapshot()
    with pytest.raises(FinalizedError):
        h.update(b"more")
    with pytest.raises(ValueError):
        h.update(b"")
    assert h.state_snapshot() == before


def test_second_finalize_raises():
    h = Fract()
    h.finalize512()
    with pytest.raises(FinalizedError):
        h.finalize()
    with pytest.raises(FinalizedError):
        h.copy()


def test_avalanche():
    d1 = fract256(b"The quick brown fox jumps over the lazy dog")
    d2 = fract256(b"The quick brown fox jumps over the lazy dof")
    assert d1 != d2
    diff_bits = sum(bin(a ^ b).count("1") for a, b in zip(d1, d2))
    assert diff_bits > AVALANCHE_MIN_BITS


def test_large_input():
    data = b"\x41" * (1024 * 1024)
    d = fract256(data)
    assert len(d) == 32
    assert d.hex() == MIB_OF_A_256


def test_copy_branches_independently():
    prefix = Fract().update(b"hello ")
    other = prefix.copy()
    prefix.update(b"cat")
    other.update(b"dog")
    assert prefix.finalize() == fract256(b"hello cat")
    assert other.finalize() == fract256(b"hello dog")


def test_copy_keeps_subclass():
    class Tagged(Fract):
        pass

    h = Tagged().update(b"hello ")
    c = h.copy()
    assert type(c) is Tagged
    assert c.update(b"cat").finalize() == fract256(b"hello cat")


def test_new_starts_at_iv():
    h = fract.new()
    assert h.state_snapshot() == IV
    assert h.total_len == 0
    assert not h.finalized


def test_from_state_iv_matches_new():
    h = Fract.from_state(IV)
    assert h.update(b"hello cat").finalize() == fract256(b"hello cat")


def test_from_state_probes_permutation():
    h = Fract.from_state([1, 2, 3, 4])
    assert h.state_snapshot() == (1, 2, 3, 4)
    # A full zero block leaves the rate untouched, so one permutation runs
    h.update(bytes(RATE))
    assert h.state_snapshot() == permute((1, 2, 3, 4))


@pytest.mark.parametrize("words", [
    [1, 2, 3],
    [1, 2, 3, 4, 5],
    [1, 2, 3, -1],
    [1, 2, 3, 2 ** 64],
    [1, 2, 3, "4"],
    [True, 2, 3, 4],
])
def test_from_state_rejects_bad_words(words):
    with pytest.raises(ValueError):
        Fract.from_state(words)
