"""
Command-line front end for FRACT, in the style of sha256sum.

  fract [OPTIONS] [FILE]...       print checksums
  fract -c [OPTIONS] FILE...      verify checksums listed in FILE(s)
  fract bench [OPTIONS]           rough throughput numbers
"""
import argparse
import logging
import string
import sys
import time
from typing import BinaryIO, List, Optional, Sequence

from cryptography.hazmat.primitives import hashes

from fract import DIGEST_SIZE, DIGEST_SIZE_512, Fract

logger = logging.getLogger(__name__)

# Read files in 64 KiB chunks
CHUNK_SIZE: int = 65536

BENCH_SIZE: int = 1048576
BENCH_ITERATIONS: int = 100
BENCH_CHUNK: int = 4096
BENCH_WARMUP: int = 10

BANNER = r"""
    +--------------------------------------------------------------+
    |   FRACT  -  hybrid logistic-tent sponge hash (256/512-bit)   |
    +--------------------------------------------------------------+
"""

_HEX = frozenset(string.hexdigits)


# SHA-2 wrapper using cryptography
class SHA2:
    def __init__(self, wide: bool = False):
        self._algorithm = hashes.SHA512() if wide else hashes.SHA256()
        self.digest_size = self._algorithm.digest_size
        self._h = hashes.Hash(self._algorithm)

    def update(self, data: bytes):
        self._h.update(data)

    def digest(self) -> bytes:
        return self._h.finalize()


# Same interface on top of the FRACT engine
class FractHasher:
    def __init__(self, wide: bool = False):
        self._wide = wide
        self.digest_size = DIGEST_SIZE_512 if wide else DIGEST_SIZE
        self._h = Fract()

    def update(self, data: bytes):
        self._h.update(data)

    def digest(self) -> bytes:
        return self._h.finalize512() if self._wide else self._h.finalize()


_ALGORITHMS = {
    "fract": FractHasher,
    "sha2": SHA2,
}


def new_hasher(algorithm: str, wide: bool):
    return _ALGORITHMS[algorithm](wide)


def hash_stream(stream: BinaryIO, algorithm: str = "fract", wide: bool = False) -> bytes:
    """Hash a binary stream chunk by chunk and return the raw digest."""
    h = new_hasher(algorithm, wide)
    while True:
        chunk = stream.read(CHUNK_SIZE)
        if not chunk:
            break
        h.update(chunk)
    return h.digest()


def hash_path(name: str, algorithm: str = "fract", wide: bool = False) -> bytes:
    """Hash a named file; '-' means standard input."""
    if name == "-":
        return hash_stream(sys.stdin.buffer, algorithm, wide)
    with open(name, "rb") as f:
        return hash_stream(f, algorithm, wide)


def format_line(hexdigest: str, name: str, binary: bool = False) -> str:
    return "%s %s%s" % (hexdigest, "*" if binary else " ", name)


def parse_check_line(line: str):
    """Split a checksum line into (hexdigest, filename).

    Returns None for lines that are not '<64|128 hex> <space|*><name>'.
    """
    parts = line.split(" ", 1)
    if len(parts) != 2:
        return None
    expected, rest = parts
    if len(expected) not in (64, 128) or not set(expected) <= _HEX:
        return None
    name = rest[1:] if rest.startswith("*") else rest.lstrip()
    if not name:
        return None
    return expected.lower(), name


# =========================================================
#   MODES
# =========================================================

def hash_files(files: Sequence[str], args: argparse.Namespace) -> bool:
    ok = True
    for name in files:
        try:
            digest = hash_path(name, args.algorithm, args.use_512)
        except OSError as e:
            logger.error("%s: %s", name, e.strerror or e)
            ok = False
            continue
        print(format_line(digest.hex(), name, args.binary))
    return ok


def check_file(path: str, args: argparse.Namespace) -> bool:
    try:
        with open(path, "r", encoding="utf-8") as f:
            lines = f.read().splitlines()
    except (OSError, UnicodeDecodeError) as e:
        logger.error("%s: %s", path, e)
        return False

    mismatched = 0
    unreadable = 0
    malformed = 0
    for line_num, raw in enumerate(lines, 1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        parsed = parse_check_line(line)
        if parsed is None:
            malformed += 1
            if args.warn:
                logger.warning("%s:%d: improperly formatted checksum line", path, line_num)
            continue
        expected, name = parsed
        wide = len(expected) == 128
        try:
            actual = hash_path(name, args.algorithm, wide).hex()
        except OSError as e:
            logger.debug("%s: %s", name, e)
            print("%s: FAILED open or read" % name)
            unreadable += 1
            continue
        if actual == expected:
            if args.verbose:
                print("%s: OK" % name)
        else:
            print("%s: FAILED" % name)
            logger.debug("  expected: %s", expected)
            logger.debug("  actual:   %s", actual)
            mismatched += 1

    if malformed and args.warn:
        logger.warning("WARNING: %d line%s improperly formatted", malformed, "" if malformed == 1 else "s")
    if unreadable:
        logger.warning("WARNING: %d listed file%s could not be read", unreadable, "" if unreadable == 1 else "s")
    if mismatched:
        logger.warning("WARNING: %d computed checksum%s did NOT match",
                       mismatched, "" if mismatched == 1 else "s")
    return not (mismatched or unreadable)


def run_benchmark(size: int, iterations: int, use_512: bool, chunked: bool) -> None:
    print("=== Fract Benchmark ===")
    print("Data size: %d bytes" % size)
    print("Iterations: %d" % iterations)
    print("Mode: %s" % ("512-bit" if use_512 else "256-bit"))
    print("Method: %s" % ("chunked" if chunked else "single-pass"))
    print()

    data = b"\x61" * size
    chunk = min(BENCH_CHUNK, size) or 1

    def one() -> bytes:
        h = FractHasher(use_512)
        if chunked:
            for i in range(0, size, chunk):
                h.update(data[i:i + chunk])
        else:
            h.update(data)
        return h.digest()

    for _ in range(BENCH_WARMUP):
        one()

    start = time.perf_counter()
    digest = b""
    for _ in range(iterations):
        digest = one()
    elapsed = time.perf_counter() - start

    total = size * iterations
    print("Total time: %.3fs" % elapsed)
    if elapsed > 0 and total:
        print("Throughput: %.2f MiB/s" % (total / elapsed / (1024 * 1024)))
        print("Nanoseconds per byte: %.2f" % (elapsed * 1e9 / total))
    print("Last hash: %s" % digest[:8].hex())
    print()

    # Baseline: SHA-256 from cryptography on the same data
    start = time.perf_counter()
    for _ in range(iterations):
        h = SHA2()
        h.update(data)
        h.digest()
    base = time.perf_counter() - start
    print("=== Baseline (SHA-256, cryptography) ===")
    print("Total time: %.3fs" % base)
    if base > 0 and total:
        print("Throughput: %.2f MiB/s" % (total / base / (1024 * 1024)))


# =========================================================
#   ARGUMENTS
# =========================================================

def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="fract",
        description="Print or check FRACT-256/512 checksums, like sha256sum.",
        epilog="Run 'fract bench --help' for the benchmark options.",
    )
    p.add_argument("files", nargs="*", metavar="FILE",
                   help="file(s) to hash; '-' or none reads standard input")
    p.add_argument("-5", "--512", dest="use_512", action="store_true",
                   help="use the 512-bit output")
    p.add_argument("-c", "--check", action="store_true",
                   help="read checksums from the FILEs and check them")
    p.add_argument("-v", "--verbose", action="store_true",
                   help="print OK lines when checking and debug details")
    p.add_argument("-b", "--binary", action="store_true",
                   help="mark output lines with '*' (binary mode)")
    p.add_argument("-w", "--warn", action="store_true",
                   help="warn about improperly formatted checksum lines")
    p.add_argument("-a", "--algorithm", choices=sorted(_ALGORITHMS), default="fract",
                   help="hash family (default: fract)")
    return p


def build_bench_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="fract bench", description="Run built-in benchmarks.")
    p.add_argument("-s", "--size", type=int, default=BENCH_SIZE, help="test data size in bytes")
    p.add_argument("-i", "--iter", dest="iterations", type=int, default=BENCH_ITERATIONS,
                   help="number of iterations")
    p.add_argument("-5", "--512", dest="use_512", action="store_true", help="test 512-bit mode")
    p.add_argument("-c", "--chunked", action="store_true", help="test incremental hashing")
    return p


def _setup_logging(verbose: bool) -> None:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("fract: %(message)s"))
    logger.handlers[:] = [handler]
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)


def main(argv: Optional[List[str]] = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)

    if argv and argv[0] == "bench":
        bargs = build_bench_parser().parse_args(argv[1:])
        _setup_logging(False)
        if bargs.size < 0 or bargs.iterations < 1:
            logger.error("size must be >= 0 and iterations >= 1")
            return 1
        run_benchmark(bargs.size, bargs.iterations, bargs.use_512, bargs.chunked)
        return 0

    args = build_parser().parse_args(argv)
    _setup_logging(args.verbose)

    if args.check:
        if not args.files:
            logger.error("--check requires at least one file argument")
            return 1
        results = [check_file(path, args) for path in args.files]
        return 0 if all(results) else 1

    if not args.files:
        if sys.stdin.isatty():
            print(BANNER)
            print("Usage: fract [OPTIONS] [FILE]...")
            print("       fract bench [OPTIONS]")
            print()
            print("Run 'fract --help' for detailed usage information.")
            return 0
        files = ["-"]
    else:
        files = args.files

    return 0 if hash_files(files, args) else 1


if __name__ == "__main__":
    sys.exit(main())
