"""Exercise a heap through create, extend, alloc, realloc and free."""

from __future__ import annotations

import argparse
import sys

from neoheap.heap import Heap, HeapError

DEFAULT_SIZE = 128
HASH_SIZE = 7

CREATE_FAILED = 1
EXTEND_FAILED = 2
ALLOC_FAILED = 3
REALLOC_FAILED = 4


def run_demo(size: int = DEFAULT_SIZE) -> int:
    """Run the heap exercise; return 0 on success or the number of the failing step."""
    buffer = bytearray(b"\xff" * (size * 2))
    try:
        heap = Heap(buffer, size, HASH_SIZE)
    except (ValueError, HeapError):
        return CREATE_FAILED
    try:
        heap.extend(size)
    except (ValueError, HeapError):
        return EXTEND_FAILED
    try:
        offset = heap.alloc(8)
    except HeapError:
        return ALLOC_FAILED
    try:
        offset = heap.realloc(offset, 64)
    except HeapError:
        return REALLOC_FAILED
    heap.free(offset)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Exercise a heap built over a byte buffer.")
    parser.add_argument(
        "size",
        nargs="?",
        type=int,
        default=DEFAULT_SIZE,
        help="initial heap size in bytes (the buffer is twice as large)",
    )
    args = parser.parse_args(argv)
    if args.size < 0:
        parser.error("size must not be negative")
    return run_demo(args.size)


if __name__ == "__main__":
    sys.exit(main())