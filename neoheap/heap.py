"""A first-fit heap allocator that carves a caller-supplied byte buffer into chunks.

Layout of the buffer::

    [heap size | hash size][hash table slots ...][head|data ...|foot][head|data|foot]...

Every chunk carries a head note and a foot note, each one word wide, holding
the chunk's data size with the lowest bit set while the chunk is free.
Free chunks are grouped into size classes by the number of leading zero bits
of their size relative to the heap size; chunks whose class falls beyond the
table are left unlinked and only come back into use through coalescing.
"""

from __future__ import annotations

import struct
from collections.abc import Iterator

WORD = 8
ALIGN = WORD * 8 // 4
MASK = ALIGN - 1
FREE_BIT = 1
HEADER_SIZE = 2 * WORD
MIN_CHUNK_SIZE = 4 * WORD

_WORD_BITS = WORD * 8
_NOTE = struct.Struct("<Q")
_HEADER = struct.Struct("<QQ")


def _align(size: int) -> int:
    return (size + MASK) & ~MASK


def _clz(value: int) -> int:
    return _WORD_BITS - value.bit_length()


class HeapError(Exception):
    """Raised when the heap is used inconsistently."""


class OutOfMemory(HeapError):
    """Raised when a request cannot be satisfied from the heap."""


class Heap:
    """A heap living inside a writable buffer; chunks are addressed by byte offset."""

    def __init__(self, buffer, size: int, hash_size: int) -> None:
        view = memoryview(buffer).cast("B")
        if view.readonly:
            raise TypeError("heap buffer must be writable")
        if hash_size <= 0:
            raise ValueError("hash_size must be positive")
        if size < 0 or size > len(view):
            raise ValueError("size must lie within the buffer")
        if size < HEADER_SIZE + hash_size * WORD + MIN_CHUNK_SIZE:
            raise ValueError("buffer too small for a heap with this hash size")

        self._view = view
        self.hash_size = hash_size
        self.size = (size - self._begin) & ~MASK
        self._buckets: list[list[int]] = [[] for _ in range(hash_size)]
        self._bucket_of: dict[int, int] = {}

        self._write_header()
        view[HEADER_SIZE:self._begin] = bytes(hash_size * WORD)

        first = self._begin + WORD
        self._set_notes(first, self.size - 2 * WORD, free=True)
        self._link(first)

    def __repr__(self) -> str:
        return f"Heap(size={self.size}, hash_size={self.hash_size})"

    # -- public interface -------------------------------------------------

    def extend(self, increment: int) -> None:
        """Grow the heap by ``increment`` bytes taken from the buffer beyond its end."""
        if increment < MIN_CHUNK_SIZE:
            raise ValueError(f"increment must be at least {MIN_CHUNK_SIZE} bytes")
        increment &= ~MASK
        end = self._begin + self.size
        if end + increment > len(self._view):
            raise ValueError("buffer too small to extend the heap")

        last_foot = self._read_note(end - WORD)
        if last_foot & FREE_BIT:
            last_size = last_foot & ~MASK
            last = end - WORD - last_size
            self._unlink(last)
            self.size += increment
            self._set_notes(last, last_size + increment, free=True)
            self._put(last)
        else:
            chunk = end + WORD
            self.size += increment
            self._set_notes(chunk, increment - 2 * WORD, free=True)
            self._put(chunk)
        self._write_header()

    def alloc(self, size: int) -> int:
        """Allocate at least ``size`` bytes and return the offset of the data."""
        if size < 0:
            raise ValueError("size must not be negative")
        size = _align(size) if size else ALIGN
        if size.bit_length() > self.size.bit_length():
            raise OutOfMemory(f"cannot allocate {size} bytes")

        bucket = next(
            (self._buckets[b] for b in range(self._bucket_index(size), -1, -1) if self._buckets[b]),
            None,
        )
        if bucket is None:
            raise OutOfMemory("no free chunk available")

        chunk = next((c for c in bucket if self._size_of(c) >= size), None)
        if chunk is None:
            raise OutOfMemory(f"no free chunk of {size} bytes")

        self._unlink(chunk)
        if self._size_of(chunk) - size < MIN_CHUNK_SIZE:
            self._set_notes(chunk, self._size_of(chunk), free=False)
            return chunk
        return self._split(chunk, size)

    def free(self, offset: int | None) -> None:
        """Release a chunk, merging it with free neighbours on both sides."""
        if offset is None:
            return
        self._check_allocated(offset)
        size = self._size_of(offset)
        following = self._absorb_following(offset)
        start = self._absorb_preceding(offset)
        self._set_notes(start, size + following + (offset - start), free=True)
        self._put(start)

    def realloc(self, offset: int | None, size: int) -> int | None:
        """Resize a chunk, in place where possible, otherwise by moving its data."""
        if offset is None:
            return self.alloc(size)
        self._check_allocated(offset)
        if size == 0:
            self.free(offset)
            return None
        if size < 0:
            raise ValueError("size must not be negative")

        size = _align(size)
        if size.bit_length() > self.size.bit_length():
            raise OutOfMemory(f"cannot allocate {size} bytes")

        current = self._size_of(offset)
        if size < current:
            return self._split(offset, size)
        if size == current:
            return offset

        grown = current + self._absorb_following(offset)
        self._set_notes(offset, grown, free=False)
        if grown >= size:
            if grown - size < MIN_CHUNK_SIZE:
                return offset
            return self._split(offset, size)

        moved = self.alloc(size)
        self._view[moved:moved + current] = self._view[offset:offset + current]
        self._put(offset)
        return moved

    def chunk_size(self, offset: int) -> int:
        """Return the data size of the chunk at ``offset``."""
        self._check_offset(offset)
        return self._size_of(offset)

    def is_free(self, offset: int) -> bool:
        """Tell whether the chunk at ``offset`` is marked free."""
        self._check_offset(offset)
        return bool(self._read_note(offset - WORD) & FREE_BIT)

    def free_chunks(self) -> Iterator[tuple[int, int]]:
        """Yield ``(offset, size)`` for every free chunk, in address order."""
        for offset, size, free in self._chunks():
            if free:
                yield offset, size

    # -- internals --------------------------------------------------------

    @property
    def _begin(self) -> int:
        return HEADER_SIZE + self.hash_size * WORD

    def _write_header(self) -> None:
        _HEADER.pack_into(self._view, 0, self.size, self.hash_size)

    def _read_note(self, position: int) -> int:
        return _NOTE.unpack_from(self._view, position)[0]

    def _size_of(self, offset: int) -> int:
        return self._read_note(offset - WORD) & ~MASK

    def _set_notes(self, offset: int, size: int, *, free: bool) -> None:
        value = size | (FREE_BIT if free else 0)
        _NOTE.pack_into(self._view, offset - WORD, value)
        _NOTE.pack_into(self._view, offset + size, value)

    def _size_class(self, size: int) -> int:
        return _clz(size) - _clz(self.size)

    def _bucket_index(self, size: int) -> int:
        return min(self._size_class(size), self.hash_size - 1)

    def _link(self, offset: int) -> None:
        index = self._bucket_index(self._size_of(offset))
        self._buckets[index].insert(0, offset)
        self._bucket_of[offset] = index

    def _unlink(self, offset: int) -> None:
        index = self._bucket_of.pop(offset, None)
        if index is not None:
            self._buckets[index].remove(offset)

    def _put(self, offset: int) -> None:
        size = self._size_of(offset)
        self._set_notes(offset, size, free=True)
        if self._size_class(size) <= self.hash_size:
            self._link(offset)

    def _split(self, offset: int, size: int) -> int:
        rest = self._size_of(offset) - size - 2 * WORD
        self._set_notes(offset, size, free=False)
        tail = offset + size + 2 * WORD
        self._set_notes(tail, rest, free=True)
        self._link(tail)
        return offset

    def _is_last(self, offset: int, size: int) -> bool:
        return _align(offset + size + WORD - self._begin) >= self.size

    def _absorb_following(self, offset: int) -> int:
        extra = 0
        current, size = offset, self._size_of(offset)
        while not self._is_last(current, size):
            following = current + size + 2 * WORD
            if not self._read_note(following - WORD) & FREE_BIT:
                break
            current, size = following, self._size_of(following)
            self._unlink(current)
            extra += size + 2 * WORD
        return extra

    def _absorb_preceding(self, offset: int) -> int:
        start = offset
        while start - WORD > self._begin:
            foot = self._read_note(start - 2 * WORD)
            if not foot & FREE_BIT:
                break
            start -= 2 * WORD + (foot & ~MASK)
            self._unlink(start)
        return start

    def _chunks(self) -> Iterator[tuple[int, int, bool]]:
        offset = self._begin + WORD
        end = self._begin + self.size
        while offset < end:
            note = self._read_note(offset - WORD)
            size = note & ~MASK
            yield offset, size, bool(note & FREE_BIT)
            offset += size + 2 * WORD

    def _check_offset(self, offset: int) -> None:
        first = self._begin + WORD
        if not first <= offset < self._begin + self.size or (offset - first) % ALIGN:
            raise HeapError(f"offset {offset} is not a chunk of this heap")

    def _check_allocated(self, offset: int) -> None:
        self._check_offset(offset)
        if self._read_note(offset - WORD) & FREE_BIT:
            raise HeapError(f"chunk at offset {offset} is not allocated")