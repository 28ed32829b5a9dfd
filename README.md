# neoheap

`neoheap` is a small first-fit heap allocator that works inside a writable byte
buffer you give it (a `bytearray`, or anything else that exposes a writable
buffer). The buffer holds a header, a table of free lists grouped by size
class, and chunks that carry a size tag at both ends. When a chunk is freed it
is merged with any free neighbours. Allocations are identified by integer
offsets into the buffer.

Words are 8 bytes wide and chunk sizes are rounded up to multiples of 16.

## Installation

```
pip install .
```

Install with the test extra to run the test suite:

```
pip install .[test]
pytest
```

## Usage

```python
from neoheap.heap import Heap, OutOfMemory

buffer = bytearray(256)
heap = Heap(buffer, 128, 7)      # manage the first 128 bytes, 7 free-list slots
heap.extend(128)                 # grow the managed region into the rest of the buffer

offset = heap.alloc(8)           # offset of the new chunk's data area
print(heap.chunk_size(offset), heap.is_free(offset))

offset = heap.realloc(offset, 64)  # grow in place or move the chunk
heap.free(offset)

for start, size in heap.free_chunks():
    print(start, size)
```

### API

All of it lives in `neoheap.heap`.

- `Heap(buffer, size, hash_size)` sets up a heap over the first `size` bytes of
  `buffer`, with `hash_size` free-list slots. It raises `TypeError` for a
  read-only buffer, and `ValueError` when `hash_size` is not positive, `size`
  lies outside the buffer, or `size` is smaller than
  `16 + 8 * hash_size + 32` bytes.
- `Heap.extend(increment)` grows the managed region by `increment` bytes
  (rounded down to a multiple of 16), merging it with a free last chunk if
  there is one. It raises `ValueError` when `increment` is under 32 bytes or
  the buffer has no room for it.
- `Heap.alloc(size)` returns the offset of a new chunk of at least `size`
  bytes; a size of 0 allocates 16 bytes. It raises `OutOfMemory` when no free
  chunk is large enough and `ValueError` for a negative size.
- `Heap.free(offset)` releases a chunk and merges it with free neighbours.
  `free(None)` does nothing.
- `Heap.realloc(offset, size)` resizes a chunk and returns its offset, which
  may be a new one, in which case the old contents are copied. With
  `offset=None` it allocates; with `size=0` it frees and returns `None`.
- `Heap.chunk_size(offset)` and `Heap.is_free(offset)` report a chunk's state.
- `Heap.free_chunks()` yields `(offset, size)` for every chunk marked free, in
  address order.
- `Heap.size` and `Heap.hash_size` give the managed size and the number of
  free-list slots.

`free`, `realloc`, `chunk_size` and `is_free` raise `HeapError` for an offset
that is not a chunk of the heap; `free` and `realloc` also raise it for a chunk
that is already free. `OutOfMemory` is a subclass of `HeapError`.

Free chunks whose size class falls beyond the free-list table are not linked
into any list; `alloc` cannot hand them out until they are merged with a
neighbour.

## Demo

```
neoheap-demo [size]
```

The demo (`neoheap.demo`) builds a heap of `size` bytes (128 by default) in a
buffer twice that size, extends it by `size`, allocates 8 bytes, reallocates
the chunk to 64 bytes and frees it. It prints nothing; it exits with status 0
on success, or 1 to 4 for the step that failed (create, extend, alloc,
realloc). The same exercise is available as `neoheap.demo.run_demo(size)`,
which returns that status.

## Limits

The heap only manages bytes inside the buffer; it does not allocate Python
objects or system memory, and it is not safe for use from several threads at
once without outside locking.