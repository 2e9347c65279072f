"""Block-wise strided traversal of a structured array.

Array storage is not guaranteed contiguous per field, and a memory-mapped
file should never be copied as a whole. The iterator therefore walks the
array in blocks of at most ``block_size`` rows; each block is a zero-copy
view carrying its base address, byte stride and row count.

Inside a block the consumer reads fields with an explicit per-field
protocol: for every row, call ``window(field)`` then ``advance(field)``
once per field, in field order. The last advance of a row moves to the
next row, and the last row of a block fetches the next block.

Block access and the per-field protocol share one cursor, so an iterator
serves one style of consumer: once ``next_block()`` has been called the
per-field calls raise UseError, and vice versa.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from nppoints.contracts import IteratorError, UseError
from nppoints.io.loader import ArrayHandle
from nppoints.io.schema import FieldDescriptor

__all__ = ['Block', 'StridedIterator']

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Block:
    """A run of consecutive rows viewed in place."""
    data: np.ndarray
    start: int
    stride: int
    count: int

    @property
    def address(self) -> int:
        """Base address of the first row of the block."""
        return self.data.__array_interface__["data"][0]


class StridedIterator:
    """Cursor over an ArrayHandle's rows and fields.

    Parameters
    ----------
    handle : ArrayHandle
        Loaded array; must outlive the iterator.
    fields : sequence of FieldDescriptor
        Resolved schema, in iteration order.
    block_size : int, default 65536
        Maximum number of rows per block.

    Notes
    -----
    - ``open()`` acquires the iteration state once; ``close()`` drops it
      and may be called any number of times.
    - Windows are returned in native byte order, whatever the file's order.
    - Not thread-safe.

    Examples
    --------
    >>> with StridedIterator(handle, fields, block_size=1024) as it:
    ...     while not it.exhausted:
    ...         row = {}
    ...         for f in fields:
    ...             row[f.canonical_name] = it.window(f)
    ...             it.advance(f)
    """

    def __init__(self, handle: ArrayHandle, fields: Sequence[FieldDescriptor],
                 block_size: int = 65536):
        if block_size < 1:
            raise ValueError(f"block_size must be >= 1, got {block_size}")
        self.handle = handle
        self.fields = tuple(fields)
        self.block_size = block_size

        self._array: Optional[np.ndarray] = None
        self._opened = False
        self._block: Optional[Block] = None
        self._views: list[np.ndarray] = []
        self._next_start = 0
        self._row = 0
        self._field_pos = 0
        self._mode: Optional[str] = None
        self.position = 0

    # ------------------------------------------------------------------
    # Acquisition and release
    # ------------------------------------------------------------------

    def open(self) -> "StridedIterator":
        """Acquire the iteration state and position on the first block.

        Raises
        ------
        IteratorError
            Handle already released, array not rank 1, object fields, no
            fields to walk, or the iterator was opened before.
        """
        path = self.handle.path
        if self._opened:
            raise IteratorError(f"Iterator for '{path}' was already opened", path=path)
        if self.handle.released:
            raise IteratorError(
                f"Unable to create iterator from array in '{path}': array released", path=path)
        array = self.handle.array
        if array.ndim != 1:
            raise IteratorError(
                f"Unable to create iterator from array in '{path}': rank {array.ndim}", path=path)
        if array.dtype.hasobject:
            raise IteratorError(
                f"Unable to create iterator from array in '{path}': object fields", path=path)
        if not self.fields:
            raise IteratorError(
                f"Unable to create iterator from array in '{path}': no fields", path=path)

        self._array = array
        self._opened = True
        self._next_start = 0
        self._load_block(self._fetch_block())
        logger.debug("Opened iterator over '%s': %d rows, block_size=%d",
                     path, array.shape[0], self.block_size)
        return self

    def close(self) -> None:
        """Release the iteration state. Safe to call more than once."""
        if self._array is None:
            return
        self._array = None
        self._block = None
        self._views = []
        logger.debug("Closed iterator over '%s' at row %d", self.handle.path, self.position)

    @property
    def closed(self) -> bool:
        return self._opened and self._array is None

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # ------------------------------------------------------------------
    # Block access
    # ------------------------------------------------------------------

    def next_block(self) -> Optional[Block]:
        """Move to the next block of rows and return it, or None at end-of-data.

        Blocks are basic slices of the array, so they share its memory. The
        returned block becomes ``block``.

        Raises
        ------
        UseError
            The per-field protocol has already been used on this iterator.
        """
        self._require_open()
        if self._mode == "rows":
            path = self.handle.path
            raise UseError(
                f"Cannot take blocks from iterator over '{path}' after reading "
                f"fields at row {self.position}", path=path)
        self._mode = "blocks"
        block = self._fetch_block()
        self._load_block(block)
        return block

    def _fetch_block(self) -> Optional[Block]:
        array = self._require_open()
        start = self._next_start
        total = array.shape[0]
        if start >= total:
            return None
        stop = min(start + self.block_size, total)
        data = array[start:stop]
        self._next_start = stop
        return Block(data=data, start=start, stride=data.strides[0], count=stop - start)

    @property
    def block(self) -> Optional[Block]:
        """Block holding the current row; None once exhausted."""
        return self._block

    @property
    def exhausted(self) -> bool:
        self._require_open()
        return self._block is None

    # ------------------------------------------------------------------
    # Per-field protocol
    # ------------------------------------------------------------------

    def window(self, field: FieldDescriptor) -> bytes:
        """Bytes of ``field`` for the current row, in native byte order."""
        self._check_turn(field)
        self._mode = "rows"
        value = self._views[self._field_pos][self._row]
        return value.tobytes()

    def advance(self, field: FieldDescriptor) -> None:
        """Move past ``field`` on the current row.

        After the last field the cursor moves to the next row, fetching the
        next block when the current one is used up.
        """
        self._check_turn(field)
        self._mode = "rows"
        self._field_pos += 1
        if self._field_pos < len(self.fields):
            return
        self._field_pos = 0
        self._row += 1
        self.position += 1
        if self._row >= self._block.count:
            self._load_block(self._fetch_block())

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_open(self) -> np.ndarray:
        if self._array is None:
            state = "closed" if self._opened else "not opened"
            raise IteratorError(f"Iterator over '{self.handle.path}' is {state}",
                                path=self.handle.path)
        return self._array

    def _load_block(self, block: Optional[Block]) -> None:
        self._block = block
        self._row = 0
        if block is None:
            self._views = []
            return
        self._views = [block.data[f.raw_name] for f in self.fields]

    def _check_turn(self, field: FieldDescriptor) -> None:
        self._require_open()
        path = self.handle.path
        if self._mode == "blocks":
            raise UseError(
                f"Cannot read fields from iterator over '{path}' after taking blocks",
                path=path, field=field.raw_name)
        if self._block is None:
            raise UseError(f"Iterator over '{path}' is exhausted", path=path,
                           field=field.raw_name)
        expected = self.fields[self._field_pos]
        if field.index != expected.index:
            raise UseError(
                f"Field '{field.raw_name}' used out of order in '{path}'; "
                f"expected '{expected.raw_name}'", path=path, field=field.raw_name)
