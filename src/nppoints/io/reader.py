"""Stream points out of a structured NumPy array file.

NumpyReader ties the loader, schema resolver and strided iterator together
behind a pull interface: a consumer asks for one record at a time and gets
each field written into its sink under the field's canonical dimension.

Lifecycle
=========
::

    UNOPENED --load()--> SCHEMA_READY --ready()--> STREAMING --exhausted--> DONE
    (any state) --close()--> CLOSED

Calling an operation from the wrong state raises UseError. ``close()`` is
valid from any state and idempotent. A failed ``load()`` or ``ready()``
ends the session in CLOSED.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Iterator, Optional, TYPE_CHECKING

from nppoints.contracts import UseError
from nppoints.dimensions import DimensionRegistry, TypeTag
from nppoints.io.iterator import StridedIterator
from nppoints.io.loader import ArrayHandle, NumpyArrayLoader
from nppoints.io.schema import FieldDescriptor, SchemaResolver
from nppoints.logs import get_logger
from nppoints.points import PointRecord, PointView
from nppoints.schemas import resolve_config

if TYPE_CHECKING:
    from nppoints.schemas import InternalConfig

__all__ = ['NumpyReader', 'ReaderState']

logger = logging.getLogger(__name__)


class ReaderState(str, Enum):
    UNOPENED = "unopened"
    SCHEMA_READY = "schema_ready"
    STREAMING = "streaming"
    DONE = "done"
    CLOSED = "closed"


class NumpyReader:
    """Pull-based point reader over one .npy/.npz file.

    Parameters
    ----------
    filename : Path or str
        Array file to read.
    config : InternalConfig, optional
        Runtime configuration; ``resolve_config()`` defaults when omitted.
    registry : DimensionRegistry, optional
        Dimension table shared with the host; a fresh one when omitted.
    log : logging.Logger, optional
        Logger for this session and its loader.

    Notes
    -----
    - One reader owns its ArrayHandle, schema and cursor; do not share it
      across threads.
    - The array is loaded (or memory-mapped) entirely in ``load()``; record
      production never blocks on I/O except for page faults on the map.

    Examples
    --------
    >>> reader = NumpyReader("points.npy")
    >>> reader.load()
    >>> reader.ready()
    >>> view = PointView(reader.registry)
    >>> reader.read(view, reader.total_count())
    >>> reader.close()

    Or, with the context manager doing load/ready/close:

    >>> with NumpyReader("points.npy") as reader:
    ...     for point in reader.points():
    ...         print(point["X"])
    """

    def __init__(self, filename: Path | str, config: Optional["InternalConfig"] = None,
                 registry: Optional[DimensionRegistry] = None,
                 log: Optional[logging.Logger] = None):
        self.filename = str(filename)
        self.config = config if config is not None else resolve_config()
        self.registry = registry if registry is not None else DimensionRegistry()
        self.log = log or get_logger(__name__, self.config)

        self._loader = NumpyArrayLoader(self.config, log=self.log)
        self._resolver = SchemaResolver(
            self.registry,
            sanitize_chars=self.config.dimensions.sanitize_chars,
            log=self.log,
        )
        self._handle: Optional[ArrayHandle] = None
        self._iterator: Optional[StridedIterator] = None
        self._fields: tuple[FieldDescriptor, ...] = ()
        self._num_points = 0
        self._index = 0
        self.state = ReaderState.UNOPENED

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Load the file and resolve its schema.

        Raises
        ------
        FormatError
            File cannot be decoded into a structured array.
        SchemaError
            Array cannot be turned into a flat point schema.
        UseError
            Called in any state other than UNOPENED.
        """
        self._require_state("load", ReaderState.UNOPENED)
        try:
            handle = self._loader.load(self.filename)
        except Exception:
            self.state = ReaderState.CLOSED
            raise
        try:
            fields = self._resolver.resolve(handle)
        except Exception:
            handle.release()
            self.state = ReaderState.CLOSED
            raise
        self._handle = handle
        self._fields = fields
        self._num_points = handle.shape[0]
        self.state = ReaderState.SCHEMA_READY
        self.log.debug("Schema for '%s': %s", self.filename,
                       ", ".join(f"{f.raw_name}->{f.canonical_name}" for f in fields))

    def ready(self) -> None:
        """Open the strided iterator and start streaming.

        Raises
        ------
        IteratorError
            No iteration handle can be obtained over the array.
        UseError
            Called in any state other than SCHEMA_READY.
        """
        self._require_state("ready", ReaderState.SCHEMA_READY)
        self.log.debug("Initializing array iteration for file '%s'", self.filename)
        iterator = StridedIterator(self._handle, self._fields,
                                   block_size=self.config.iterator.block_size)
        try:
            iterator.open()
        except Exception:
            self.close()
            raise
        self._iterator = iterator
        self._index = 0
        self.state = ReaderState.STREAMING
        self.log.info("Reading %d points with %d dimensions from '%s'",
                      self._num_points, len(self._fields), self.filename)

    def close(self) -> None:
        """Release the iterator and the array. Valid from any state."""
        if self.state == ReaderState.CLOSED:
            return
        if self._iterator is not None:
            self._iterator.close()
            self._iterator = None
        if self._handle is not None:
            self._handle.release()
            self._handle = None
        self.state = ReaderState.CLOSED

    def __enter__(self):
        self.load()
        try:
            self.ready()
        except Exception:
            self.close()
            raise
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------

    def total_count(self) -> int:
        """Number of points in the file."""
        self._require_state("total_count", ReaderState.SCHEMA_READY,
                            ReaderState.STREAMING, ReaderState.DONE)
        return self._num_points

    @property
    def fields(self) -> tuple[FieldDescriptor, ...]:
        """Resolved field descriptors, in declaration order."""
        self._require_state("fields", ReaderState.SCHEMA_READY,
                            ReaderState.STREAMING, ReaderState.DONE)
        return self._fields

    def layout(self) -> list[tuple[str, TypeTag]]:
        """(canonical name, TypeTag) pairs produced by this file."""
        return [(f.canonical_name, f.type_tag) for f in self.fields]

    @property
    def index(self) -> int:
        """Number of records produced so far."""
        return self._index

    # ------------------------------------------------------------------
    # Streaming
    # ------------------------------------------------------------------

    def next_record(self, sink) -> bool:
        """Write the next row into ``sink``.

        ``sink.set_field(dimension_id, type_tag, window)`` is called once
        per field in resolved order. An error raised while filling the row,
        by the sink or the iterator, closes the reader before propagating.

        Returns
        -------
        bool
            True when a record was produced, False once all
            ``total_count()`` records have been.
        """
        self._require_state("next_record", ReaderState.STREAMING, ReaderState.DONE)
        if self._index >= self._num_points:
            self.state = ReaderState.DONE
            return False

        iterator = self._iterator
        try:
            for field in self._fields:
                sink.set_field(field.dimension_id, field.type_tag, iterator.window(field))
                iterator.advance(field)
        except Exception:
            self.log.error("Record %d of '%s' failed; closing reader",
                           self._index, self.filename)
            self.close()
            raise

        self._index += 1
        if self._index >= self._num_points:
            self.state = ReaderState.DONE
        return True

    def read(self, view: PointView, count: int) -> int:
        """Append up to ``count`` records to ``view``.

        Returns
        -------
        int
            Number of records appended. A record that fails part way is
            removed from ``view`` before the error propagates.
        """
        self._require_state("read", ReaderState.STREAMING, ReaderState.DONE)
        read = 0
        while read < count:
            record = view.append()
            try:
                produced = self.next_record(record)
            except Exception:
                view.discard_last()
                raise
            if not produced:
                view.discard_last()
                break
            read += 1
        return read

    def points(self) -> Iterator[PointRecord]:
        """Yield the remaining rows as PointRecords."""
        while True:
            record = PointRecord(point_id=self._index)
            if not self.next_record(record):
                return
            yield record

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_state(self, operation: str, *allowed: ReaderState) -> None:
        if self.state not in allowed:
            expected = ", ".join(s.value for s in allowed)
            raise UseError(
                f"Cannot call {operation}() on reader for '{self.filename}' in state "
                f"'{self.state.value}' (expected {expected})",
                path=self.filename)

    def __repr__(self):
        return f"NumpyReader({self.filename!r}, state={self.state.value})"
