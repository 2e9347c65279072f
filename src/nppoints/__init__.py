"""`nppoints` - stream points out of structured NumPy array files.

Subpackages:
- io: File loading, schema resolution, strided iteration, point reader
- dimensions: TypeTag mapping and dimension registry
- contracts: Error taxonomy and stage contracts
- schemas: Pydantic configuration
"""

__version__ = "0.1.0"

from nppoints.contracts import (
    ReaderError,
    FormatError,
    SchemaError,
    IteratorError,
    UseError,
)
from nppoints.dimensions import DimensionId, DimensionRegistry, TypeTag
from nppoints.io import NumpyReader, ReaderState
from nppoints.points import PointRecord, PointView
from nppoints.plugin import create_reader, reader_for_path

__all__ = [
    "ReaderError",
    "FormatError",
    "SchemaError",
    "IteratorError",
    "UseError",
    "DimensionId",
    "DimensionRegistry",
    "TypeTag",
    "NumpyReader",
    "ReaderState",
    "PointRecord",
    "PointView",
    "create_reader",
    "reader_for_path",
]
