"""Array file reading modules.

- loader: Decode .npy/.npz files into ArrayHandles
- schema: Resolve structured dtypes into point schemas
- iterator: Block-wise strided traversal with per-field advance
- reader: Pull-based point reader tying the above together
"""

from nppoints.io.loader import ArrayHandle, NumpyArrayLoader
from nppoints.io.schema import FieldDescriptor, SchemaResolver
from nppoints.io.iterator import Block, StridedIterator
from nppoints.io.reader import NumpyReader, ReaderState

__all__ = [
    "ArrayHandle",
    "NumpyArrayLoader",
    "FieldDescriptor",
    "SchemaResolver",
    "Block",
    "StridedIterator",
    "NumpyReader",
    "ReaderState",
]
