"""Numeric storage types for point dimensions.

Every basic numeric kind a structured dtype can declare for a field maps to
exactly one TypeTag. The mapping is keyed on the numpy kind character and
item size, so byte order does not matter: windows handed to sinks are
always in native byte order.
"""

from enum import Enum
from typing import Optional

import numpy as np

__all__ = ['TypeTag', 'type_tag_for', 'widen']


class TypeTag(str, Enum):
    """Supported primitive numeric kinds."""
    SIGNED8 = "int8"
    SIGNED16 = "int16"
    SIGNED32 = "int32"
    SIGNED64 = "int64"
    UNSIGNED8 = "uint8"
    UNSIGNED16 = "uint16"
    UNSIGNED32 = "uint32"
    UNSIGNED64 = "uint64"
    FLOAT = "float32"
    DOUBLE = "float64"

    @property
    def dtype(self) -> np.dtype:
        """Native-order numpy dtype for this tag."""
        return np.dtype(self.value)

    @property
    def size(self) -> int:
        """Element size in bytes."""
        return self.dtype.itemsize


# (kind, itemsize) -> TypeTag
_KIND_MAP = {(tag.dtype.kind, tag.size): tag for tag in TypeTag}


def type_tag_for(dtype) -> Optional[TypeTag]:
    """Map a field dtype to its TypeTag.

    Parameters
    ----------
    dtype : np.dtype or dtype-like
        Field dtype, in any byte order.

    Returns
    -------
    TypeTag or None
        None when the kind is unsupported (bool, float16, complex, strings,
        datetimes, objects, sub-arrays and nested records).
    """
    dtype = np.dtype(dtype)
    if dtype.names is not None or dtype.subdtype is not None:
        return None
    return _KIND_MAP.get((dtype.kind, dtype.itemsize))


def widen(a: TypeTag, b: TypeTag) -> TypeTag:
    """Smallest TypeTag able to hold values of both ``a`` and ``b``.

    Follows numpy promotion; mixed 64-bit signed/unsigned promotes to
    float64, which is DOUBLE.
    """
    if a == b:
        return a
    promoted = np.promote_types(a.dtype, b.dtype)
    return type_tag_for(promoted) or TypeTag.DOUBLE
