"""Point dimension modules.

- types: TypeTag enumeration and dtype mapping
- registry: canonical and dynamic dimension ids, point layout
"""

from nppoints.dimensions.types import TypeTag, type_tag_for, widen
from nppoints.dimensions.registry import DimensionId, DimensionRegistry, STANDARD_DIMENSIONS

__all__ = [
    "TypeTag",
    "type_tag_for",
    "widen",
    "DimensionId",
    "DimensionRegistry",
    "STANDARD_DIMENSIONS",
]
