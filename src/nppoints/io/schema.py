"""Resolve a structured dtype into an ordered point schema.

Field names in array files are loosely spelled ("X-Coord", "Y Coord",
"Z_Coord"), while the point layout uses canonical dimension names. The
resolver sanitizes each raw name, looks it up in the DimensionRegistry,
maps the field dtype to a TypeTag, and only then registers the whole
schema, so a bad field never leaves a partial layout behind.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from nppoints.contracts import SchemaError, assert_flat_named_array
from nppoints.dimensions import DimensionId, DimensionRegistry, TypeTag, type_tag_for
from nppoints.io.loader import ArrayHandle

__all__ = ['FieldDescriptor', 'SchemaResolver', 'name_candidates']

logger = logging.getLogger(__name__)

DEFAULT_SANITIZE_CHARS = ("-", " ", "_")


@dataclass(frozen=True)
class FieldDescriptor:
    """One resolved field of the source array."""
    raw_name: str
    canonical_name: str
    dimension_id: DimensionId
    type_tag: TypeTag
    index: int
    offset: int
    itemsize: int
    is_standard: bool


def name_candidates(raw_name: str, sanitize_chars: Sequence[str] = DEFAULT_SANITIZE_CHARS) -> list[str]:
    """Lookup candidates for ``raw_name`` in priority order.

    One candidate per sanitize character (that character removed), then
    the raw name verbatim.

    Examples
    --------
    >>> name_candidates("X-Coord")
    ['XCoord', 'X-Coord', 'X-Coord', 'X-Coord']
    """
    return [raw_name.replace(c, "") for c in sanitize_chars] + [raw_name]


class SchemaResolver:
    """Turn an ArrayHandle's dtype into FieldDescriptors.

    Parameters
    ----------
    registry : DimensionRegistry
        Dimension table consulted for canonical ids and updated with the
        resolved layout.
    sanitize_chars : sequence of str, optional
        Characters stripped from raw names, tried in order before the raw
        name itself. Defaults to ``("-", " ", "_")``.
    log : logging.Logger, optional
        Logger to report to; defaults to the module logger.

    Examples
    --------
    >>> resolver = SchemaResolver(DimensionRegistry())
    >>> fields = resolver.resolve(handle)
    >>> [(f.canonical_name, f.type_tag) for f in fields]
    [('X', <TypeTag.DOUBLE: 'float64'>), ...]
    """

    def __init__(self, registry: DimensionRegistry,
                 sanitize_chars: Sequence[str] = DEFAULT_SANITIZE_CHARS,
                 log: Optional[logging.Logger] = None):
        self.registry = registry
        self.sanitize_chars = tuple(sanitize_chars)
        self.log = log or logger

    def canonical_name(self, raw_name: str) -> tuple[str, Optional[DimensionId]]:
        """Resolve one raw name.

        Returns
        -------
        (name, DimensionId or None)
            The canonical name and id of the first candidate the registry
            knows, or ``(raw_name, None)`` when no candidate matches.
        """
        for candidate in name_candidates(raw_name, self.sanitize_chars):
            dim = self.registry.resolve(candidate)
            if dim is not None:
                return dim.name, dim
        return raw_name, None

    def resolve(self, handle: ArrayHandle) -> tuple[FieldDescriptor, ...]:
        """Resolve every field of ``handle`` in declaration order.

        Raises
        ------
        SchemaError
            Rank other than 1, zero rows, no named fields, a field type
            without a TypeTag, or two fields sharing a canonical dimension.
        """
        array = handle.array
        path = handle.path
        assert_flat_named_array(array, path)
        dtype = array.dtype
        self.log.debug("Adding %d dimensions from '%s' (shape %s)",
                       len(dtype.names), path, array.shape)

        # Resolve names and types first; register only when all fields pass
        pending = []
        claimed: dict[str, str] = {}
        for index, raw_name in enumerate(dtype.names):
            field_dtype, offset = dtype.fields[raw_name][:2]

            type_tag = type_tag_for(field_dtype)
            if type_tag is None:
                raise SchemaError(
                    f"Field '{raw_name}' in '{path}' has unsupported type "
                    f"'{field_dtype}' (kind '{field_dtype.kind}', {field_dtype.itemsize} bytes)",
                    path=path, field=raw_name)

            name, dim = self.canonical_name(raw_name)
            key = name.upper() if dim is not None else name
            if key in claimed:
                raise SchemaError(
                    f"Fields '{claimed[key]}' and '{raw_name}' in '{path}' both "
                    f"resolve to dimension '{name}'",
                    path=path, field=raw_name)
            claimed[key] = raw_name
            pending.append((index, raw_name, name, dim is not None, type_tag, offset, field_dtype.itemsize))

        fields = []
        for index, raw_name, name, is_standard, type_tag, offset, itemsize in pending:
            dim = self.registry.register_or_assign(name, type_tag)
            self.log.debug("Field '%s' -> dimension '%s' (%s, %d bytes, %s)",
                           raw_name, dim.name, type_tag.value, itemsize,
                           "standard" if is_standard else "dynamic")
            fields.append(FieldDescriptor(
                raw_name=raw_name,
                canonical_name=dim.name,
                dimension_id=dim,
                type_tag=type_tag,
                index=index,
                offset=offset,
                itemsize=itemsize,
                is_standard=is_standard,
            ))
        return tuple(fields)
