"""Dimension registry: canonical point dimensions and dynamic ones.

The registry maps human-readable field names to stable dimension ids. A
fixed table of standard dimensions (X, Y, Z, Intensity, ...) provides the
canonical ids. Names outside that table are minted as dynamic dimensions
the first time they are registered.

Registering also builds the point layout: the ordered list of
(name, TypeTag) pairs handed to whatever consumes the points.
"""

import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from nppoints.dimensions.types import TypeTag, widen

__all__ = ['DimensionId', 'DimensionRegistry', 'STANDARD_DIMENSIONS']

logger = logging.getLogger(__name__)


# Standard dimensions and their default storage types
STANDARD_DIMENSIONS: dict[str, TypeTag] = {
    "X": TypeTag.DOUBLE,
    "Y": TypeTag.DOUBLE,
    "Z": TypeTag.DOUBLE,
    "Intensity": TypeTag.UNSIGNED16,
    "Amplitude": TypeTag.FLOAT,
    "Reflectance": TypeTag.FLOAT,
    "ReturnNumber": TypeTag.UNSIGNED8,
    "NumberOfReturns": TypeTag.UNSIGNED8,
    "ScanDirectionFlag": TypeTag.UNSIGNED8,
    "EdgeOfFlightLine": TypeTag.UNSIGNED8,
    "Classification": TypeTag.UNSIGNED8,
    "ScanAngleRank": TypeTag.FLOAT,
    "UserData": TypeTag.UNSIGNED8,
    "PointSourceId": TypeTag.UNSIGNED16,
    "GpsTime": TypeTag.DOUBLE,
    "Red": TypeTag.UNSIGNED16,
    "Green": TypeTag.UNSIGNED16,
    "Blue": TypeTag.UNSIGNED16,
    "Infrared": TypeTag.UNSIGNED16,
    "Deviation": TypeTag.FLOAT,
    "ClassFlags": TypeTag.UNSIGNED8,
    "ScanChannel": TypeTag.UNSIGNED8,
    "PointId": TypeTag.UNSIGNED32,
    "OriginId": TypeTag.UNSIGNED32,
    "NormalX": TypeTag.DOUBLE,
    "NormalY": TypeTag.DOUBLE,
    "NormalZ": TypeTag.DOUBLE,
    "Curvature": TypeTag.DOUBLE,
    "Density": TypeTag.DOUBLE,
    "HeightAboveGround": TypeTag.DOUBLE,
    "ElevationLow": TypeTag.FLOAT,
    "ElevationHigh": TypeTag.FLOAT,
    "Omit": TypeTag.UNSIGNED8,
}


@dataclass(frozen=True)
class DimensionId:
    """Stable identifier of a point dimension."""
    value: int
    name: str
    dynamic: bool = False

    def __str__(self):
        return self.name


class DimensionRegistry:
    """Name-to-id table plus the point layout built from registrations.

    Parameters
    ----------
    standard : mapping of str to TypeTag, optional
        Canonical dimensions known up front and their default types.
        Defaults to STANDARD_DIMENSIONS.

    Notes
    -----
    - Standard-name lookup is case-insensitive; the canonical spelling from
      the table is what gets registered.
    - Re-registering a name with its current type is a no-op. Registering
      it with a different type widens the stored type so both fit.
    - Not thread-safe; a host sharing one registry across readers must
      serialize calls to register_or_assign().

    Examples
    --------
    >>> registry = DimensionRegistry()
    >>> registry.resolve("x")
    DimensionId(value=0, name='X', dynamic=False)
    >>> registry.register_or_assign("Temperature", TypeTag.FLOAT).dynamic
    True
    """

    def __init__(self, standard: Optional[Mapping[str, TypeTag]] = None):
        standard = STANDARD_DIMENSIONS if standard is None else standard
        self._standard: dict[str, DimensionId] = {}
        self._default_types: dict[DimensionId, TypeTag] = {}
        for value, (name, tag) in enumerate(standard.items()):
            dim = DimensionId(value, name)
            key = name.upper()
            if key in self._standard:
                raise ValueError(f"Duplicate standard dimension name: {name}")
            self._standard[key] = dim
            self._default_types[dim] = TypeTag(tag)

        self._next_dynamic = len(self._standard)
        self._dynamic: dict[str, DimensionId] = {}
        self._layout: dict[DimensionId, TypeTag] = {}

    def resolve(self, name: str) -> Optional[DimensionId]:
        """Look up a standard dimension by name; None when unknown."""
        return self._standard.get(name.upper())

    def register_or_assign(self, name: str, type_tag: TypeTag) -> DimensionId:
        """Add ``name`` to the layout with ``type_tag`` and return its id.

        Standard names reuse their canonical id, other names get a dynamic
        id minted on first registration and reused afterwards.
        """
        dim = self.resolve(name)
        if dim is None:
            dim = self._dynamic.get(name)
        if dim is None:
            dim = DimensionId(self._next_dynamic, name, dynamic=True)
            self._next_dynamic += 1
            self._dynamic[name] = dim
            logger.debug("Minted dynamic dimension '%s' (id %d)", name, dim.value)

        current = self._layout.get(dim)
        if current is None:
            self._layout[dim] = TypeTag(type_tag)
        elif current != type_tag:
            widened = widen(current, TypeTag(type_tag))
            logger.debug("Dimension '%s' re-registered as %s over %s; using %s",
                         dim.name, type_tag.value, current.value, widened.value)
            self._layout[dim] = widened
        return dim

    def type_of(self, dim: DimensionId) -> TypeTag:
        """Registered type of ``dim``, or its standard default if unregistered."""
        if dim in self._layout:
            return self._layout[dim]
        if dim in self._default_types:
            return self._default_types[dim]
        raise KeyError(f"Unknown dimension: {dim.name}")

    def is_registered(self, dim: DimensionId) -> bool:
        return dim in self._layout

    @property
    def dimensions(self) -> list[DimensionId]:
        """Registered dimensions in registration order."""
        return list(self._layout)

    def layout(self) -> list[tuple[str, TypeTag]]:
        """Registered (name, TypeTag) pairs in registration order."""
        return [(dim.name, tag) for dim, tag in self._layout.items()]

    def __len__(self):
        return len(self._layout)

    def __contains__(self, name: str) -> bool:
        dim = self.resolve(name) or self._dynamic.get(name)
        return dim is not None and dim in self._layout
