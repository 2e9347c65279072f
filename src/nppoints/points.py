"""Point records and batches handed to downstream consumers.

PointRecord is the sink a reader writes one row into: it receives each
field as a byte window tagged with its dimension id and TypeTag, and keeps
the decoded scalar. PointView collects records in order and converts them
to a pandas DataFrame or an xarray Dataset for analysis.
"""

from typing import Iterator, Optional

import numpy as np
import pandas as pd
import xarray as xr

from nppoints.dimensions import DimensionId, DimensionRegistry, TypeTag

__all__ = ['PointRecord', 'PointView']


class PointRecord:
    """One point, keyed by canonical dimension name.

    Examples
    --------
    >>> rec = PointRecord()
    >>> rec.set_field(dim, TypeTag.DOUBLE, np.float64(1.5).tobytes())
    >>> rec["X"]
    1.5
    """

    def __init__(self, point_id: Optional[int] = None):
        self.point_id = point_id
        self._values: dict[str, object] = {}
        self._types: dict[str, TypeTag] = {}

    def set_field(self, dim: DimensionId, type_tag: TypeTag, window: bytes) -> None:
        """Decode ``window`` as ``type_tag`` and store it under ``dim``."""
        if len(window) != type_tag.size:
            raise ValueError(
                f"Window for '{dim.name}' is {len(window)} bytes, "
                f"{type_tag.value} needs {type_tag.size}")
        self._values[dim.name] = np.frombuffer(window, dtype=type_tag.dtype)[0].item()
        self._types[dim.name] = type_tag

    def type_of(self, name: str) -> TypeTag:
        return self._types[name]

    def as_dict(self) -> dict:
        return dict(self._values)

    def __getitem__(self, name: str):
        return self._values[name]

    def __contains__(self, name: str) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def __repr__(self):
        return f"PointRecord(point_id={self.point_id}, {self._values})"


class PointView:
    """Ordered collection of PointRecords sharing one layout.

    Parameters
    ----------
    registry : DimensionRegistry
        Layout the records follow; defines column order and types on export.
    """

    def __init__(self, registry: DimensionRegistry):
        self.registry = registry
        self._records: list[PointRecord] = []

    def append(self) -> PointRecord:
        """Add an empty record at the end and return it for filling."""
        record = PointRecord(point_id=len(self._records))
        self._records.append(record)
        return record

    def discard_last(self) -> None:
        """Drop the most recently appended record."""
        self._records.pop()

    def __len__(self):
        return len(self._records)

    def __getitem__(self, idx: int) -> PointRecord:
        return self._records[idx]

    def __iter__(self) -> Iterator[PointRecord]:
        return iter(self._records)

    def to_dataframe(self) -> pd.DataFrame:
        """Records as a DataFrame, columns in layout order typed by TypeTag."""
        columns = {}
        for name, tag in self.registry.layout():
            values = [rec[name] for rec in self._records if name in rec]
            if len(values) != len(self._records):
                continue
            columns[name] = pd.Series(np.asarray(values, dtype=tag.dtype), dtype=tag.dtype)
        df = pd.DataFrame(columns)
        df.index.name = "point_id"
        return df

    def to_xarray(self) -> xr.Dataset:
        """Records as an xarray Dataset along a ``point`` dimension."""
        df = self.to_dataframe()
        data_vars = {name: (("point",), df[name].to_numpy()) for name in df.columns}
        return xr.Dataset(
            data_vars=data_vars,
            coords={"point": np.arange(len(df))},
        )
