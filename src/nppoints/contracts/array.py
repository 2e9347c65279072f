"""Array stage contracts.

Enforce the guarantees each stage needs from the decoded array before it
starts working: the loader must hand over a structured ndarray, and schema
discovery must see a flat, non-empty table of named columns.
"""

import numpy as np

from nppoints.contracts.base import require
from nppoints.contracts.failure import FormatError, SchemaError


def assert_structured_array(obj, path: str) -> None:
    """Enforce the load stage contract.

    Parameters
    ----------
    obj : object
        Top-level object decoded from the file.
    path : str
        Source file, quoted in the error message.

    Raises
    ------
    FormatError
        If ``obj`` is not a numpy array or has no named fields.
    """
    require(
        isinstance(obj, np.ndarray),
        f"Object in file '{path}' is not a numpy array "
        f"(got {type(obj).__name__})",
        FormatError, path=path,
    )
    require(
        obj.dtype.names is not None,
        f"Array in file '{path}' is not a structured array "
        f"(dtype {obj.dtype})",
        FormatError, path=path,
    )


def assert_flat_named_array(array: np.ndarray, path: str) -> None:
    """Enforce the schema stage contract.

    Parameters
    ----------
    array : np.ndarray
        Array held by the session's ArrayHandle.
    path : str
        Source file, quoted in the error message.

    Raises
    ------
    SchemaError
        If the array is not rank 1, has zero rows, or has no named fields.
    """
    require(
        array.ndim == 1,
        f"Array in '{path}' has {array.ndim} dims with shape {array.shape}, "
        "expected 1 (flat named columns)",
        SchemaError, path=path,
    )
    require(
        array.shape[0] > 0,
        f"Array in '{path}' has zero rows",
        SchemaError, path=path,
    )
    require(
        bool(array.dtype.names),
        f"Array in '{path}' has no named fields (dtype {array.dtype})",
        SchemaError, path=path,
    )
