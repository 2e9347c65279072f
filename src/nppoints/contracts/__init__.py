"""Reader contracts: fail-fast enforcement of stage invariants.

This package holds the error taxonomy shared by every reader component and
the checks run at stage boundaries (load, schema discovery).

Key principle:
- Pydantic validates config correctness
- Contracts validate array and API-usage correctness
- No degraded or partial reads
"""

from nppoints.contracts.failure import (
    FailurePolicy,
    ReaderError,
    FormatError,
    SchemaError,
    IteratorError,
    UseError,
)
from nppoints.contracts.base import require
from nppoints.contracts.array import assert_structured_array, assert_flat_named_array

__all__ = [
    "FailurePolicy",
    "ReaderError",
    "FormatError",
    "SchemaError",
    "IteratorError",
    "UseError",
    "require",
    "assert_structured_array",
    "assert_flat_named_array",
]
