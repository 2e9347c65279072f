"""Centralized failure policy for reader errors.

Reader errors fail fast, loud, and once. Every failure raised by the
loader, schema resolver, iterator, or reader derives from ReaderError, so
a host pipeline can catch them uniformly and still branch on the stage
that failed.
"""

from enum import Enum


class FailurePolicy(str, Enum):
    """Failure policy for reader errors.

    FAIL_FAST (only option): raise immediately, never retry, never return a
    partial schema. Decoding is deterministic so retries cannot help.
    """
    FAIL_FAST = "fail_fast"


class ReaderError(RuntimeError):
    """Base class for every error raised while reading an array file.

    Parameters
    ----------
    message : str
        Human readable description.
    path : str, optional
        File the session was reading.
    field : str, optional
        Offending field name, when a single field is to blame.
    """

    def __init__(self, message: str, path: str | None = None, field: str | None = None):
        super().__init__(message)
        self.path = path
        self.field = field


class FormatError(ReaderError):
    """File is missing, unreadable, malformed, or not a structured array."""
    pass


class SchemaError(ReaderError):
    """Structured dtype cannot be turned into a flat point schema.

    Raised for bad rank, zero rows, no named fields, unsupported field
    types, and two fields resolving to the same canonical dimension.
    """
    pass


class IteratorError(ReaderError):
    """Iteration handle over the array storage cannot be obtained or used."""
    pass


class UseError(ReaderError):
    """Reader API called out of state-machine order."""
    pass
