"""Base contract enforcement utilities.

The require() function is the single enforcement mechanism for all reader
contracts. Stage contracts call it with the error class of their stage.
"""

from nppoints.contracts.failure import ReaderError, SchemaError


def require(condition: bool, message: str, error: type[ReaderError] = SchemaError,
            path: str | None = None, field: str | None = None) -> None:
    """Enforce a reader contract.

    Parameters
    ----------
    condition : bool
        The invariant that must be true.
    message : str
        Error message explaining the violation. Should name the file and,
        where relevant, the field.
    error : type of ReaderError, default SchemaError
        Exception class raised when ``condition`` is False.
    path, field : str, optional
        Context attached to the raised error.

    Raises
    ------
    ReaderError
        Subclass given by ``error`` if condition is False.

    Examples
    --------
    >>> require(array.ndim == 1, f"'{path}' has rank {array.ndim}", SchemaError, path=path)
    """
    if not condition:
        raise error(message, path=path, field=field)
