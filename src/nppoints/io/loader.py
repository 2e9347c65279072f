"""Load structured NumPy arrays from .npy and .npz files.

This module is the file boundary of the reader. It decodes an on-disk
structured array (header, dtype descriptor, payload) with numpy and wraps
the result in an ArrayHandle owned by one reader session.

Key capabilities:
- Memory-maps .npy payloads (default ``mmap_mode="r"``) so large files are
  paged on demand instead of copied
- Reads a single named member out of .npz archives
- Refuses pickled payloads unless explicitly allowed
- Raises FormatError with the file path on every failure
"""

import logging
import zipfile
from pathlib import Path
from typing import Optional, TYPE_CHECKING

import numpy as np

from nppoints.contracts import FormatError, UseError, assert_structured_array
from nppoints.logs import get_logger

if TYPE_CHECKING:
    from nppoints.schemas import InternalConfig

__all__ = ['ArrayHandle', 'NumpyArrayLoader']

logger = logging.getLogger(__name__)


class ArrayHandle:
    """Owning reference to a loaded structured array.

    The handle is exclusively owned by one reader session and released
    exactly once. ``release()`` may be called repeatedly; every access to
    ``array`` after the first release raises UseError.

    Parameters
    ----------
    array : np.ndarray
        Structured array (possibly a np.memmap).
    path : str
        File the array was read from, used in error messages.
    """

    def __init__(self, array: np.ndarray, path: str):
        self._array = array
        self.path = str(path)

    @property
    def array(self) -> np.ndarray:
        if self._array is None:
            raise UseError(f"Array for '{self.path}' was already released", path=self.path)
        return self._array

    @property
    def released(self) -> bool:
        return self._array is None

    @property
    def dtype(self) -> np.dtype:
        return self.array.dtype

    @property
    def shape(self) -> tuple:
        return self.array.shape

    def release(self) -> None:
        """Drop the array reference; backing storage is freed with it."""
        if self._array is None:
            return
        # The mapping closes once the last view of it is garbage collected
        self._array = None
        logger.debug("Released array for '%s'", self.path)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()

    def __repr__(self):
        if self._array is None:
            return f"ArrayHandle(path={self.path!r}, released)"
        return f"ArrayHandle(path={self.path!r}, shape={self._array.shape}, dtype={self._array.dtype})"


class NumpyArrayLoader:
    """Load .npy/.npz files into ArrayHandles.

    Configuration
    =============
    Reads ``config.loader``:

    - `mmap_mode` : "r", "c" or None. Memory-map mode for .npy payloads.
    - `allow_pickle` : bool. Whether object arrays may be unpickled.
    - `npz_member` : str or None. Archive member to read from .npz files.

    Parameters
    ----------
    config : InternalConfig
        Resolved runtime configuration.
    log : logging.Logger, optional
        Logger to report to. Lets a host route loader output into its own
        log stream; defaults to the package logger at the configured level.

    Examples
    --------
    >>> loader = NumpyArrayLoader(resolve_config())
    >>> with loader.load("points.npy") as handle:
    ...     print(handle.shape, handle.dtype.names)
    """

    def __init__(self, config: "InternalConfig", log: Optional[logging.Logger] = None):
        self.config = config
        self.mmap_mode = config.loader.mmap_mode
        self.allow_pickle = config.loader.allow_pickle
        self.npz_member = config.loader.npz_member
        self.log = log or get_logger(__name__, config)

    def load(self, path: Path | str) -> ArrayHandle:
        """Decode ``path`` into an ArrayHandle.

        Raises
        ------
        FormatError
            File missing or unreadable, malformed header, disallowed
            pickle, ambiguous .npz archive, or a top-level object that is
            not a structured array.
        """
        path = str(path)
        if not Path(path).is_file():
            raise FormatError(f"Unable to read '{path}': file not found", path=path)

        try:
            obj = np.load(path, mmap_mode=self.mmap_mode, allow_pickle=self.allow_pickle)
        except (OSError, ValueError, EOFError, zipfile.BadZipFile) as e:
            raise FormatError(f"Unable to decode '{path}': {e}", path=path) from e

        if isinstance(obj, np.lib.npyio.NpzFile):
            with obj:
                obj = self._select_member(obj, path)

        assert_structured_array(obj, path)
        self.log.debug("Loaded '%s': shape=%s, %d fields, mmap=%s",
                       path, obj.shape, len(obj.dtype.names), self.mmap_mode)
        return ArrayHandle(obj, path)

    def _select_member(self, archive, path: str) -> np.ndarray:
        """Pick the configured member, or the only member, of an archive."""
        names = list(archive.files)
        if self.npz_member is not None:
            if self.npz_member not in names:
                raise FormatError(
                    f"Archive '{path}' has no member '{self.npz_member}' "
                    f"(members: {names})", path=path)
            name = self.npz_member
        elif len(names) == 1:
            name = names[0]
        else:
            raise FormatError(
                f"Archive '{path}' holds {len(names)} arrays {names}; "
                "set loader.npz_member to choose one", path=path)

        try:
            return archive[name]
        except (OSError, ValueError, EOFError, zipfile.BadZipFile) as e:
            raise FormatError(f"Unable to decode member '{name}' of '{path}': {e}",
                              path=path) from e
