"""Reader registration.

Hosts discover readers by name or by file extension. Each reader is
registered once with its PluginInfo and a factory building an instance
for a file. The numpy reader registers itself on import.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict

from nppoints.io.reader import NumpyReader

__all__ = ['PluginInfo', 'READER_INFO', 'register_reader', 'create_reader',
           'reader_for_path', 'registered_readers']


@dataclass(frozen=True)
class PluginInfo:
    name: str
    description: str
    link: str = ""
    extensions: tuple[str, ...] = ()


READER_INFO = PluginInfo(
    name="readers.numpy",
    description="Read data from .npy files.",
    link="https://numpy.org/doc/stable/reference/generated/numpy.lib.format.html",
    extensions=(".npy", ".npz"),
)


_REGISTRY: Dict[str, tuple[PluginInfo, Callable]] = {}


def register_reader(info: PluginInfo, factory: Callable) -> None:
    """Register ``factory`` under ``info.name``.

    Raises
    ------
    ValueError
        If a reader with the same name is already registered.
    """
    if info.name in _REGISTRY:
        raise ValueError(f"Duplicate reader name in registry: {info.name}")
    _REGISTRY[info.name] = (info, factory)


def registered_readers() -> list[PluginInfo]:
    """Registered readers, in registration order."""
    return [info for info, _ in _REGISTRY.values()]


def create_reader(name: str, filename, **kwargs):
    """Build the reader registered as ``name`` for ``filename``.

    Extra keyword arguments (config, registry, log) go to the factory.
    """
    try:
        _, factory = _REGISTRY[name]
    except KeyError:
        raise KeyError(f"Unknown reader '{name}' (known: {sorted(_REGISTRY)})") from None
    return factory(filename, **kwargs)


def reader_for_path(path) -> str:
    """Name of the registered reader handling ``path``'s extension."""
    suffix = Path(path).suffix.lower()
    for info, _ in _REGISTRY.values():
        if suffix in info.extensions:
            return info.name
    raise KeyError(f"No reader registered for extension '{suffix}' ({path})")


register_reader(READER_INFO, NumpyReader)
