"""Package logger helper.

Components never touch the root logger or add handlers; a host decides
where records go. This helper only applies the configured level to a
logger under the ``nppoints`` namespace.
"""

import logging
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from nppoints.schemas import InternalConfig


def get_logger(name: str, config: Optional["InternalConfig"] = None) -> logging.Logger:
    """Return the ``nppoints`` logger for ``name`` with the configured level.

    Parameters
    ----------
    name : str
        Module name, usually ``__name__``.
    config : InternalConfig, optional
        When given, ``config.logging.level`` is applied to the logger.
    """
    if not name.startswith("nppoints"):
        name = f"nppoints.{name}"
    log = logging.getLogger(name)
    if config is not None:
        log.setLevel(getattr(logging, config.logging.level.upper(), logging.INFO))
    return log
