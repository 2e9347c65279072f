"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that runtime code sees. It is fully validated,
normalized, and immutable.
"""

from typing import Literal, Optional
from pydantic import ConfigDict, Field
from nppoints.schemas.base import NpPointsBaseModel


class InternalLoaderConfig(NpPointsBaseModel):
    """Runtime loader configuration."""
    mmap_mode: Optional[Literal["r", "c"]]
    allow_pickle: bool
    npz_member: Optional[str]


class InternalIteratorConfig(NpPointsBaseModel):
    """Runtime iterator configuration."""
    block_size: int = Field(ge=1)


class InternalDimensionsConfig(NpPointsBaseModel):
    """Runtime field-name sanitization configuration."""
    sanitize_chars: tuple[str, ...]


class InternalLoggingConfig(NpPointsBaseModel):
    """Runtime logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class InternalConfig(NpPointsBaseModel):
    """Authoritative runtime configuration.

    Runtime modules receive InternalConfig and access fields directly:

        def __init__(self, config: InternalConfig):
            self.block_size = config.iterator.block_size  # NOT .get()

    Rules
    -----
    - NO .get() calls
    - NO fallback defaults
    - NO validation in runtime code
    """

    loader: InternalLoaderConfig
    iterator: InternalIteratorConfig
    dimensions: InternalDimensionsConfig
    logging: InternalLoggingConfig

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        frozen=True,  # Immutable after construction
    )
