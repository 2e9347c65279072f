"""ParamConfig: Expert defaults for the array reader.

This module defines the complete default configuration. ALL reader
parameters must have defaults here. No runtime code should define fallback
values - this is the single source of truth for defaults.

Runtime code NEVER reads from ParamConfig directly - it only receives InternalConfig.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator
from nppoints.schemas.base import NpPointsBaseModel


# =============================================================================
# Nested Configuration Models
# =============================================================================

class LoaderConfig(NpPointsBaseModel):
    """Array file loader configuration."""
    mmap_mode: Optional[Literal["r", "c"]] = Field(
        "r", description="numpy.load memory-map mode; None reads the payload into memory"
    )
    allow_pickle: bool = False
    npz_member: Optional[str] = Field(
        None, description="Member to read from .npz archives; required when an archive has several"
    )


class IteratorConfig(NpPointsBaseModel):
    """Strided iteration configuration."""
    block_size: int = Field(65536, ge=1, description="Maximum rows per iteration block")


SANITIZE_ORDER = ("-", " ", "_")


class DimensionsConfig(NpPointsBaseModel):
    """Field-name sanitization configuration."""
    sanitize_chars: tuple[str, ...] = Field(
        SANITIZE_ORDER,
        description="Characters removed from raw names, tried in this order. "
                    "Entries may be dropped but not reordered or replaced",
    )

    @field_validator("sanitize_chars")
    @classmethod
    def check_sanitize_order(cls, v):
        """Entries must come from SANITIZE_ORDER, once each, in its order."""
        unknown = [c for c in v if c not in SANITIZE_ORDER]
        if unknown:
            raise ValueError(
                f"sanitize_chars entries must be drawn from {SANITIZE_ORDER!r}: {v!r}")
        positions = [SANITIZE_ORDER.index(c) for c in v]
        if positions != sorted(set(positions)):
            raise ValueError(
                f"sanitize_chars must keep the order {SANITIZE_ORDER!r} without repeats: {v!r}")
        return v


class LoggingConfig(NpPointsBaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


# =============================================================================
# Main ParamConfig
# =============================================================================

class ParamConfig(NpPointsBaseModel):
    """Complete expert configuration with all defaults.

    Usage
    -----
    This config is NOT used directly by runtime code. It serves as the
    base layer in config resolution:

        internal_cfg = resolve_config(param_cfg, user_cfg)

    Runtime code only sees InternalConfig.
    """

    loader: LoaderConfig = Field(default_factory=LoaderConfig)
    iterator: IteratorConfig = Field(default_factory=IteratorConfig)
    dimensions: DimensionsConfig = Field(default_factory=DimensionsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
