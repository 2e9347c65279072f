"""UserConfig: Forgiving, minimal user-facing configuration.

Accepts flat keys with common aliases (e.g. BLOCK_SIZE -> block_size,
LOG_LEVEL -> log_level) as well as nested sections for advanced users.
Users only specify what they want to override from the expert defaults.
"""

from typing import Optional, Union
from pydantic import Field, field_validator
from nppoints.schemas.base import NpPointsBaseModel


def _normalize_mmap_mode(v):
    # "none", "", and False all mean "read into memory"
    if v is False or (isinstance(v, str) and v.strip().lower() in ("none", "")):
        return "none"
    if isinstance(v, str):
        return v.strip().lower()
    return v


class UserLoaderConfig(NpPointsBaseModel):
    """User-facing loader config."""
    mmap_mode: Optional[str] = None
    allow_pickle: Optional[bool] = None
    npz_member: Optional[str] = None

    @field_validator("mmap_mode", mode="before")
    @classmethod
    def normalize_mmap_mode(cls, v):
        return _normalize_mmap_mode(v)


class UserIteratorConfig(NpPointsBaseModel):
    """User-facing iterator config."""
    block_size: Optional[int] = None


class UserDimensionsConfig(NpPointsBaseModel):
    """User-facing dimensions config."""
    sanitize_chars: Optional[Union[tuple[str, ...], str]] = None

    @field_validator("sanitize_chars", mode="before")
    @classmethod
    def split_string(cls, v):
        """Accept "- _" style strings as well as sequences."""
        if isinstance(v, str):
            return tuple(v)
        return v


class UserConfig(NpPointsBaseModel):
    """User-facing configuration schema.

    Usage
    -----
        user_cfg = UserConfig(block_size=1024, log_level="debug")
        user_cfg = UserConfig.model_validate({"MMAP_MODE": "none"})

        internal = resolve_config(param_cfg, user_cfg)
    """

    # Flat aliases
    mmap_mode: Optional[str] = Field(None, alias="MMAP_MODE")
    npz_member: Optional[str] = Field(None, alias="NPZ_MEMBER")
    block_size: Optional[int] = Field(None, alias="BLOCK_SIZE")
    log_level: Optional[str] = Field(None, alias="LOG_LEVEL")

    # Nested overrides (advanced users)
    loader: Optional[UserLoaderConfig] = None
    iterator: Optional[UserIteratorConfig] = None
    dimensions: Optional[UserDimensionsConfig] = None

    model_config = NpPointsBaseModel.model_config.copy()
    # Allow forgiving input dictionaries (ignore unknown legacy keys)
    model_config.update({"populate_by_name": True, "extra": "ignore"})

    @field_validator("mmap_mode", mode="before")
    @classmethod
    def normalize_mmap_mode(cls, v):
        return _normalize_mmap_mode(v)

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        """Accept lowercase level names."""
        if isinstance(v, str):
            return v.strip().upper()
        return v

    def to_internal_overrides(self) -> dict:
        """Convert flat UserConfig to nested InternalConfig structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        loader = {}
        if self.mmap_mode is not None:
            loader["mmap_mode"] = self.mmap_mode
        if self.npz_member is not None:
            loader["npz_member"] = self.npz_member
        if self.loader is not None:
            loader.update(self.loader.model_dump(exclude_none=True))
        # "none" is the user spelling of an unset mmap_mode
        if loader.get("mmap_mode") == "none":
            loader["mmap_mode"] = None
        if loader:
            overrides["loader"] = loader

        iterator = {}
        if self.block_size is not None:
            iterator["block_size"] = self.block_size
        if self.iterator is not None:
            iterator.update(self.iterator.model_dump(exclude_none=True))
        if iterator:
            overrides["iterator"] = iterator

        if self.dimensions is not None:
            dimensions = self.dimensions.model_dump(exclude_none=True)
            if dimensions:
                overrides["dimensions"] = dimensions

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
