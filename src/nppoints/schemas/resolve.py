"""Configuration resolution and merging logic.

This module provides the single entrypoint for configuration resolution:
resolve_config(). It merges ParamConfig and UserConfig in precedence order
and returns a validated InternalConfig.

Precedence (highest to lowest):
1. UserConfig (caller overrides)
2. ParamConfig (expert defaults)
"""

from typing import Union, Optional
from nppoints.schemas.param import ParamConfig
from nppoints.schemas.user import UserConfig
from nppoints.schemas.internal import InternalConfig


def deep_merge(base: dict, *overrides: dict) -> dict:
    """Deep merge multiple dictionaries.

    Later dictionaries override earlier ones. Nested dictionaries are
    merged recursively; other values are replaced.

    Examples
    --------
    >>> base = {"a": 1, "b": {"c": 2, "d": 3}}
    >>> override = {"b": {"d": 4, "e": 5}, "f": 6}
    >>> deep_merge(base, override)
    {'a': 1, 'b': {'c': 2, 'd': 4, 'e': 5}, 'f': 6}
    """
    result = base.copy()

    for override in overrides:
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = deep_merge(result[key], value)
            else:
                result[key] = value

    return result


def resolve_config(
    param_cfg: Optional[Union[dict, ParamConfig]] = None,
    user_cfg: Optional[Union[dict, UserConfig]] = None,
) -> InternalConfig:
    """Resolve final runtime configuration from param and user configs.

    Parameters
    ----------
    param_cfg : dict or ParamConfig, optional
        Expert configuration. Defaults to ``ParamConfig()``.
    user_cfg : dict or UserConfig, optional
        User overrides. If None or empty, only param defaults are used.

    Returns
    -------
    InternalConfig
        Fully validated, immutable runtime configuration

    Raises
    ------
    ValidationError
        If any config fails Pydantic validation

    Examples
    --------
    >>> config = resolve_config(ParamConfig(), UserConfig(block_size=128))
    >>> config.iterator.block_size
    128
    """
    if param_cfg is None:
        param = ParamConfig()
    elif not isinstance(param_cfg, ParamConfig):
        param = ParamConfig.model_validate(param_cfg)
    else:
        param = param_cfg

    if user_cfg is None or (isinstance(user_cfg, dict) and not user_cfg):
        user = UserConfig()
    elif not isinstance(user_cfg, UserConfig):
        user = UserConfig.model_validate(user_cfg)
    else:
        user = user_cfg

    merged = deep_merge(param.model_dump(), user.to_internal_overrides())

    # Re-validate sanitize_chars through the param rules before freezing
    ParamConfig.model_validate(merged)

    return InternalConfig.model_validate(merged)
