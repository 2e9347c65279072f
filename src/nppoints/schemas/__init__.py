"""Pydantic configuration schemas for nppoints.

All configuration validation, coercion, and normalization happens at
schema validation time via Pydantic.

Exports
-------
resolve_config : function
    Single entrypoint for configuration resolution
InternalConfig : class
    Fully validated, authoritative runtime configuration
ParamConfig : class
    Expert defaults (complete)
UserConfig : class
    User-facing configuration (forgiving, minimal)
"""

from nppoints.schemas.resolve import resolve_config
from nppoints.schemas.internal import InternalConfig
from nppoints.schemas.param import ParamConfig
from nppoints.schemas.user import UserConfig

__all__ = [
    'resolve_config',
    'InternalConfig',
    'ParamConfig',
    'UserConfig',
]
