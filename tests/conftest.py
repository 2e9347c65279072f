"""Root-level pytest fixtures for the nppoints test suite.

Provides shared configuration fixtures and array-file builders. Tests use
these fixtures instead of creating raw dict configs.
"""

import pytest

from nppoints.dimensions import DimensionRegistry, TypeTag
from nppoints.schemas import ParamConfig, UserConfig, resolve_config
from tests.helpers.fake_arrays import make_points_array, write_npy


# =============================================================================
# Configuration Fixtures (Pydantic-based)
# =============================================================================

@pytest.fixture
def param_config():
    """Expert configuration with all defaults."""
    return ParamConfig()


@pytest.fixture
def internal_config(param_config):
    """Fully validated runtime configuration (no overrides)."""
    return resolve_config(param_config, None)


@pytest.fixture
def make_config(param_config):
    """Factory fixture for creating custom test configs.

    Examples
    --------
    >>> def test_small_blocks(make_config):
    ...     config = make_config(block_size=4)
    ...     assert config.iterator.block_size == 4
    """
    def _make(**user_overrides):
        if user_overrides:
            return resolve_config(param_config, UserConfig(**user_overrides))
        return resolve_config(param_config, None)

    return _make


# =============================================================================
# Registry Fixtures
# =============================================================================

@pytest.fixture
def registry():
    """Registry with the standard dimension table."""
    return DimensionRegistry()


@pytest.fixture
def coord_registry():
    """Registry knowing only XCoord, YCoord, ZCoord."""
    return DimensionRegistry({
        "XCoord": TypeTag.DOUBLE,
        "YCoord": TypeTag.DOUBLE,
        "ZCoord": TypeTag.DOUBLE,
    })


# =============================================================================
# Array File Fixtures
# =============================================================================

@pytest.fixture
def make_npy(tmp_path):
    """Factory writing a structured array to a .npy file in tmp_path.

    Accepts either a ready array or ``n``/``fields`` for make_points_array.
    """
    def _make(array=None, name="points.npy", **kwargs):
        if array is None:
            array = make_points_array(**kwargs)
        return write_npy(tmp_path / name, array)

    return _make


@pytest.fixture
def points_npy(make_npy):
    """Ten-point file with X, Y, Z, Intensity, Classification."""
    return make_npy(n=10)
