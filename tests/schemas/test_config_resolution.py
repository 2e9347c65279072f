"""Tests for configuration resolution (param < user)."""

import pytest
from pydantic import ValidationError

pytestmark = pytest.mark.unit

from nppoints.schemas import InternalConfig, ParamConfig, UserConfig, resolve_config
from nppoints.schemas.resolve import deep_merge


def test_defaults():
    """Resolving nothing gives the expert defaults."""
    config = resolve_config()
    assert isinstance(config, InternalConfig)
    assert config.loader.mmap_mode == "r"
    assert config.loader.allow_pickle is False
    assert config.loader.npz_member is None
    assert config.iterator.block_size == 65536
    assert config.dimensions.sanitize_chars == ("-", " ", "_")
    assert config.logging.level == "INFO"


def test_param_dict_accepted():
    """A plain dict works as the param layer."""
    config = resolve_config({"iterator": {"block_size": 10}})
    assert config.iterator.block_size == 10


def test_user_overrides_param():
    """User values win over param values."""
    param = ParamConfig(iterator={"block_size": 10})
    config = resolve_config(param, UserConfig(block_size=20))
    assert config.iterator.block_size == 20


def test_nested_user_section_overrides_flat_alias():
    """A nested user section wins over the flat alias."""
    user = UserConfig(block_size=20, iterator={"block_size": 30})
    assert resolve_config(None, user).iterator.block_size == 30


def test_empty_user_dict_uses_defaults(param_config):
    """An empty user dict changes nothing."""
    assert resolve_config(param_config, {}) == resolve_config(param_config, None)


def test_internal_config_is_frozen(internal_config):
    """InternalConfig cannot be mutated."""
    with pytest.raises(ValidationError):
        internal_config.iterator = internal_config.iterator.model_copy()


def test_invalid_block_size_rejected():
    """A block size below one fails validation."""
    with pytest.raises(ValidationError):
        resolve_config(None, UserConfig(block_size=0))


def test_invalid_mmap_mode_rejected():
    """Writable memory-map modes are rejected."""
    with pytest.raises(ValidationError):
        resolve_config(None, UserConfig(mmap_mode="w+"))


def test_param_rejects_unknown_keys():
    """ParamConfig forbids unknown sections."""
    with pytest.raises(ValidationError):
        ParamConfig(reader={"file_format": "npy"})


@pytest.mark.parametrize("chars", [
    ("-", "-"),
    ("ab",),
    ("",),
    (".",),
    ("_", "-"),
    (" ", "-", "_"),
])
def test_bad_sanitize_chars_rejected(chars):
    """Sanitize characters must be an ordered subset of '-', ' ', '_'."""
    with pytest.raises(ValidationError):
        ParamConfig(dimensions={"sanitize_chars": chars})


@pytest.mark.parametrize("chars", [("-", "_"), (" ",), ()])
def test_sanitize_chars_subset_accepted(chars):
    """Dropping sanitize characters while keeping their order is allowed."""
    assert ParamConfig(dimensions={"sanitize_chars": chars}).dimensions.sanitize_chars == chars


def test_user_reordered_sanitize_chars_rejected():
    """A user cannot reorder the sanitize fallback."""
    with pytest.raises(ValidationError):
        resolve_config(None, {"dimensions": {"sanitize_chars": "_-"}})


def test_deep_merge_nested():
    """deep_merge merges nested dicts and keeps the base intact."""
    base = {"a": 1, "b": {"c": 2, "d": 3}}
    override = {"b": {"d": 4, "e": 5}, "f": 6}
    assert deep_merge(base, override) == {"a": 1, "b": {"c": 2, "d": 4, "e": 5}, "f": 6}
    # base untouched at top level
    assert base["a"] == 1 and "f" not in base
