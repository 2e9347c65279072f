"""Tests for TypeTag mapping."""

import pytest
import numpy as np

pytestmark = pytest.mark.unit

from nppoints.dimensions import TypeTag, type_tag_for, widen


SUPPORTED = [
    ("i1", TypeTag.SIGNED8),
    ("i2", TypeTag.SIGNED16),
    ("i4", TypeTag.SIGNED32),
    ("i8", TypeTag.SIGNED64),
    ("u1", TypeTag.UNSIGNED8),
    ("u2", TypeTag.UNSIGNED16),
    ("u4", TypeTag.UNSIGNED32),
    ("u8", TypeTag.UNSIGNED64),
    ("f4", TypeTag.FLOAT),
    ("f8", TypeTag.DOUBLE),
]


@pytest.mark.parametrize("code,expected", SUPPORTED)
def test_supported_kind_maps_to_one_tag(code, expected):
    """Each supported kind and size maps to one tag of that size."""
    dtype = np.dtype(code)
    tag = type_tag_for(dtype)
    assert tag is expected
    assert tag.size == dtype.itemsize


@pytest.mark.parametrize("code,expected", SUPPORTED)
def test_byte_order_does_not_change_tag(code, expected):
    """Byte order does not affect the tag."""
    assert type_tag_for(np.dtype(">" + code)) is expected
    assert type_tag_for(np.dtype("<" + code)) is expected


def test_every_tag_is_reachable():
    """Every tag has a source dtype."""
    assert {tag for _, tag in SUPPORTED} == set(TypeTag)


@pytest.mark.parametrize("code", ["?", "f2", "c8", "c16", "S4", "U3", "M8[ns]", "m8[s]", "O", "V8"])
def test_unsupported_kinds_map_to_none(code):
    """Kinds without a tag map to None."""
    assert type_tag_for(np.dtype(code)) is None


def test_subarray_and_nested_fields_unsupported():
    """Sub-arrays and nested records map to None."""
    assert type_tag_for(np.dtype(("f8", (3,)))) is None
    assert type_tag_for(np.dtype([("a", "f8")])) is None


def test_tag_dtype_is_native():
    """Tag dtypes are in native byte order."""
    assert TypeTag.DOUBLE.dtype == np.dtype("=f8")
    assert TypeTag.UNSIGNED16.dtype.isnative


class TestWiden:
    """Test type widening."""

    def test_same_tag_unchanged(self):
        """Widening a tag with itself changes nothing."""
        assert widen(TypeTag.FLOAT, TypeTag.FLOAT) is TypeTag.FLOAT

    def test_signed_and_unsigned_small(self):
        """Mixed small integers widen to the next signed size."""
        assert widen(TypeTag.SIGNED8, TypeTag.UNSIGNED8) is TypeTag.SIGNED16

    def test_int_and_float(self):
        """A 32-bit int and a float widen to double."""
        assert widen(TypeTag.SIGNED32, TypeTag.FLOAT) is TypeTag.DOUBLE

    def test_mixed_64_bit_integers_become_double(self):
        """Mixed 64-bit integers widen to double."""
        assert widen(TypeTag.SIGNED64, TypeTag.UNSIGNED64) is TypeTag.DOUBLE

    def test_is_symmetric(self):
        """Argument order does not matter."""
        assert widen(TypeTag.UNSIGNED16, TypeTag.SIGNED32) is widen(TypeTag.SIGNED32, TypeTag.UNSIGNED16)
