"""Tests for StridedIterator block access and per-field protocol."""

import numpy as np
import pytest

pytestmark = pytest.mark.unit

from nppoints.contracts import IteratorError, UseError
from nppoints.io.iterator import StridedIterator
from nppoints.io.loader import ArrayHandle
from nppoints.io.schema import SchemaResolver
from tests.helpers.fake_arrays import make_points_array


@pytest.fixture
def array():
    return make_points_array(10)


@pytest.fixture
def handle(array):
    return ArrayHandle(array, "mem.npy")


@pytest.fixture
def fields(handle, registry):
    return SchemaResolver(registry).resolve(handle)


def collect_blocks(it):
    blocks = [it.block]
    while (block := it.next_block()) is not None:
        blocks.append(block)
    return blocks


def walk_rows(it, fields):
    rows = []
    while not it.exhausted:
        row = {}
        for f in fields:
            row[f.canonical_name] = np.frombuffer(it.window(f), dtype=f.type_tag.dtype)[0]
            it.advance(f)
        rows.append(row)
    return rows


class TestBlocks:
    """Test block-wise access."""

    def test_blocks_cover_rows_in_order(self, handle, fields):
        """Blocks tile the array in order, the last one short."""
        with StridedIterator(handle, fields, block_size=4) as it:
            blocks = collect_blocks(it)
        assert [b.count for b in blocks] == [4, 4, 2]
        assert [b.start for b in blocks] == [0, 4, 8]

    def test_single_block_when_block_size_large(self, handle, fields):
        """A block size above the row count gives one block."""
        with StridedIterator(handle, fields, block_size=1000) as it:
            blocks = collect_blocks(it)
        assert [b.count for b in blocks] == [10]

    def test_next_block_becomes_current(self, handle, fields):
        """The block returned by next_block is the current block."""
        with StridedIterator(handle, fields, block_size=4) as it:
            block = it.next_block()
            assert it.block is block
            assert block.start == 4

    def test_blocks_are_views(self, array, handle, fields):
        """Blocks share memory with the array and report its layout."""
        with StridedIterator(handle, fields, block_size=4) as it:
            block = it.block
            assert np.shares_memory(block.data, array)
            assert block.stride == array.dtype.itemsize
            assert block.address == array.__array_interface__["data"][0]

    def test_strided_source_reports_stride(self, array, registry):
        """A strided source keeps its stride in blocks and rows."""
        view = array[::2]
        handle = ArrayHandle(view, "mem.npy")
        fields = SchemaResolver(registry).resolve(handle)
        with StridedIterator(handle, fields, block_size=2) as it:
            assert it.block.stride == 2 * array.dtype.itemsize
            rows = walk_rows(it, fields)
        assert [r["X"] for r in rows] == [0.0, 20.0, 40.0, 60.0, 80.0]

    def test_end_of_data_signalled(self, handle, fields):
        """next_block returns None once all rows are covered."""
        with StridedIterator(handle, fields, block_size=10) as it:
            assert it.next_block() is None
            assert it.exhausted

    def test_invalid_block_size(self, handle, fields):
        """A block size below one is rejected."""
        with pytest.raises(ValueError):
            StridedIterator(handle, fields, block_size=0)


class TestMixedAccess:
    """Test that block access and field reads cannot skip rows."""

    def test_fields_after_next_block_raise(self, handle, fields):
        """Reading fields after taking a block raises instead of skipping rows."""
        with StridedIterator(handle, fields, block_size=4) as it:
            it.next_block()
            with pytest.raises(UseError, match="after taking blocks"):
                it.window(fields[0])
            with pytest.raises(UseError, match="after taking blocks"):
                it.advance(fields[0])

    def test_next_block_after_window_raises(self, handle, fields):
        """Taking a block once fields were read raises."""
        with StridedIterator(handle, fields, block_size=4) as it:
            it.window(fields[0])
            with pytest.raises(UseError, match="after reading fields"):
                it.next_block()

    def test_next_block_mid_walk_keeps_rows(self, handle, fields):
        """A rejected next_block call leaves the row walk intact."""
        with StridedIterator(handle, fields, block_size=4) as it:
            for f in fields:
                it.window(f)
                it.advance(f)
            with pytest.raises(UseError):
                it.next_block()
            rows = walk_rows(it, fields)
        assert len(rows) == 9
        assert rows[0]["X"] == 10.0


class TestFieldProtocol:
    """Test the per-field window/advance protocol."""

    def test_walk_across_blocks_reads_every_value(self, array, handle, fields):
        """Walking rows across block boundaries reads every value."""
        with StridedIterator(handle, fields, block_size=3) as it:
            rows = walk_rows(it, fields)
            assert it.position == 10
        assert len(rows) == 10
        for i, row in enumerate(rows):
            assert row["X"] == array["X"][i]
            assert row["Intensity"] == array["Intensity"][i]
            assert row["Classification"] == array["Classification"][i]

    def test_window_size_matches_field(self, handle, fields):
        """Each window is exactly the field's item size."""
        with StridedIterator(handle, fields) as it:
            for f in fields:
                assert len(it.window(f)) == f.itemsize
                it.advance(f)

    def test_big_endian_windows_are_native(self, registry):
        """Big-endian fields come out in native byte order."""
        arr = np.array([(1.5, 7), (2.5, 8)], dtype=[("X", ">f8"), ("Intensity", ">u2")])
        handle = ArrayHandle(arr, "be.npy")
        fields = SchemaResolver(registry).resolve(handle)
        with StridedIterator(handle, fields) as it:
            rows = walk_rows(it, fields)
        assert rows == [{"X": 1.5, "Intensity": 7}, {"X": 2.5, "Intensity": 8}]

    def test_out_of_order_window_raises(self, handle, fields):
        """Reading a later field first raises."""
        with StridedIterator(handle, fields) as it:
            with pytest.raises(UseError, match="out of order"):
                it.window(fields[1])

    def test_skipping_advance_raises(self, handle, fields):
        """Skipping a field's advance raises and names the expected field."""
        with StridedIterator(handle, fields) as it:
            it.advance(fields[0])
            with pytest.raises(UseError, match="expected 'Y'"):
                it.advance(fields[2])

    def test_window_after_exhaustion_raises(self, handle, fields):
        """Reading past the last row raises."""
        with StridedIterator(handle, fields) as it:
            walk_rows(it, fields)
            with pytest.raises(UseError, match="exhausted"):
                it.window(fields[0])


class TestAcquireRelease:
    """Test iterator acquisition and release."""

    def test_close_is_idempotent(self, handle, fields):
        """Closing twice is allowed."""
        it = StridedIterator(handle, fields).open()
        it.close()
        it.close()
        assert it.closed

    def test_use_after_close_raises(self, handle, fields):
        """Any access after close raises IteratorError."""
        it = StridedIterator(handle, fields).open()
        it.close()
        with pytest.raises(IteratorError, match="closed"):
            it.window(fields[0])
        with pytest.raises(IteratorError):
            it.next_block()

    def test_use_before_open_raises(self, handle, fields):
        """Access before open raises IteratorError."""
        it = StridedIterator(handle, fields)
        with pytest.raises(IteratorError, match="not opened"):
            it.exhausted

    def test_open_twice_raises(self, handle, fields):
        """A second open raises."""
        it = StridedIterator(handle, fields).open()
        with pytest.raises(IteratorError, match="already opened"):
            it.open()

    def test_reopen_after_close_raises(self, handle, fields):
        """A closed iterator cannot be reopened."""
        it = StridedIterator(handle, fields).open()
        it.close()
        with pytest.raises(IteratorError):
            it.open()

    def test_released_handle_raises(self, handle, fields):
        """Opening over a released handle raises with the path."""
        handle.release()
        with pytest.raises(IteratorError, match="released") as exc:
            StridedIterator(handle, fields).open()
        assert exc.value.path == "mem.npy"

    def test_no_fields_raises(self, handle):
        """Opening without fields raises."""
        with pytest.raises(IteratorError, match="no fields"):
            StridedIterator(handle, ()).open()
