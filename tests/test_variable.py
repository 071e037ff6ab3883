"""Tests for typed variable I/O."""

import pytest
import numpy as np

NUMERIC_TYPES = [
    ("BYTE", np.int8),
    ("UBYTE", np.uint8),
    ("SHORT", np.int16),
    ("USHORT", np.uint16),
    ("INT", np.int32),
    ("UINT", np.uint32),
    ("INT64", np.int64),
    ("UINT64", np.uint64),
    ("FLOAT", np.float32),
    ("DOUBLE", np.float64),
]


@pytest.fixture
def grid_file(writable_file):
    """Writable file with dims t (unlimited), x=4, y=5."""
    writable_file.create_unlimited_dimension("t")
    writable_file.create_dimension("x", 4)
    writable_file.create_dimension("y", 5)
    return writable_file


class TestRoundTrip:
    """Test suite for put_region followed by get_region."""

    @pytest.mark.parametrize("name, dtype", NUMERIC_TYPES)
    def test_numeric_region(self, grid_file, name, dtype):
        """Test a strided region reads back exactly for every numeric type."""
        import safenc
        from safenc.selection import Selection

        v = grid_file.create_variable("v", safenc.NcType[name], ["x", "y"])
        sel = Selection(start=(1, 0), count=(2, 3), stride=(2, 2))
        data = np.arange(6, dtype=dtype).reshape(2, 3)

        v.put_region(sel, data)
        out = v.get_region(sel)

        assert out.dtype == np.dtype(dtype)
        assert out.shape == (2, 3)
        np.testing.assert_array_equal(out, data)

    def test_string_region(self, grid_file):
        """Test variable-length strings round-trip."""
        import safenc
        from safenc.selection import Selection

        v = grid_file.create_variable("names", safenc.NcType.STRING, ["x"])
        sel = Selection(start=(1,), count=(2,))
        v.put_region(sel, ["alpha", "beta gamma"])

        assert v.get_region(sel).tolist() == ["alpha", "beta gamma"]
        assert v.value([2]) == "beta gamma"

    def test_char_region(self, grid_file):
        """Test fixed-width text hides the character axis."""
        import safenc
        from safenc.selection import Selection

        grid_file.create_dimension("nchar", 6)
        v = grid_file.create_variable("labels", safenc.NcType.CHAR, ["x", "nchar"])

        assert v.shape == (4,)
        assert v.rank == 1
        assert len(v.dimensions) == 2

        v.put_region(Selection(start=(0,), count=(2,)), ["abc", "sixchr"])
        assert v.get_region(Selection(start=(0,), count=(2,))).tolist() == ["abc", "sixchr"]

        with pytest.raises(safenc.ShapeMismatchError):
            v.put_value("toolongtext", [3])

    def test_scalar_variable(self, writable_file):
        """Test rank-0 variables read and write one value."""
        import safenc

        v = writable_file.create_variable("pi", safenc.NcType.DOUBLE)
        assert v.shape == ()
        v.put_value(3.25)
        assert v.value() == 3.25
        assert v.values().shape == ()

    def test_scalar_string(self, writable_file):
        """Test a rank-0 string variable."""
        import safenc

        v = writable_file.create_variable("label", safenc.NcType.STRING)
        v.put_value("hello")
        assert v.value() == "hello"
        v.put_value("world")
        assert v.values().tolist() == "world"


class TestTypeDispatch:
    """Test suite for element type checks."""

    def test_write_wrong_numpy_type(self, grid_file):
        """Test buffers of another width are rejected."""
        import safenc
        from safenc.selection import Selection

        v = grid_file.create_variable("v", safenc.NcType.INT, ["x"])
        with pytest.raises(safenc.TypeMismatchError):
            v.put_region(Selection.full((4,)), np.zeros(4, dtype=np.int64))
        with pytest.raises(safenc.TypeMismatchError):
            v.put_region(Selection.full((4,)), np.zeros(4, dtype=np.float32))

    def test_read_requested_type(self, grid_file):
        """Test reads requesting another type fail."""
        import safenc
        from safenc.selection import Selection

        v = grid_file.create_variable("v", safenc.NcType.FLOAT, ["x"])
        v.put_values(np.ones(4, dtype=np.float32))

        assert v.values(np.float32).dtype == np.float32
        with pytest.raises(safenc.TypeMismatchError):
            v.values(np.float64)
        with pytest.raises(safenc.TypeMismatchError):
            v.get_region(Selection.full((4,)), dtype=safenc.NcType.DOUBLE)

    def test_text_into_numeric(self, grid_file):
        """Test text is never coerced into numbers."""
        import safenc

        v = grid_file.create_variable("v", safenc.NcType.INT, ["x"])
        with pytest.raises(safenc.TypeMismatchError):
            v.put_values(["1", "2", "3", "4"])

    def test_numbers_into_text(self, grid_file):
        """Test numbers are never coerced into text."""
        import safenc

        v = grid_file.create_variable("s", safenc.NcType.STRING, ["x"])
        with pytest.raises(safenc.TypeMismatchError):
            v.put_values([1, 2, 3, 4])


class TestShapeChecks:
    """Test suite for extent and selection checks."""

    def test_region_beyond_extent(self, grid_file, monkeypatch):
        """Test out-of-extent reads fail before any native read."""
        import safenc
        from safenc.selection import Selection
        from safenc.variable import Variable

        v = grid_file.create_variable("v", safenc.NcType.INT, ["x", "y"])

        def no_read(self, selection):
            raise AssertionError("native read attempted")

        monkeypatch.setattr(Variable, "_native_get", no_read)
        with pytest.raises(safenc.ShapeMismatchError):
            v.get_region(Selection(start=(0, 4), count=(1, 2)))
        with pytest.raises(safenc.ShapeMismatchError):
            v.get_region(Selection(start=(0, 0), count=(2, 3), stride=(4, 1)))
        with pytest.raises(safenc.ShapeMismatchError):
            v.get_region(Selection(start=(0,), count=(1,)))

    def test_write_beyond_fixed_extent(self, grid_file):
        """Test fixed axes cannot be written past their length."""
        import safenc
        from safenc.selection import Selection

        v = grid_file.create_variable("v", safenc.NcType.INT, ["x"])
        with pytest.raises(safenc.ShapeMismatchError):
            v.put_region(Selection(start=(3,), count=(2,)), [1, 2])

    def test_buffer_size_mismatch(self, grid_file):
        """Test the buffer must hold exactly the selected elements."""
        import safenc
        from safenc.selection import Selection

        v = grid_file.create_variable("v", safenc.NcType.INT, ["x"])
        with pytest.raises(safenc.ShapeMismatchError):
            v.put_region(Selection(start=(0,), count=(2,)), [1, 2, 3])

    def test_empty_selection_rejected(self, grid_file):
        """Test zero counts are a local precondition failure."""
        import safenc
        from safenc.selection import Selection

        grid_file.create_variable("v", safenc.NcType.INT, ["x"])
        with pytest.raises(safenc.InvalidSelectionError):
            Selection(start=(0,), count=(0,))


class TestUnlimited:
    """Test suite for growth along the unlimited axis."""

    def test_write_extends_length(self, grid_file):
        """Test writing at the current length appends and keeps earlier data."""
        import safenc
        from safenc.selection import Selection

        v = grid_file.create_variable("series", safenc.NcType.INT, ["t", "x"])
        first = np.arange(8, dtype=np.int32).reshape(2, 4)
        v.put_region(Selection(start=(0, 0), count=(2, 4)), first)
        assert v.shape == (2, 4)

        more = np.full((3, 4), 9, dtype=np.int32)
        v.put_region(Selection(start=(2, 0), count=(3, 4)), more)

        assert v.shape == (5, 4)
        assert len(grid_file.dimension("t")) == 5
        np.testing.assert_array_equal(v.get_region(Selection(start=(0, 0), count=(2, 4))), first)

    def test_write_cannot_leave_gap(self, grid_file):
        """Test the unlimited start may not pass the current length."""
        import safenc
        from safenc.selection import Selection

        v = grid_file.create_variable("series", safenc.NcType.DOUBLE, ["t"])
        v.put_values([1.0])
        with pytest.raises(safenc.ShapeMismatchError):
            v.put_region(Selection(start=(3,), count=(1,)), [2.0])

    def test_strided_append_refused(self, grid_file):
        """Test a strided write cannot grow the unlimited axis and leave holes."""
        import safenc
        from safenc.selection import Selection

        v = grid_file.create_variable("series", safenc.NcType.DOUBLE, ["t"])
        v.put_values([1.0])
        with pytest.raises(safenc.ShapeMismatchError):
            v.put_region(Selection(start=(1,), count=(2,), stride=(2,)), [2.0, 3.0])
        assert v.values().tolist() == [1.0]

        v.put_values([2.0, 3.0, 4.0], start=[1])
        v.put_region(Selection(start=(0,), count=(2,), stride=(2,)), [5.0, 6.0])
        assert v.values().tolist() == [5.0, 2.0, 6.0, 4.0]

    def test_read_past_length(self, grid_file):
        """Test reads stop at the current unlimited length."""
        import safenc
        from safenc.selection import Selection

        v = grid_file.create_variable("series", safenc.NcType.DOUBLE, ["t"])
        v.put_values([1.0, 2.0])
        with pytest.raises(safenc.ShapeMismatchError):
            v.get_region(Selection(start=(1,), count=(2,)))

    def test_empty_unlimited_full_read(self, grid_file):
        """Test a never-written variable reads as empty."""
        import safenc

        v = grid_file.create_variable("series", safenc.NcType.DOUBLE, ["t", "x"])
        out = v.values()
        assert out.shape == (0, 4)
        assert out.dtype == np.float64
        assert v.get_full().shape == (0, 4)

    def test_put_values_infers_unlimited_count(self, grid_file):
        """Test a flat buffer fills whole records of the unlimited axis."""
        import safenc

        v = grid_file.create_variable("series", safenc.NcType.INT, ["t", "x"])
        sel = v.put_values(np.arange(12, dtype=np.int32))
        assert sel.count == (3, 4)
        assert v.shape == (3, 4)

        v.put_values(np.arange(4, dtype=np.int32), start=[3, 0])
        assert v.shape == (4, 4)

        with pytest.raises(safenc.ShapeMismatchError):
            v.put_values(np.arange(5, dtype=np.int32), start=[4, 0])


class TestConvenience:
    """Test suite for indexing and buffer helpers."""

    def test_getitem(self, grid_file):
        """Test slice syntax maps to selections."""
        import safenc

        v = grid_file.create_variable("v", safenc.NcType.INT, ["x", "y"])
        data = np.arange(20, dtype=np.int32).reshape(4, 5)
        v.put_values(data)

        np.testing.assert_array_equal(v[:], data)
        np.testing.assert_array_equal(v[1:3, ::2], data[1:3, ::2])
        np.testing.assert_array_equal(v[2], data[2])
        assert v[-1, -1] == 19

    def test_setitem_appends(self, grid_file):
        """Test assignment through slices, including open-ended appends."""
        import safenc

        v = grid_file.create_variable("series", safenc.NcType.DOUBLE, ["t"])
        v[0:2] = [1.0, 2.0]
        v[2:] = [3.0, 4.0]
        assert v.values().tolist() == [1.0, 2.0, 3.0, 4.0]

        v[1] = 5.0
        assert v.values().tolist() == [1.0, 5.0, 3.0, 4.0]

    def test_read_into(self, grid_file):
        """Test reading into a caller-owned buffer."""
        import safenc
        from safenc.selection import Selection

        v = grid_file.create_variable("v", safenc.NcType.SHORT, ["x"])
        v.put_values(np.array([4, 3, 2, 1], dtype=np.int16))

        out = np.zeros(2, dtype=np.int16)
        assert v.read_into(out, Selection(start=(1,), count=(2,))) == 2
        assert out.tolist() == [3, 2]

        with pytest.raises(safenc.TypeMismatchError):
            v.read_into(np.zeros(4, dtype=np.int32))
        with pytest.raises(safenc.ShapeMismatchError):
            v.read_into(np.zeros(3, dtype=np.int16))

    def test_metadata(self, grid_file):
        """Test type and shape queries."""
        import safenc

        v = grid_file.create_variable("v", "u2", ["x", "y"])
        assert v.nctype is safenc.NcType.USHORT
        assert v.dtype == np.uint16
        assert v.shape == (4, 5)
        assert v.size == 20
        assert len(v) == 20
        assert v.unlimited_axis is None
        assert [d.name for d in v.dimensions] == ["x", "y"]
