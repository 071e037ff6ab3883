"""Tests for element types and buffer coercion."""

import pytest
import numpy as np


class TestNcType:
    """Test suite for NcType."""

    @pytest.mark.parametrize(
        "dtype, name",
        [
            (np.int8, "BYTE"),
            (np.uint8, "UBYTE"),
            (np.int16, "SHORT"),
            (np.uint16, "USHORT"),
            (np.int32, "INT"),
            (np.uint32, "UINT"),
            (np.int64, "INT64"),
            (np.uint64, "UINT64"),
            (np.float32, "FLOAT"),
            (np.float64, "DOUBLE"),
            ("S1", "CHAR"),
            (object, "STRING"),
        ],
    )
    def test_from_dtype(self, dtype, name):
        """Test every supported dtype maps to its tag."""
        from safenc.types import NcType

        assert NcType.from_dtype(dtype) is NcType[name]

    def test_byte_order_ignored(self):
        """Test big-endian dtypes map like native ones."""
        from safenc.types import NcType

        assert NcType.from_dtype(">i4") is NcType.INT

    def test_unsupported_dtype(self):
        """Test complex and bool have no NetCDF type."""
        from safenc.types import NcType
        from safenc.utils.exceptions import TypeMismatchError

        with pytest.raises(TypeMismatchError):
            NcType.from_dtype(np.complex64)
        with pytest.raises(TypeMismatchError):
            NcType.from_dtype(bool)

    def test_of_accepts_several_spellings(self):
        """Test NcType.of resolves tags, codes, dtypes and str."""
        from safenc.types import NcType

        assert NcType.of(NcType.SHORT) is NcType.SHORT
        assert NcType.of("i4") is NcType.INT
        assert NcType.of("float64") is NcType.DOUBLE
        assert NcType.of(np.uint16) is NcType.USHORT
        assert NcType.of(str) is NcType.STRING


class TestCoerceBuffer:
    """Test suite for coerce_buffer."""

    def test_numpy_exact_type_passes(self):
        """Test arrays of the stored type are accepted unchanged."""
        from safenc.types import NcType, coerce_buffer

        data = np.array([1, 2], dtype=np.int16)
        assert coerce_buffer(data, NcType.SHORT) is data

    def test_numpy_other_width_rejected(self):
        """Test no implicit widening or narrowing of numpy buffers."""
        from safenc.types import NcType, coerce_buffer
        from safenc.utils.exceptions import TypeMismatchError

        with pytest.raises(TypeMismatchError):
            coerce_buffer(np.array([1, 2], dtype=np.int64), NcType.INT)
        with pytest.raises(TypeMismatchError):
            coerce_buffer(np.array([1.0], dtype=np.float32), NcType.DOUBLE)

    def test_python_ints_fit(self):
        """Test plain ints convert when every value fits."""
        from safenc.types import NcType, coerce_buffer

        out = coerce_buffer([1, 2, 3], NcType.INT)
        assert out.dtype == np.int32
        assert out.tolist() == [1, 2, 3]

    def test_python_ints_out_of_range(self):
        """Test values outside the target range are rejected."""
        from safenc.types import NcType, coerce_buffer
        from safenc.utils.exceptions import TypeMismatchError

        with pytest.raises(TypeMismatchError):
            coerce_buffer([300], NcType.BYTE)
        with pytest.raises(TypeMismatchError):
            coerce_buffer([-1], NcType.UINT)

    def test_python_kind_mismatch(self):
        """Test floats are not accepted for integer types and vice versa."""
        from safenc.types import NcType, coerce_buffer
        from safenc.utils.exceptions import TypeMismatchError

        with pytest.raises(TypeMismatchError):
            coerce_buffer([1.5], NcType.INT)
        with pytest.raises(TypeMismatchError):
            coerce_buffer([1, 2], NcType.DOUBLE)
        with pytest.raises(TypeMismatchError):
            coerce_buffer(["a"], NcType.INT)

    def test_python_float_overflow(self):
        """Test floats that overflow single precision are rejected."""
        from safenc.types import NcType, coerce_buffer
        from safenc.utils.exceptions import TypeMismatchError

        assert coerce_buffer([0.1], NcType.FLOAT).dtype == np.float32
        with pytest.raises(TypeMismatchError):
            coerce_buffer([1e300], NcType.FLOAT)

    def test_text(self):
        """Test text buffers for STRING and CHAR."""
        from safenc.types import NcType, coerce_buffer
        from safenc.utils.exceptions import TypeMismatchError

        strings = coerce_buffer(["a", "bc"], NcType.STRING)
        assert strings.dtype == object
        assert strings.tolist() == ["a", "bc"]

        chars = coerce_buffer(["a", "bc"], NcType.CHAR)
        assert chars.dtype.kind == "U"

        assert coerce_buffer("one", NcType.STRING).shape == ()

        with pytest.raises(TypeMismatchError):
            coerce_buffer([1, 2], NcType.STRING)
        with pytest.raises(TypeMismatchError):
            coerce_buffer(np.array([b"a"]), NcType.CHAR)


class TestCheckRequested:
    """Test suite for check_requested."""

    def test_same_type_passes(self):
        """Test identical types and None pass."""
        from safenc.types import NcType, check_requested

        check_requested(NcType.INT, None)
        check_requested(NcType.INT, np.int32)
        check_requested(NcType.INT, NcType.INT)

    def test_other_type_fails(self):
        """Test any other type fails without coercion."""
        from safenc.types import NcType, check_requested
        from safenc.utils.exceptions import TypeMismatchError

        with pytest.raises(TypeMismatchError):
            check_requested(NcType.INT, np.int64)
