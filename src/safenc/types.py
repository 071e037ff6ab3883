"""Element types and buffer type checks."""

from __future__ import annotations

from enum import Enum
from typing import Any

import numpy as np

from safenc.utils.exceptions import NC_EBADTYPE, NC_ECHAR, NC_ERANGE, TypeMismatchError


class NcType(Enum):
    """Closed set of supported element types.

    Values are the type codes the engine accepts on variable creation.
    ``TEXT`` only exists for attributes (the untyped character form).
    """

    BYTE = "i1"
    UBYTE = "u1"
    SHORT = "i2"
    USHORT = "u2"
    INT = "i4"
    UINT = "u4"
    INT64 = "i8"
    UINT64 = "u8"
    FLOAT = "f4"
    DOUBLE = "f8"
    CHAR = "S1"
    STRING = "str"
    TEXT = "text"

    @property
    def is_numeric(self) -> bool:
        return self not in (NcType.CHAR, NcType.STRING, NcType.TEXT)

    @property
    def is_text(self) -> bool:
        return not self.is_numeric

    @property
    def dtype(self) -> np.dtype:
        """numpy dtype of in-memory buffers for this type."""
        if self.is_numeric:
            return np.dtype(self.value)
        if self is NcType.CHAR:
            return np.dtype(str)
        return np.dtype(object)

    @property
    def datatype(self) -> Any:
        """Datatype argument for the engine's createVariable."""
        if self is NcType.STRING:
            return str
        return self.value

    @classmethod
    def from_dtype(cls, dtype: Any) -> NcType:
        """Map a numpy dtype to its element type.

        Byte order is ignored.

        Raises:
            TypeMismatchError: If the dtype has no NetCDF counterpart.
        """
        dtype = np.dtype(dtype)
        if dtype.kind in "iuf":
            code = f"{dtype.kind}{dtype.itemsize}"
            for member in cls:
                if member.value == code:
                    return member
        elif dtype.kind == "S" and dtype.itemsize == 1:
            return cls.CHAR
        elif dtype.kind in "UO":
            return cls.STRING
        raise TypeMismatchError(NC_EBADTYPE, f"unsupported element type {dtype}")

    @classmethod
    def of(cls, value: Any) -> NcType:
        """Resolve an NcType, numpy dtype-like or ``str`` to an NcType."""
        if isinstance(value, NcType):
            return value
        if value is str:
            return cls.STRING
        try:
            return cls(value)
        except ValueError:
            return cls.from_dtype(value)

    @classmethod
    def from_native(cls, datatype: Any) -> NcType:
        """Element type of a native variable's ``dtype``."""
        if datatype is str:
            return cls.STRING
        return cls.from_dtype(datatype)


_KIND_FAMILY = {
    "i": "iu",
    "u": "iu",
    "f": "f",
}


def check_requested(stored: NcType, requested: Any) -> None:
    """Fail unless the requested type is the stored one.

    Raises:
        TypeMismatchError: On any difference, without coercion.
    """
    if requested is None:
        return
    wanted = NcType.of(requested)
    if wanted is not stored:
        raise TypeMismatchError(
            NC_EBADTYPE, f"requested {wanted.name}, stored type is {stored.name}"
        )


def coerce_buffer(values: Any, nctype: NcType) -> np.ndarray:
    """Convert caller values to a buffer of ``nctype``.

    numpy arrays and scalars must already have the exact element type.
    Plain Python values carry no width; they are accepted when they are of
    the same kind (integer, float, text) and fit the target type. Integers
    must convert exactly, floats must not overflow.

    Args:
        values: Scalar, sequence or numpy array.
        nctype: Stored element type.

    Returns:
        numpy array with ``nctype.dtype``.

    Raises:
        TypeMismatchError: If the values do not match the type.
    """
    if nctype.is_text:
        return _coerce_text(values, nctype)

    if isinstance(values, (np.ndarray, np.generic)):
        given = NcType.from_dtype(values.dtype)
        if given is not nctype:
            raise TypeMismatchError(
                NC_EBADTYPE, f"buffer holds {given.name}, variable stores {nctype.name}"
            )
        return np.asarray(values)

    raw = np.asarray(values)
    if raw.dtype.kind not in _KIND_FAMILY.get(nctype.dtype.kind, ""):
        if raw.dtype.kind in "USO":
            raise TypeMismatchError(NC_ECHAR, f"text given for {nctype.name} values")
        raise TypeMismatchError(
            NC_EBADTYPE, f"{raw.dtype} values given for {nctype.name} values"
        )

    with np.errstate(over="ignore", invalid="ignore"):
        converted = raw.astype(nctype.dtype)
    if nctype.dtype.kind == "f":
        fits = np.array_equal(np.isfinite(converted), np.isfinite(raw))
    else:
        fits = np.array_equal(converted, raw)
    if not fits:
        raise TypeMismatchError(NC_ERANGE, f"values do not fit {nctype.name}")
    return converted


def _coerce_text(values: Any, nctype: NcType) -> np.ndarray:
    if isinstance(values, np.ndarray) and values.dtype.kind not in "UO":
        raise TypeMismatchError(NC_ECHAR, f"{values.dtype} buffer for {nctype.name} values")

    if isinstance(values, str):
        items = np.empty((), dtype=object)
        items[()] = values
    else:
        items = np.asarray(values, dtype=object)

    if not all(isinstance(item, str) for item in items.flat):
        raise TypeMismatchError(NC_ECHAR, f"non-text values for {nctype.name} values")
    if nctype is NcType.CHAR:
        return items.astype(str)
    return items
