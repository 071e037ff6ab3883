"""Custom exceptions and native status codes for safenc."""

from __future__ import annotations

import os
from enum import IntEnum


# Native status codes, as returned by the libnetcdf C API
NC_NOERR = 0
NC_EBADID = -33
NC_ENFILE = -34
NC_EEXIST = -35
NC_EINVAL = -36
NC_EPERM = -37
NC_ENOTINDEFINE = -38
NC_EINDEFINE = -39
NC_EINVALCOORDS = -40
NC_ENAMEINUSE = -42
NC_ENOTATT = -43
NC_EBADTYPE = -45
NC_EBADDIM = -46
NC_EUNLIMPOS = -47
NC_ENOTVAR = -49
NC_EGLOBAL = -50
NC_ENOTNC = -51
NC_EUNLIMIT = -54
NC_ECHAR = -56
NC_EEDGE = -57
NC_ESTRIDE = -58
NC_EBADNAME = -59
NC_ERANGE = -60
NC_ENOMEM = -61
NC_EVARSIZE = -62
NC_EDIMSIZE = -63
NC_ETRUNC = -64
NC_EHDFERR = -101
NC_ECANTREAD = -102
NC_ECANTWRITE = -103
NC_ECANTCREATE = -104
NC_EFILEMETA = -105
NC_EDIMMETA = -106
NC_EATTMETA = -107
NC_EVARMETA = -108
NC_EATTEXISTS = -110
NC_ENOTNC4 = -111
NC_ESTRICTNC3 = -112
NC_EBADGRPID = -116
NC_ELATEFILL = -122
NC_ELATEDEF = -123
NC_ENOGRP = -125
NC_EBADCHUNK = -127

# Status-to-message table, mirrors nc_strerror
STATUS_MESSAGES = {
    NC_NOERR: "No error",
    NC_EBADID: "NetCDF: Not a valid ID",
    NC_ENFILE: "NetCDF: Too many files open",
    NC_EEXIST: "NetCDF: File exists && NC_NOCLOBBER",
    NC_EINVAL: "NetCDF: Invalid argument",
    NC_EPERM: "NetCDF: Write to read only",
    NC_ENOTINDEFINE: "NetCDF: Operation not allowed in data mode",
    NC_EINDEFINE: "NetCDF: Operation not allowed in define mode",
    NC_EINVALCOORDS: "NetCDF: Index exceeds dimension bound",
    NC_ENAMEINUSE: "NetCDF: String match to name in use",
    NC_ENOTATT: "NetCDF: Attribute not found",
    NC_EBADTYPE: "NetCDF: Not a valid data type or _FillValue type mismatch",
    NC_EBADDIM: "NetCDF: Invalid dimension ID or name",
    NC_EUNLIMPOS: "NetCDF: NC_UNLIMITED in the wrong index",
    NC_ENOTVAR: "NetCDF: Variable not found",
    NC_EGLOBAL: "NetCDF: Action prohibited on NC_GLOBAL varid",
    NC_ENOTNC: "NetCDF: Unknown file format",
    NC_EUNLIMIT: "NetCDF: NC_UNLIMITED size already in use",
    NC_ECHAR: "NetCDF: Attempt to convert between text & numbers",
    NC_EEDGE: "NetCDF: Start+count exceeds dimension bound",
    NC_ESTRIDE: "NetCDF: Illegal stride",
    NC_EBADNAME: "NetCDF: Name contains illegal characters",
    NC_ERANGE: "NetCDF: Numeric conversion not representable",
    NC_ENOMEM: "NetCDF: Memory allocation (malloc) failure",
    NC_EVARSIZE: "NetCDF: One or more variable sizes violate format constraints",
    NC_EDIMSIZE: "NetCDF: Invalid dimension size",
    NC_ETRUNC: "NetCDF: File likely truncated or possibly corrupted",
    NC_EHDFERR: "NetCDF: HDF error",
    NC_ECANTREAD: "NetCDF: Can't read file",
    NC_ECANTWRITE: "NetCDF: Can't write file",
    NC_ECANTCREATE: "NetCDF: Can't create file",
    NC_EFILEMETA: "NetCDF: Can't add HDF5 file metadata",
    NC_EDIMMETA: "NetCDF: Can't define dimensional metadata",
    NC_EATTMETA: "NetCDF: Can't open HDF5 attribute",
    NC_EVARMETA: "NetCDF: Problem with variable metadata.",
    NC_EATTEXISTS: "NetCDF: Attempt to create attribute that already exists",
    NC_ENOTNC4: "NetCDF: Attempting netcdf-4 operation on netcdf-3 file",
    NC_ESTRICTNC3: "NetCDF: Attempting netcdf-4 operation on strict nc3 netcdf-4 file",
    NC_EBADGRPID: "NetCDF: Bad group id.",
    NC_ELATEFILL: "NetCDF: Attempt to define fill value when data already exists.",
    NC_ELATEDEF: "NetCDF: Attempt to define var properties, like deflate, after enddef.",
    NC_ENOGRP: "NetCDF: No group found.",
    NC_EBADCHUNK: "NetCDF: Bad chunk sizes.",
}


class ErrorKind(IntEnum):
    """Closed set of failure classes surfaced by the engine."""

    NOT_FOUND = 1
    TYPE_MISMATCH = 2
    SHAPE_MISMATCH = 3
    ALREADY_EXISTS = 4
    PERMISSION = 5
    IO = 6
    UNKNOWN = 7


_STATUS_KINDS = {
    NC_ENOTATT: ErrorKind.NOT_FOUND,
    NC_ENOTVAR: ErrorKind.NOT_FOUND,
    NC_EBADDIM: ErrorKind.NOT_FOUND,
    NC_ENOGRP: ErrorKind.NOT_FOUND,
    NC_EBADTYPE: ErrorKind.TYPE_MISMATCH,
    NC_ECHAR: ErrorKind.TYPE_MISMATCH,
    NC_ERANGE: ErrorKind.TYPE_MISMATCH,
    NC_EINVALCOORDS: ErrorKind.SHAPE_MISMATCH,
    NC_EEDGE: ErrorKind.SHAPE_MISMATCH,
    NC_ESTRIDE: ErrorKind.SHAPE_MISMATCH,
    NC_EUNLIMPOS: ErrorKind.SHAPE_MISMATCH,
    NC_EDIMSIZE: ErrorKind.SHAPE_MISMATCH,
    NC_EEXIST: ErrorKind.ALREADY_EXISTS,
    NC_ENAMEINUSE: ErrorKind.ALREADY_EXISTS,
    NC_EATTEXISTS: ErrorKind.ALREADY_EXISTS,
    NC_EPERM: ErrorKind.PERMISSION,
    NC_ENOTINDEFINE: ErrorKind.PERMISSION,
    NC_EINDEFINE: ErrorKind.PERMISSION,
    NC_ELATEFILL: ErrorKind.PERMISSION,
    NC_ELATEDEF: ErrorKind.PERMISSION,
    NC_ENFILE: ErrorKind.IO,
    NC_ENOTNC: ErrorKind.IO,
    NC_ETRUNC: ErrorKind.IO,
    NC_EHDFERR: ErrorKind.IO,
    NC_ECANTREAD: ErrorKind.IO,
    NC_ECANTWRITE: ErrorKind.IO,
    NC_ECANTCREATE: ErrorKind.IO,
    NC_EFILEMETA: ErrorKind.IO,
}


def strerror(code: int) -> str:
    """Get the native message for a status code.

    Positive codes are system errno values, as the engine reports them
    for failed opens.
    """
    if code > 0:
        return os.strerror(code)
    return STATUS_MESSAGES.get(code, f"NetCDF: Unknown error {code}")


def kind_for_status(code: int) -> ErrorKind:
    """Classify a native status code."""
    if code > 0:
        return ErrorKind.IO
    return _STATUS_KINDS.get(code, ErrorKind.UNKNOWN)


class SafeNCError(Exception):
    """Base exception for safenc."""

    pass


class NetCDFError(SafeNCError):
    """Failure reported by, or on behalf of, the native engine.

    Attributes:
        kind: Taxonomy class of the failure.
        code: Raw native status code.
        message: Native message for ``code``.
        detail: Optional context added by safenc (names, shapes).
    """

    kind = ErrorKind.UNKNOWN

    def __init__(self, code: int, detail: str | None = None) -> None:
        self.code = code
        self.message = strerror(code)
        self.detail = detail
        text = self.message if detail is None else f"{self.message}: {detail}"
        super().__init__(text)


class NotFoundError(NetCDFError):
    """A name or path lookup failed."""

    kind = ErrorKind.NOT_FOUND


class TypeMismatchError(NetCDFError):
    """Requested element type differs from the stored type."""

    kind = ErrorKind.TYPE_MISMATCH


class ShapeMismatchError(NetCDFError):
    """Requested region exceeds the extent, or ranks differ."""

    kind = ErrorKind.SHAPE_MISMATCH


class AlreadyExistsError(NetCDFError):
    """A name is already taken."""

    kind = ErrorKind.ALREADY_EXISTS


class PermissionDeniedError(NetCDFError):
    """Write attempted on a read-only file, or on fixed metadata."""

    kind = ErrorKind.PERMISSION


class StorageError(NetCDFError):
    """Underlying storage or transport failure."""

    kind = ErrorKind.IO


class UnknownError(NetCDFError):
    """Status code without a specific mapping."""

    kind = ErrorKind.UNKNOWN


_KIND_CLASSES = {
    ErrorKind.NOT_FOUND: NotFoundError,
    ErrorKind.TYPE_MISMATCH: TypeMismatchError,
    ErrorKind.SHAPE_MISMATCH: ShapeMismatchError,
    ErrorKind.ALREADY_EXISTS: AlreadyExistsError,
    ErrorKind.PERMISSION: PermissionDeniedError,
    ErrorKind.IO: StorageError,
    ErrorKind.UNKNOWN: UnknownError,
}


def error_from_status(code: int, detail: str | None = None) -> NetCDFError:
    """Build the exception matching a native status code.

    Args:
        code: Native status code (non-zero).
        detail: Optional context appended to the message.

    Returns:
        Exception instance of the class for the code's kind.
    """
    return _KIND_CLASSES[kind_for_status(code)](code, detail)


class ClosedFileError(SafeNCError, RuntimeError):
    """A handle was used after its owning file was closed."""

    pass


class InvalidSelectionError(SafeNCError, ValueError):
    """A selection with empty counts or non-positive strides."""

    pass


class ConfigError(SafeNCError):
    """Exception raised for configuration errors."""

    pass
