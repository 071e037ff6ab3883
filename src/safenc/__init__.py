"""safenc - safe, typed access to NetCDF files.

Files, groups, dimensions, variables and attributes are handles owned by
an open :class:`File`; variable and attribute I/O is checked against the
stored element type and the current extent before the engine is called.
"""

from safenc.attribute import Attribute
from safenc.dimension import Dimension
from safenc.file import File, OpenMode, append, create, open
from safenc.gateway import engine_state
from safenc.group import Group
from safenc.selection import Selection
from safenc.types import NcType
from safenc.utils.exceptions import (
    AlreadyExistsError,
    ClosedFileError,
    ErrorKind,
    InvalidSelectionError,
    NetCDFError,
    NotFoundError,
    PermissionDeniedError,
    SafeNCError,
    ShapeMismatchError,
    StorageError,
    TypeMismatchError,
    UnknownError,
)
from safenc.variable import Endianness, Variable

__version__ = "0.1.0"

__all__ = [
    "File",
    "OpenMode",
    "open",
    "append",
    "create",
    "Group",
    "Dimension",
    "Variable",
    "Endianness",
    "Attribute",
    "Selection",
    "NcType",
    "engine_state",
    "SafeNCError",
    "NetCDFError",
    "ErrorKind",
    "NotFoundError",
    "TypeMismatchError",
    "ShapeMismatchError",
    "AlreadyExistsError",
    "PermissionDeniedError",
    "StorageError",
    "UnknownError",
    "ClosedFileError",
    "InvalidSelectionError",
]
