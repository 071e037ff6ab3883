"""NetCDF files: the owner of every handle."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Hashable, Sequence

import netCDF4

from safenc import gateway
from safenc.attribute import Attribute
from safenc.dimension import Dimension
from safenc.group import Group
from safenc.utils.exceptions import (
    NC_EEXIST,
    NC_EPERM,
    AlreadyExistsError,
    ClosedFileError,
    NetCDFError,
    PermissionDeniedError,
)
from safenc.utils.logging import get_logger
from safenc.variable import Variable

logger = get_logger("file")


class OpenMode(str, Enum):
    """How a file is opened."""

    READ = "r"
    APPEND = "a"
    CREATE = "w"
    CREATE_EXCLUSIVE = "x"

    @property
    def writable(self) -> bool:
        return self is not OpenMode.READ

    @property
    def creates(self) -> bool:
        return self in (OpenMode.CREATE, OpenMode.CREATE_EXCLUSIVE)


class File:
    """An open NetCDF file.

    The File owns the native file handle and is the arena for all handles
    derived from it: groups, dimensions and variables resolve their native
    objects through the File, which refuses once it is closed. The native
    handle is closed exactly once, by :meth:`close`, on leaving a ``with``
    block, or when the File is garbage collected.

    Native calls are serialized process-wide, but a File is not otherwise
    made thread-safe: use one writer per File, or guard it with your own
    lock.

    Example:
        >>> with safenc.create("out.nc") as f:
        ...     f.create_dimension("x", 3)
        ...     v = f.create_variable("v", "i4", ["x"])
        ...     v.put_values(np.array([1, 2, 3], dtype="i4"))
    """

    def __init__(
        self,
        path: str | Path,
        mode: OpenMode | str = OpenMode.READ,
        format: str | None = None,
    ) -> None:
        """Open or create a file.

        Args:
            path: File path.
            mode: ``"r"`` read-only, ``"a"`` read-write, ``"w"`` create
                (truncating), ``"x"`` create, failing if the file exists.
            format: Format for created files; defaults to the configured
                ``file.format``.

        Raises:
            AlreadyExistsError: Mode ``"x"`` and the file exists.
            StorageError: The file is missing, unreadable or not NetCDF.
        """
        self._open = False
        self._fill = True
        self._natives: dict[Hashable, Any] = {}
        self.path = Path(path)
        self.mode = OpenMode(mode)
        settings = gateway.engine_state().config.get("file", {})

        if self.mode is OpenMode.CREATE_EXCLUSIVE and self.path.exists():
            raise AlreadyExistsError(NC_EEXIST, str(self.path))

        kwargs: dict[str, Any] = {}
        if self.mode.creates:
            kwargs["format"] = format or settings.get("format", "NETCDF4")

        self._dataset = gateway.call(netCDF4.Dataset, str(self.path), mode=self.mode.value, **kwargs)
        self._open = True
        try:
            gateway.call(self._dataset.set_auto_maskandscale, False)
            gateway.call(self._dataset.set_auto_chartostring, False)
            if self.mode.creates and not settings.get("fill", True):
                gateway.call(self._dataset.set_fill_off)
                self._fill = False
            self._root = Group(self, self._dataset)
        except NetCDFError:
            self.close()
            raise
        logger.debug("Opened %s (mode %s)", self.path, self.mode.value)

    # -- arena --

    def _check_open(self) -> None:
        if not self._open:
            raise ClosedFileError(f"{self.path} is closed")

    def _register(self, key: Hashable, native: Any) -> Any:
        self._check_open()
        return self._natives.setdefault(key, native)

    def _resolve(self, key: Hashable) -> Any:
        self._check_open()
        return self._natives[key]

    def _require_writable(self) -> None:
        self._check_open()
        if not self.mode.writable:
            raise PermissionDeniedError(NC_EPERM, str(self.path))

    # -- lifecycle --

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def writable(self) -> bool:
        return self.mode.writable

    @property
    def fill(self) -> bool:
        """Whether variables created from now on are pre-filled."""
        return self._fill

    def close(self) -> None:
        """Close the file. Later calls do nothing."""
        if not self._open:
            return
        self._open = False
        self._natives.clear()
        gateway.call(self._dataset.close)
        logger.debug("Closed %s", self.path)

    def sync(self) -> None:
        """Flush buffered writes to disk."""
        self._require_writable()
        gateway.call(self._dataset.sync)

    def set_fill(self, enabled: bool) -> None:
        """Turn pre-filling of newly written variables on or off."""
        self._require_writable()
        with gateway.locked():
            if enabled:
                gateway.call(self._dataset.set_fill_on)
            else:
                gateway.call(self._dataset.set_fill_off)
            self._fill = bool(enabled)

    def __enter__(self) -> File:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()

    def __del__(self) -> None:
        if getattr(self, "_open", False):
            logger.warning("%s was not closed, closing it on collection", self.path)
            try:
                self.close()
            except NetCDFError:
                logger.exception("Failed to close %s", self.path)

    def __repr__(self) -> str:
        state = "open" if self._open else "closed"
        return f"<File {str(self.path)!r} mode={self.mode.value!r} {state}>"

    # -- navigation from the root group --

    @property
    def root(self) -> Group:
        """Top-level group."""
        self._check_open()
        return self._root

    def root_group(self) -> Group:
        return self.root

    def group(self, path: str) -> Group:
        """Resolve a slash-separated group path from the root."""
        return self.root.find(path)

    def groups(self) -> list[Group]:
        return self.root.groups()

    def create_group(self, name: str) -> Group:
        return self.root.create_group(name)

    def variable(self, path: str) -> Variable:
        """Resolve ``"group/sub/name"`` to a variable."""
        parent, _, name = path.strip("/").rpartition("/")
        return self.root.find(parent).variable(name)

    def variables(self) -> list[Variable]:
        return self.root.variables()

    def create_variable(self, name: str, nctype: Any, dimensions: Sequence[str | Dimension] = (), **options: Any) -> Variable:
        return self.root.create_variable(name, nctype, dimensions, **options)

    def dimension(self, name: str) -> Dimension:
        return self.root.dimension(name)

    def dimensions(self) -> list[Dimension]:
        return self.root.dimensions()

    def create_dimension(self, name: str, size: int | None = None) -> Dimension:
        return self.root.create_dimension(name, size)

    def create_unlimited_dimension(self, name: str) -> Dimension:
        return self.root.create_unlimited_dimension(name)

    def attribute(self, name: str) -> Attribute:
        return self.root.attribute(name)

    def attribute_names(self) -> list[str]:
        return self.root.attribute_names()

    def attributes(self) -> list[Attribute]:
        return self.root.attributes()

    def get_attribute(self, name: str, nctype: Any = None) -> Any:
        return self.root.get_attribute(name, nctype)

    def put_attribute(self, name: str, value: Any, nctype: Any = None) -> Attribute:
        return self.root.put_attribute(name, value, nctype)


def open(path: str | Path) -> File:
    """Open an existing file read-only."""
    return File(path, OpenMode.READ)


def append(path: str | Path) -> File:
    """Open an existing file for reading and writing."""
    return File(path, OpenMode.APPEND)


def create(path: str | Path, clobber: bool = True, format: str | None = None) -> File:
    """Create a new file.

    Args:
        path: File path.
        clobber: Replace an existing file; if False, fail with
            AlreadyExistsError instead.
        format: Engine format name, defaults to the configured one.
    """
    mode = OpenMode.CREATE if clobber else OpenMode.CREATE_EXCLUSIVE
    return File(path, mode, format=format)
