"""Group handles and hierarchy navigation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Sequence

from safenc import gateway
from safenc._base import Handle
from safenc.attribute import AttributeHolder
from safenc.dimension import Dimension
from safenc.types import NcType, coerce_buffer
from safenc.utils.exceptions import (
    NC_EBADDIM,
    NC_EBADNAME,
    NC_EBADTYPE,
    NC_EDIMSIZE,
    NC_ENAMEINUSE,
    NC_ENOGRP,
    NC_ENOTVAR,
    NC_EUNLIMPOS,
    AlreadyExistsError,
    NotFoundError,
    ShapeMismatchError,
    TypeMismatchError,
    error_from_status,
)
from safenc.utils.logging import get_logger
from safenc.variable import Endianness, Variable

if TYPE_CHECKING:
    from safenc.file import File

logger = get_logger("group")


class Group(Handle, AttributeHolder):
    """A node of the file's group tree.

    Children are read from the engine's tables on every listing; the
    enumeration order is the engine's and is stable within a session.
    """

    def __init__(self, file: File, native: Any) -> None:
        super().__init__(file, ("g", native._grpid), native)

    @property
    def path(self) -> str:
        """Absolute slash-separated path, ``/`` for the root group."""
        native = self._native()
        return gateway.call(getattr, native, "path")

    @property
    def parent(self) -> Group | None:
        """Enclosing group, None for the root group."""
        native = self._native()
        parent = gateway.call(getattr, native, "parent")
        if parent is None:
            return None
        return Group(self._file, parent)

    def root(self) -> Group:
        """Root group of the owning file."""
        group = self
        parent = group.parent
        while parent is not None:
            group = parent
            parent = group.parent
        return group

    def _check_name(self, name: str) -> None:
        if not name or "/" in name:
            raise error_from_status(NC_EBADNAME, repr(name))

    def _name_taken(self, name: str) -> bool:
        native = self._native()
        return name in native.groups or name in native.variables

    # -- sub-groups --

    def groups(self) -> list[Group]:
        """Direct sub-groups."""
        native = self._native()
        return [Group(self._file, child) for child in native.groups.values()]

    def group(self, name: str) -> Group:
        """Find a direct sub-group by name.

        Raises:
            NotFoundError: If there is no sub-group ``name``.
        """
        native = self._native()
        if name not in native.groups:
            raise NotFoundError(NC_ENOGRP, f"{name!r} in {self.path}")
        return Group(self._file, native.groups[name])

    def find(self, path: str) -> Group:
        """Resolve a slash-separated group path.

        A leading ``/`` starts at the root group, otherwise the path is
        relative to this group. Each segment is looked up in turn.

        Raises:
            NotFoundError: At the first missing segment.
        """
        group = self.root() if path.startswith("/") else self
        for segment in path.split("/"):
            if segment:
                group = group.group(segment)
        return group

    def create_group(self, name: str) -> Group:
        """Create a direct sub-group.

        Raises:
            AlreadyExistsError: If ``name`` is taken in this group.
            PermissionDeniedError: If the file is read-only.
        """
        self._require_writable()
        self._check_name(name)
        if self._name_taken(name):
            raise AlreadyExistsError(NC_ENAMEINUSE, f"{name!r} in {self.path}")

        native = self._native()
        child = gateway.call(native.createGroup, name)
        logger.debug("Created group %r in %s", name, self.path)
        return Group(self._file, child)

    # -- dimensions --

    def dimensions(self) -> list[Dimension]:
        """Dimensions defined in this group (not inherited ones)."""
        native = self._native()
        return [Dimension(self._file, dim) for dim in native.dimensions.values()]

    def dimension(self, name: str) -> Dimension:
        """Find a dimension defined in this group.

        Raises:
            NotFoundError: If this group defines no dimension ``name``.
        """
        native = self._native()
        if name not in native.dimensions:
            raise NotFoundError(NC_EBADDIM, f"{name!r} in {self.path}")
        return Dimension(self._file, native.dimensions[name])

    def find_dimension(self, name: str) -> Dimension:
        """Find the nearest definition of a dimension visible here.

        Looks in this group, then in each ancestor up to the root. Sibling
        groups and their descendants are never searched.

        Raises:
            NotFoundError: If no enclosing group defines ``name``.
        """
        native = self._native()
        while native is not None:
            if name in native.dimensions:
                return Dimension(self._file, native.dimensions[name])
            native = native.parent
        raise NotFoundError(NC_EBADDIM, f"{name!r} visible from {self.path}")

    def create_dimension(self, name: str, size: int | None = None) -> Dimension:
        """Define a dimension in this group.

        Args:
            name: Dimension name.
            size: Fixed length; None makes the dimension unlimited.

        Raises:
            AlreadyExistsError: If this group already defines ``name``.
            ShapeMismatchError: If ``size`` is not positive.
            PermissionDeniedError: If the file is read-only.
        """
        self._require_writable()
        self._check_name(name)
        if size is not None and int(size) <= 0:
            raise ShapeMismatchError(NC_EDIMSIZE, f"{name!r} with size {size}")

        native = self._native()
        if name in native.dimensions:
            raise AlreadyExistsError(NC_ENAMEINUSE, f"dimension {name!r} in {self.path}")

        dim = gateway.call(native.createDimension, name, None if size is None else int(size))
        logger.debug("Created dimension %r (%s) in %s", name, size or "unlimited", self.path)
        return Dimension(self._file, dim)

    def create_unlimited_dimension(self, name: str) -> Dimension:
        """Define an unlimited dimension in this group."""
        return self.create_dimension(name, None)

    # -- variables --

    def variables(self) -> list[Variable]:
        """Variables of this group."""
        native = self._native()
        return [Variable(self._file, var) for var in native.variables.values()]

    def variable(self, name: str) -> Variable:
        """Find a variable of this group by name.

        Raises:
            NotFoundError: If there is no variable ``name``.
        """
        native = self._native()
        if name not in native.variables:
            raise NotFoundError(NC_ENOTVAR, f"{name!r} in {self.path}")
        return Variable(self._file, native.variables[name])

    def create_variable(
        self,
        name: str,
        nctype: Any,
        dimensions: Sequence[str | Dimension] = (),
        fill_value: Any = None,
        compression: int | None = None,
        shuffle: bool = True,
        chunksizes: Sequence[int] | None = None,
        endian: Endianness | str = Endianness.NATIVE,
    ) -> Variable:
        """Define a variable in this group.

        Dimension names are resolved with :meth:`find_dimension`. The
        first dimension may be unlimited; no other may be. For CHAR
        variables the last dimension is the character axis.

        Args:
            name: Variable name.
            nctype: Element type (NcType, numpy dtype-like or ``str``).
            dimensions: Ordered dimension names or handles.
            fill_value: Fill value; False disables pre-filling. None takes
                the engine default, or no fill when the file's fill mode
                is off.
            compression: Deflate level 0-9, None for no compression.
            shuffle: Apply the shuffle filter with compression.
            chunksizes: Chunk length per dimension.
            endian: Storage byte order.

        Raises:
            AlreadyExistsError: If ``name`` is taken in this group.
            NotFoundError: If a dimension is not visible from this group.
            ShapeMismatchError: If the unlimited dimension is misplaced.
            TypeMismatchError: If the type or fill value is unsupported.
            PermissionDeniedError: If the file is read-only.
        """
        self._require_writable()
        self._check_name(name)
        nctype = NcType.of(nctype)
        if nctype is NcType.TEXT:
            raise TypeMismatchError(NC_EBADTYPE, "TEXT is an attribute-only type")
        if self._name_taken(name):
            raise AlreadyExistsError(NC_ENAMEINUSE, f"{name!r} in {self.path}")

        dims = [self._visible_dimension(dim) for dim in dimensions]
        self._check_layout(name, nctype, dims)

        kwargs: dict[str, Any] = {}
        no_fill = fill_value is None and nctype.is_numeric and not self._file.fill
        if fill_value is False or no_fill:
            kwargs["fill_value"] = False
        elif fill_value is not None:
            if not nctype.is_numeric:
                raise TypeMismatchError(NC_EBADTYPE, f"fill value for {nctype.name} variable")
            kwargs["fill_value"] = coerce_buffer(fill_value, nctype).reshape(())[()]
        if compression is not None:
            kwargs.update(zlib=True, complevel=int(compression), shuffle=shuffle)
        if chunksizes is not None:
            kwargs["chunksizes"] = tuple(int(n) for n in chunksizes)
        if nctype.is_numeric:
            kwargs["endian"] = Endianness(endian).value

        native = self._native()
        var = gateway.call(
            native.createVariable,
            name,
            nctype.datatype,
            tuple(dim._native() for dim in dims),
            **kwargs,
        )
        logger.debug(
            "Created %s variable %r%s in %s",
            nctype.name, name, tuple(dim.name for dim in dims), self.path,
        )
        return Variable(self._file, var)

    def _visible_dimension(self, dim: str | Dimension) -> Dimension:
        if isinstance(dim, Dimension):
            if dim.file is not self._file or self.find_dimension(dim.name) != dim:
                raise NotFoundError(NC_EBADDIM, f"{dim.name!r} is not visible from {self.path}")
            return dim
        return self.find_dimension(dim)

    def _check_layout(self, name: str, nctype: NcType, dims: list[Dimension]) -> None:
        unlimited = [axis for axis, dim in enumerate(dims) if dim.is_unlimited]
        if len(unlimited) > 1 or (unlimited and unlimited[0] != 0):
            raise ShapeMismatchError(
                NC_EUNLIMPOS, f"{name!r}: only the first dimension may be unlimited"
            )
        if nctype is NcType.CHAR:
            if not dims:
                raise ShapeMismatchError(NC_EDIMSIZE, f"{name!r}: CHAR needs a character dimension")
            if dims[-1].is_unlimited:
                raise ShapeMismatchError(
                    NC_EUNLIMPOS, f"{name!r}: the character dimension must be fixed"
                )

    def __repr__(self) -> str:
        return f"<Group {self._name!r} of {self._file.path}>"
