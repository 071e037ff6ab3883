"""Variables and typed, selection-based I/O."""

from __future__ import annotations

import math
from enum import Enum
from typing import TYPE_CHECKING, Any, Sequence

import numpy as np

from safenc import gateway
from safenc._base import Handle
from safenc.attribute import AttributeHolder
from safenc.dimension import Dimension
from safenc.selection import Selection, parse_key
from safenc.types import NcType, check_requested, coerce_buffer
from safenc.utils.exceptions import (
    NC_EBADTYPE,
    NC_EEDGE,
    NC_EINVALCOORDS,
    ShapeMismatchError,
    TypeMismatchError,
)
from safenc.utils.logging import get_logger

if TYPE_CHECKING:
    from safenc.file import File
    from safenc.group import Group

logger = get_logger("variable")


class Endianness(str, Enum):
    """Storage byte order of a variable."""

    NATIVE = "native"
    LITTLE = "little"
    BIG = "big"


class Variable(Handle, AttributeHolder):
    """A named, typed array inside one group.

    Buffers are numpy arrays. Reads and writes check the buffer's element
    type against the stored type and the requested region against the
    current extent before the engine is called; nothing is converted
    implicitly.

    For CHAR variables the last dimension holds the characters of each
    value. It is not part of :attr:`shape` or of selections: the caller
    reads and writes one ``str`` per remaining index.
    """

    def __init__(self, file: File, native: Any) -> None:
        super().__init__(file, ("v", native._grpid, native._varid), native)
        self._nctype = NcType.from_native(native.dtype)
        gateway.call(native.set_auto_maskandscale, False)
        gateway.call(native.set_always_mask, False)
        gateway.call(native.set_auto_chartostring, False)

    @property
    def nctype(self) -> NcType:
        """Stored element type."""
        return self._nctype

    @property
    def dtype(self) -> np.dtype:
        """dtype of buffers returned by reads."""
        return self._nctype.dtype

    @property
    def group(self) -> Group:
        """Group holding the variable."""
        from safenc.group import Group

        native = self._native()
        return Group(self._file, gateway.call(native.group))

    @property
    def dimensions(self) -> list[Dimension]:
        """All dimensions, including the character axis of CHAR variables."""
        native = self._native()
        return [Dimension(self._file, dim) for dim in gateway.call(native.get_dims)]

    def _extent(self) -> tuple[int, ...]:
        native = self._native()
        return tuple(int(n) for n in gateway.call(lambda: native.shape))

    @property
    def shape(self) -> tuple[int, ...]:
        """Current addressable extent, queried from the engine."""
        extent = self._extent()
        if self._nctype is NcType.CHAR:
            return extent[:-1]
        return extent

    @property
    def rank(self) -> int:
        return len(self.shape)

    @property
    def size(self) -> int:
        """Number of addressable elements."""
        return math.prod(self.shape)

    def __len__(self) -> int:
        return self.size

    @property
    def unlimited_axis(self) -> int | None:
        """Index of the unlimited dimension, None if all are fixed."""
        for axis, dim in enumerate(self.dimensions):
            if dim.is_unlimited:
                return axis
        return None

    # -- storage properties --

    def endian(self) -> Endianness:
        native = self._native()
        return Endianness(gateway.call(native.endian))

    def compression(self) -> int | None:
        """Deflate level, None if the variable is not compressed."""
        native = self._native()
        filters = gateway.call(native.filters) or {}
        if not filters.get("zlib"):
            return None
        return int(filters.get("complevel", 0))

    def chunking(self) -> tuple[int, ...] | None:
        """Chunk sizes, None for contiguous storage."""
        native = self._native()
        chunks = gateway.call(native.chunking)
        if chunks == "contiguous" or chunks is None:
            return None
        return tuple(int(n) for n in chunks)

    def fill_value(self) -> Any:
        """Fill value of a numeric variable.

        Returns:
            numpy scalar, or None when pre-filling is disabled or the
            variable holds text.
        """
        if not self._nctype.is_numeric:
            return None
        native = self._native()
        value = gateway.call(native.get_fill_value)
        if value is None:
            return None
        return np.asarray(value, dtype=self._nctype.dtype).reshape(())[()]

    def _fill_value_fixed(self) -> bool:
        return True

    # -- region checks --

    def _check_region(self, selection: Selection, writing: bool) -> None:
        """Validate a selection against the current extent.

        Fixed axes must contain the whole region. When writing, the
        unlimited axis only needs to start within its current length, and
        a region reaching past that length must have stride 1 there.
        """
        extent = self.shape
        if selection.rank != len(extent):
            raise ShapeMismatchError(
                NC_EINVALCOORDS,
                f"{self._name!r} has rank {len(extent)}, selection rank {selection.rank}",
            )

        unlimited = self.unlimited_axis if writing else None
        for axis, length in enumerate(extent):
            if axis == unlimited:
                if selection.start[axis] > length:
                    raise ShapeMismatchError(
                        NC_EINVALCOORDS,
                        f"{self._name!r} axis {axis}: start {selection.start[axis]} "
                        f"beyond current length {length}",
                    )
                if selection.last(axis) >= length and selection.stride[axis] != 1:
                    raise ShapeMismatchError(
                        NC_EINVALCOORDS,
                        f"{self._name!r} axis {axis}: strided write past current length {length}",
                    )
                continue
            if selection.last(axis) >= length:
                raise ShapeMismatchError(
                    NC_EEDGE,
                    f"{self._name!r} axis {axis}: index {selection.last(axis)} "
                    f"outside extent {length}",
                )

    # -- native transfers --

    def _char_width(self) -> int:
        return self._extent()[-1]

    def _native_get(self, selection: Selection) -> np.ndarray:
        native = self._native()
        if self._nctype is NcType.CHAR:
            raw = gateway.call(native.__getitem__, selection.to_slices() + (slice(None),))
            raw = np.ascontiguousarray(raw, dtype="S1")
            width = raw.shape[-1]
            joined = raw.view(f"S{width}").reshape(raw.shape[:-1])
            return np.char.decode(joined, "utf-8")

        if selection.rank == 0:
            data = gateway.call(native.getValue)
        else:
            data = gateway.call(native.__getitem__, selection.to_slices())

        if self._nctype is NcType.STRING:
            result = np.empty(selection.count, dtype=object)
            result[...] = np.asarray(data, dtype=object).reshape(selection.count)
            return result
        return np.asarray(data, dtype=self._nctype.dtype).reshape(selection.count)

    def _native_put(self, selection: Selection, data: np.ndarray) -> None:
        native = self._native()
        if self._nctype is NcType.CHAR:
            width = self._char_width()
            encoded = [text.encode("utf-8") for text in data.flat]
            if any(len(item) > width for item in encoded):
                raise ShapeMismatchError(
                    NC_EEDGE, f"{self._name!r}: text longer than {width} characters"
                )
            chars = np.array(encoded, dtype=f"S{width}").view("S1")
            chars = chars.reshape(selection.count + (width,))
            gateway.call(native.__setitem__, selection.to_slices() + (slice(None),), chars)
        elif selection.rank == 0:
            gateway.call(native.__setitem__, (), data.reshape(())[()])
        else:
            gateway.call(native.__setitem__, selection.to_slices(), data)

    # -- reads --

    def values(self, dtype: Any = None) -> np.ndarray:
        """Read the full current extent.

        The unlimited dimension's length is queried first. An empty extent
        returns an empty array without reading.

        Args:
            dtype: Expected element type; must equal the stored type.

        Raises:
            TypeMismatchError: If ``dtype`` differs from the stored type.
        """
        check_requested(self._nctype, dtype)
        extent = self.shape
        if 0 in extent:
            return np.empty(extent, dtype=self._nctype.dtype)
        return self._native_get(Selection.full(extent))

    get_full = values

    def get_region(self, selection: Selection, dtype: Any = None) -> np.ndarray:
        """Read a hyperslab.

        Args:
            selection: Region to read.
            dtype: Expected element type; must equal the stored type.

        Returns:
            Array shaped like ``selection.count``.

        Raises:
            TypeMismatchError: If ``dtype`` differs from the stored type.
            ShapeMismatchError: If the ranks differ or the region leaves
                the current extent.
        """
        check_requested(self._nctype, dtype)
        self._check_region(selection, writing=False)
        return self._native_get(selection)

    def read_into(self, buffer: np.ndarray, selection: Selection | None = None) -> int:
        """Read a region into a caller-provided array.

        Args:
            buffer: Destination; its dtype must match the stored type and
                its size the selected element count.
            selection: Region to read, full extent if None.

        Returns:
            Number of elements read.
        """
        if not isinstance(buffer, np.ndarray):
            raise TypeMismatchError(NC_EBADTYPE, "read_into needs a numpy array")
        if self._nctype.is_numeric:
            check_requested(self._nctype, buffer.dtype)
        elif buffer.dtype.kind not in "UO":
            raise TypeMismatchError(NC_EBADTYPE, f"{buffer.dtype} buffer for text values")

        if selection is None:
            selection = Selection.full(self.shape)
        if buffer.size != selection.size:
            raise ShapeMismatchError(
                NC_EEDGE, f"buffer holds {buffer.size} values, selection {selection.size}"
            )
        buffer[...] = self.get_region(selection).reshape(buffer.shape)
        return selection.size

    def value(self, index: Sequence[int] | None = None) -> Any:
        """Read one element, at the origin by default."""
        index = (0,) * self.rank if index is None else tuple(index)
        return self.get_region(Selection.at(index)).reshape(())[()]

    def __getitem__(self, key: Any) -> Any:
        parts = parse_key(key, self.shape)
        selection = Selection(
            start=[p[0] for p in parts],
            count=[p[1] for p in parts],
            stride=[p[2] for p in parts],
        )
        data = self.get_region(selection)
        kept = tuple(p[1] for p in parts if not p[3])
        if not kept:
            return data.reshape(())[()]
        return data.reshape(kept)

    # -- writes --

    def put_region(self, selection: Selection, buffer: Any) -> None:
        """Write a hyperslab.

        Writing past the current length of the unlimited axis extends it.

        Args:
            selection: Region to write.
            buffer: Values, ``selection.size`` of them.

        Raises:
            PermissionDeniedError: If the file is read-only.
            TypeMismatchError: If the values do not match the stored type.
            ShapeMismatchError: If the region leaves a fixed extent, starts
                past the unlimited length, or the buffer size differs.
        """
        self._require_writable()
        data = coerce_buffer(buffer, self._nctype)
        self._check_region(selection, writing=True)
        if data.size != selection.size:
            raise ShapeMismatchError(
                NC_EEDGE, f"buffer holds {data.size} values, selection {selection.size}"
            )
        self._native_put(selection, data.reshape(selection.count))

    def put_values(self, buffer: Any, start: Sequence[int] | None = None) -> Selection:
        """Write a buffer at ``start``, inferring the counts.

        A buffer with one axis per dimension gives the counts directly.
        Otherwise fixed axes run to the end of their extent and the
        unlimited axis takes whatever the buffer holds beyond that.

        Returns:
            The selection written.
        """
        self._require_writable()
        data = coerce_buffer(buffer, self._nctype)
        extent = self.shape
        start = (0,) * len(extent) if start is None else tuple(int(i) for i in start)
        if len(start) != len(extent):
            raise ShapeMismatchError(
                NC_EINVALCOORDS, f"{self._name!r} has rank {len(extent)}, start rank {len(start)}"
            )

        if data.ndim == len(extent) and len(extent) > 0:
            counts = list(data.shape)
        else:
            unlimited = self.unlimited_axis
            counts = [
                None if axis == unlimited else length - i
                for axis, (i, length) in enumerate(zip(start, extent))
            ]
            if any(n is not None and n <= 0 for n in counts):
                raise ShapeMismatchError(NC_EINVALCOORDS, f"start {start} outside extent {extent}")
            if unlimited is not None:
                others = math.prod(n for n in counts if n is not None)
                if others == 0 or data.size % others:
                    raise ShapeMismatchError(
                        NC_EEDGE, f"{data.size} values do not tile the fixed axes {others}"
                    )
                counts[unlimited] = data.size // others

        selection = Selection(start=start, count=counts)
        self.put_region(selection, data)
        return selection

    def put_value(self, value: Any, index: Sequence[int] | None = None) -> None:
        """Write one element, at the origin by default."""
        index = (0,) * self.rank if index is None else tuple(index)
        self.put_region(Selection.at(index), value)

    def __setitem__(self, key: Any, value: Any) -> None:
        extent = list(self.shape)
        unlimited = self.unlimited_axis
        if unlimited is not None:
            extent[unlimited] = None

        parts = parse_key(key, extent)
        counts = [p[1] for p in parts]
        if None in counts:
            data = coerce_buffer(value, self._nctype)
            known = math.prod(n for n in counts if n is not None)
            counts[counts.index(None)] = data.size // known if known else 0
            value = data
        selection = Selection(
            start=[p[0] for p in parts],
            count=counts,
            stride=[p[2] for p in parts],
        )
        self.put_region(selection, value)

    def __repr__(self) -> str:
        return f"<Variable {self._name!r} ({self._nctype.name}) of {self._file.path}>"
