"""Typed attributes of files, groups and variables."""

from __future__ import annotations

from typing import Any

import numpy as np

from safenc import gateway
from safenc.types import NcType, check_requested, coerce_buffer
from safenc.utils.exceptions import (
    NC_ECHAR,
    NC_ELATEFILL,
    NC_ENOTATT,
    NotFoundError,
    PermissionDeniedError,
    TypeMismatchError,
)
from safenc.utils.logging import get_logger

logger = get_logger("attribute")

FILL_VALUE = "_FillValue"


def _decode(raw: Any) -> tuple[Any, NcType]:
    """Split a native attribute value into (value, stored type)."""
    if isinstance(raw, str):
        return raw, NcType.TEXT
    if isinstance(raw, (list, tuple)):
        return [str(item) for item in raw], NcType.STRING
    value = np.asarray(raw)
    if value.dtype.kind in "UO":
        return [str(item) for item in value.flat], NcType.STRING
    nctype = NcType.from_dtype(value.dtype)
    if value.size == 1:
        return value.reshape(())[()], nctype
    return value.reshape(-1), nctype


def _encode(value: Any, nctype: NcType | None) -> tuple[Any, NcType]:
    """Prepare a caller value for writing as ``nctype``."""
    if nctype is None:
        if isinstance(value, str):
            nctype = NcType.TEXT
        elif isinstance(value, (list, tuple)) and value and all(isinstance(v, str) for v in value):
            nctype = NcType.STRING
        elif isinstance(value, (np.ndarray, np.generic)):
            nctype = NcType.from_dtype(value.dtype)
        else:
            nctype = NcType.from_dtype(np.asarray(value).dtype)

    if nctype is NcType.TEXT:
        if not isinstance(value, str):
            raise TypeMismatchError(NC_ECHAR, f"TEXT attribute needs a str, got {type(value).__name__}")
        return value, nctype
    if nctype is NcType.STRING:
        items = [value] if isinstance(value, str) else list(value)
        if not all(isinstance(item, str) for item in items):
            raise TypeMismatchError(NC_ECHAR, "STRING attribute needs str values")
        return items, nctype
    if nctype is NcType.CHAR:
        raise TypeMismatchError(NC_ECHAR, "use TEXT for character attributes")
    return coerce_buffer(value, nctype), nctype


class Attribute:
    """Handle to one named attribute of a holder."""

    def __init__(self, holder: AttributeHolder, name: str) -> None:
        self._holder = holder
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    @property
    def holder(self) -> AttributeHolder:
        """Group or Variable this attribute is attached to."""
        return self._holder

    def _read(self) -> tuple[Any, NcType]:
        native = self._holder._native()
        return _decode(gateway.call(native.getncattr, self._name))

    @property
    def nctype(self) -> NcType:
        """Stored element type."""
        return self._read()[1]

    def value(self, nctype: Any = None) -> Any:
        """Read the attribute.

        Args:
            nctype: Expected type. If given, it must equal the stored type.

        Returns:
            numpy scalar for single numbers, 1-D array for several,
            ``str`` for TEXT and ``list[str]`` for STRING.

        Raises:
            TypeMismatchError: If ``nctype`` differs from the stored type.
        """
        value, stored = self._read()
        check_requested(stored, nctype)
        return value

    def __len__(self) -> int:
        value, stored = self._read()
        if stored is NcType.TEXT or stored is NcType.STRING:
            return len(value)
        return int(np.size(value))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Attribute):
            return NotImplemented
        return self._holder == other._holder and self._name == other._name

    def __hash__(self) -> int:
        return hash((self._holder, self._name))

    def __repr__(self) -> str:
        return f"<Attribute {self._name!r} of {self._holder!r}>"


class AttributeHolder:
    """Mixin giving attribute access to groups and variables."""

    def attribute_names(self) -> list[str]:
        """Names in engine enumeration order."""
        native = self._native()
        return list(gateway.call(native.ncattrs))

    def attributes(self) -> list[Attribute]:
        """Attributes in engine enumeration order."""
        return [Attribute(self, name) for name in self.attribute_names()]

    def attribute(self, name: str) -> Attribute:
        """Look up an attribute by name.

        Raises:
            NotFoundError: If there is no attribute ``name``.
        """
        if name not in self.attribute_names():
            raise NotFoundError(NC_ENOTATT, f"{name!r} on {self!r}")
        return Attribute(self, name)

    def get_attribute(self, name: str, nctype: Any = None) -> Any:
        """Read an attribute value, see :meth:`Attribute.value`."""
        return self.attribute(name).value(nctype)

    def put_attribute(self, name: str, value: Any, nctype: Any = None) -> Attribute:
        """Create or overwrite an attribute.

        Args:
            name: Attribute name.
            value: ``str`` (TEXT), list of ``str`` (STRING), number or
                numeric sequence/array.
            nctype: Element type to store; inferred from ``value`` if None.

        Returns:
            Handle to the written attribute.

        Raises:
            PermissionDeniedError: If the file is read-only.
            TypeMismatchError: If ``value`` does not fit ``nctype``.
        """
        self._require_writable()
        if name == FILL_VALUE and self._fill_value_fixed():
            raise PermissionDeniedError(NC_ELATEFILL, f"{name!r} on {self!r}")

        data, stored = _encode(value, None if nctype is None else NcType.of(nctype))
        native = self._native()
        if stored is NcType.STRING:
            gateway.call(native.setncattr_string, name, data)
        else:
            gateway.call(native.setncattr, name, data)
        logger.debug("Wrote %s attribute %r on %r", stored.name, name, self)
        return Attribute(self, name)

    def _fill_value_fixed(self) -> bool:
        return False
