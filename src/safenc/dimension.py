"""Dimension handles."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from safenc import gateway
from safenc._base import Handle

if TYPE_CHECKING:
    from safenc.file import File
    from safenc.group import Group


class Dimension(Handle):
    """A named axis, fixed or unlimited.

    The length is queried from the engine on every access, so an
    unlimited dimension reports growth caused by writes.
    """

    def __init__(self, file: File, native: Any) -> None:
        super().__init__(file, ("d", native._grpid, native._dimid), native)

    @property
    def size(self) -> int:
        """Current length."""
        native = self._native()
        return int(gateway.call(len, native))

    def __len__(self) -> int:
        return self.size

    @property
    def is_unlimited(self) -> bool:
        native = self._native()
        return bool(gateway.call(native.isunlimited))

    @property
    def group(self) -> Group:
        """Group in which the dimension is defined."""
        from safenc.group import Group

        native = self._native()
        return Group(self._file, gateway.call(native.group))

    def __repr__(self) -> str:
        return f"<Dimension {self._name!r} of {self._file.path}>"
