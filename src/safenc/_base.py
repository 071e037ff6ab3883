"""Base class for handles into an open file."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Hashable

from safenc import gateway

if TYPE_CHECKING:
    from safenc.file import File


class Handle:
    """Lightweight reference to an entity inside a File.

    A handle is the owning File plus an engine-assigned key. The File is
    the arena: it holds the native objects, and every access goes through
    it, so a handle fails with ClosedFileError once the File is closed.
    Handles are only created by the File and by Group lookups.
    """

    def __init__(self, file: File, key: Hashable, native: Any) -> None:
        file._register(key, native)
        self._file = file
        self._key = key
        self._name = gateway.call(getattr, native, "name")

    @property
    def file(self) -> File:
        """Owning file."""
        return self._file

    @property
    def name(self) -> str:
        return self._name

    def _native(self) -> Any:
        return self._file._resolve(self._key)

    def _require_writable(self) -> None:
        self._file._require_writable()

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._file is other._file and self._key == other._key

    def __hash__(self) -> int:
        return hash((id(self._file), self._key))

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._name!r} of {self._file.path}>"
