"""Serialized boundary over the native netCDF engine.

Every call into ``netCDF4`` goes through :func:`call`, which holds the single
process-wide :data:`LOCK` for the duration of the call and turns native
failures into :class:`~safenc.utils.exceptions.NetCDFError` instances. The
engine keeps global ID tables and cache defaults and is not safe for
concurrent use across handles, so no native call bypasses this module.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator

import netCDF4

from safenc.utils.config import load_config
from safenc.utils.exceptions import (
    STATUS_MESSAGES,
    NC_NOERR,
    SafeNCError,
    UnknownError,
    error_from_status,
)
from safenc.utils.logging import get_logger

logger = get_logger("gateway")

LOCK = threading.RLock()

# Status reported when the engine failed without a recoverable code
NC2_ERR = -1


@contextmanager
def locked() -> Iterator[None]:
    """Hold the process-wide engine lock for the enclosed block."""
    with LOCK:
        yield


def status_from_exception(exc: BaseException) -> int | None:
    """Recover the native status code behind a ``netCDF4`` exception.

    Failed opens carry the code in ``OSError.errno``; everything else
    carries only the ``nc_strerror`` text, which is looked up in the
    status table.

    Returns:
        The status code, or None if the exception did not come from
        the engine.
    """
    if isinstance(exc, OSError) and isinstance(exc.errno, int) and exc.errno != 0:
        return exc.errno

    text = exc.strerror if isinstance(exc, OSError) and exc.strerror else str(exc)
    text = text.strip("'\" ")
    for code, message in STATUS_MESSAGES.items():
        if code != NC_NOERR and text.startswith(message):
            return code
    return None


def call(func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Invoke one native function under the engine lock.

    Args:
        func: Callable reaching into ``netCDF4``.
        *args: Positional arguments for ``func``.
        **kwargs: Keyword arguments for ``func``.

    Returns:
        Whatever ``func`` returns.

    Raises:
        NetCDFError: Subclass matching the native status of the failure.
    """
    with LOCK:
        try:
            return func(*args, **kwargs)
        except SafeNCError:
            raise
        except (RuntimeError, OSError, AttributeError, IndexError, ValueError, KeyError) as exc:
            code = status_from_exception(exc)
            detail = getattr(exc, "filename", None)
            if code is None:
                raise UnknownError(NC2_ERR, str(exc)) from exc
            raise error_from_status(code, None if detail is None else str(detail)) from exc


class EngineState:
    """Process-wide engine settings.

    Created on first use by :func:`engine_state` and never torn down; it
    lives as long as the engine's own globals do.
    """

    def __init__(self, config: dict | None = None) -> None:
        """Initialize state and apply configured engine defaults.

        Args:
            config: Configuration dictionary. If None, loads defaults.
        """
        self.config = config if config is not None else load_config()
        self._apply(self.config)

    def _apply(self, config: dict) -> None:
        cache = config.get("chunk_cache") or {}
        if any(value is not None for value in cache.values()):
            self.set_chunk_cache(
                size=cache.get("size"),
                nelems=cache.get("nelems"),
                preemption=cache.get("preemption"),
            )

    def chunk_cache(self) -> tuple[int, int, float]:
        """Get the engine-wide default chunk cache.

        Returns:
            Tuple of (size in bytes, number of slots, preemption).
        """
        return call(netCDF4.get_chunk_cache)

    def set_chunk_cache(
        self,
        size: int | None = None,
        nelems: int | None = None,
        preemption: float | None = None,
    ) -> None:
        """Change the engine-wide default chunk cache.

        Applies to files opened afterwards. Parameters left as None keep
        their current value.
        """
        call(netCDF4.set_chunk_cache, size, nelems, preemption)
        logger.debug(
            "Chunk cache set to size=%s nelems=%s preemption=%s",
            size, nelems, preemption,
        )

    def reconfigure(self, filepath: str | Path | None = None) -> None:
        """Reload configuration and re-apply engine defaults."""
        with LOCK:
            self.config = load_config(filepath)
            self._apply(self.config)


_state: EngineState | None = None


def engine_state() -> EngineState:
    """Get the process-wide engine state, creating it on first use."""
    global _state
    with LOCK:
        if _state is None:
            _state = EngineState()
        return _state
