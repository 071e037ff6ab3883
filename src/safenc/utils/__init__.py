"""Utility modules for safenc."""

from safenc.utils.config import load_config
from safenc.utils.exceptions import (
    SafeNCError,
    NetCDFError,
    ErrorKind,
    ClosedFileError,
    InvalidSelectionError,
)
from safenc.utils.logging import setup_logging, get_logger

__all__ = [
    "load_config",
    "SafeNCError",
    "NetCDFError",
    "ErrorKind",
    "ClosedFileError",
    "InvalidSelectionError",
    "setup_logging",
    "get_logger",
]
