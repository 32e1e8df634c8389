"""
Storage backends for memogalaxy.

Provides an async record store with a pluggable backend interface
(local filesystem by default).
"""

from .base import (
    StorageBackend,
    StorageError,
    StorageKeyError,
    StoragePermissionError,
)
from .local import LocalStorage

__all__ = [
    "LocalStorage",
    "StorageBackend",
    "StorageError",
    "StorageKeyError",
    "StoragePermissionError",
]
