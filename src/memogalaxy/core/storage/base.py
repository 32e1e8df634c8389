"""
Record storage interface.

A backend holds flat, named byte records: one name, one blob, no nesting.
The diary keeps one ``<id>.json`` record per entry; anything able to honour
the contract below can stand in for the local directory.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from memogalaxy.core.exceptions import MemoGalaxyError


class StorageError(MemoGalaxyError):
    """The backend could not complete an operation."""


class StorageKeyError(StorageError, KeyError):
    """No record exists under the requested key."""


class StoragePermissionError(StorageError):
    """The key is not an acceptable record name (empty, nested, hidden...)."""


class StorageBackend(ABC):
    """Async store of named byte records.

    Contract:
        - ``save`` replaces a record as a whole; readers never see half of it.
        - ``load`` of a missing key raises ``StorageKeyError``.
        - ``delete`` of a missing key is not an error.
        - ``list_keys`` yields names in a stable (sorted) order.
    """

    @abstractmethod
    async def save(self, key: str, data: bytes) -> None: ...

    @abstractmethod
    async def load(self, key: str) -> bytes: ...

    @abstractmethod
    async def exists(self, key: str) -> bool: ...

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Remove *key*; True if a record was there."""

    @abstractmethod
    def list_keys(self, suffix: str = "", limit: int | None = None) -> AsyncIterator[str]:
        """Yield record names ending in *suffix*, at most *limit* of them."""
