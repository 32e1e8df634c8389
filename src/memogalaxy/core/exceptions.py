"""
Errors raised by memogalaxy.

Everything derives from ``MemoGalaxyError``. Storage backend errors live in
``memogalaxy.core.storage`` and share the same root. The diary store itself
logs I/O failures instead of raising; these types surface from config
loading, record decoding, backups and caller mistakes.
"""


class MemoGalaxyError(Exception):
    """Root of every error memogalaxy raises on purpose."""


class ConfigurationError(MemoGalaxyError):
    """A config file or override can't be parsed or fails validation."""


class DataProcessingError(MemoGalaxyError):
    """Data does not have the shape it claims to have."""


class EntryDecodeError(DataProcessingError):
    """A stored record is not valid JSON or does not describe an entry."""


class DuplicateEntryError(MemoGalaxyError):
    """An entry with this id is already in the diary."""

    def __init__(self, entry_id: str):
        super().__init__(f"Entry already exists: {entry_id}")
        self.entry_id = entry_id


class FileIOError(MemoGalaxyError):
    """Reading or writing a file outside the record store failed."""


class BackupError(FileIOError):
    """A backup archive can't be created, read or unpacked."""
