"""Exception taxonomy shared by the engine and the CLI.

``UsageError`` and ``DomainError`` carry the exact text shown to the user
and are always recoverable. ``StorageError`` means the append-only store
lost or mangled an object and is treated as fatal.
"""

from __future__ import annotations


class CairnError(RuntimeError):
    """Base class for every error raised by cairn."""


class UsageError(CairnError):
    """Raised when a command is invoked with the wrong argument shape."""

    def __init__(self, message: str = "Incorrect operands.") -> None:
        super().__init__(message)


class DomainError(CairnError):
    """A recoverable, user-facing failure (missing file, bad branch, ...)."""


class StorageError(CairnError):
    """A persisted object is missing or unreadable."""


class ObjectNotFoundError(StorageError):
    """Raised when a blob or commit digest is absent from the store."""


class CorruptObjectError(StorageError):
    """Raised when a stored object cannot be decoded or fails its digest check."""
