"""Storage module for session-scoped media files."""

from .base import InvalidMediaPathError, MediaNotFoundError, MediaStorage, StorageError
from .local import LocalMediaStorage

__all__ = [
    "MediaStorage",
    "LocalMediaStorage",
    "StorageError",
    "MediaNotFoundError",
    "InvalidMediaPathError",
]
