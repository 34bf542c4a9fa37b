"""Storage interface for session-scoped media files."""

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class MediaStorage(Protocol):
    """Abstract interface for media storage operations.

    Media is grouped into session directories, each holding any number of
    files named by the uploading client. Writes append; reads are
    side-effect free.
    """

    def append(self, directory: str, filename: str, content: bytes) -> None:
        """Append content to a file, creating the directory and file if absent.

        Args:
            directory: Session directory name.
            filename: File name including its extension.
            content: Raw bytes to append.

        Raises:
            InvalidMediaPathError: If a name would escape the storage root.
            StorageError: If the data cannot be written.
        """
        ...

    def list_directories(self) -> list[str]:
        """List session directories in listing order.

        Raises:
            MediaNotFoundError: If the storage root does not exist.
        """
        ...

    def latest_directory(self) -> str:
        """Return the most recent session directory (last in listing order).

        Raises:
            MediaNotFoundError: If the root is absent or holds no directories.
        """
        ...

    def list_files(self, directory: str) -> list[str]:
        """List file names inside a session directory.

        Raises:
            MediaNotFoundError: If the directory does not exist.
        """
        ...

    def read_file(self, directory: str, filename: str) -> bytes:
        """Read a stored file.

        Raises:
            FileNotFoundError: If the file does not exist or is not a regular file.
            StorageError: If the file cannot be read.
        """
        ...


class StorageError(Exception):
    """Base exception for storage-related errors.

    ``code`` carries the errno name (e.g. ``EACCES``) when the failure came
    from the operating system.
    """

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


class MediaNotFoundError(StorageError):
    """Raised when the storage root or a session directory does not exist."""


class InvalidMediaPathError(StorageError):
    """Raised when a directory or file name is not a single safe path segment."""
