"""Local filesystem implementation of MediaStorage."""
import errno
import logging
import os
from pathlib import Path
from typing import Optional

from config import get_settings

from .base import InvalidMediaPathError, MediaNotFoundError, MediaStorage, StorageError

logger = logging.getLogger(__name__)


def _errno_name(exc: OSError) -> Optional[str]:
    """Map an OSError to its symbolic errno name, e.g. ``ENOENT``."""
    if exc.errno is None:
        return None
    return errno.errorcode.get(exc.errno)


def validate_segment(name: str, kind: str) -> str:
    """Ensure ``name`` is a single path segment below the storage root.

    Args:
        name: Directory or file name supplied by the client.
        kind: Label used in the error message ("directory" or "filename").

    Returns:
        str: The unchanged name.

    Raises:
        InvalidMediaPathError: If the name is empty, ``.``/``..``, or contains
            a path separator or NUL byte.
    """
    if not name or name in (".", "..") or "/" in name or "\\" in name or "\x00" in name:
        raise InvalidMediaPathError(f"Invalid {kind}: {name!r}")
    return name


class LocalMediaStorage(MediaStorage):
    """Local filesystem storage implementation.

    Every session directory is a direct child of ``storage_root``. The root
    itself is not created eagerly: a missing root is reported as not-found by
    the listing operations and created on the first upload.
    """

    def __init__(
        self,
        storage_root: Optional[str | Path] = None,
        file_owner: Optional[tuple[int, int]] = None,
    ):
        """Initialize local media storage.

        Args:
            storage_root: Root directory for session directories.
                         If not provided, uses the configured storage root from settings.
            file_owner: (uid, gid) applied to created directories and written
                        files. If not provided, uses the configured owner (if any).
        """
        settings = get_settings()

        if storage_root is not None:
            self.storage_root = Path(storage_root)
        else:
            self.storage_root = settings.storage_root

        self.file_owner = file_owner if file_owner is not None else settings.file_owner
        logger.info(f"Initialized LocalMediaStorage with root: {self.storage_root}")

    def _directory_path(self, directory: str) -> Path:
        return self.storage_root / validate_segment(directory, "directory")

    def _chown(self, path: Path) -> None:
        if self.file_owner is None:
            return
        uid, gid = self.file_owner
        try:
            os.chown(path, uid, gid)
            logger.debug(f"Changed ownership of {path} to {uid}:{gid}")
        except OSError as e:
            logger.error(f"Failed to change ownership of {path}: {e}")
            raise StorageError(f"Failed to change ownership: {e}", code=_errno_name(e))

    def append(self, directory: str, filename: str, content: bytes) -> None:
        """Append content to ``<root>/<directory>/<filename>``.

        Args:
            directory: Session directory name.
            filename: File name including its extension.
            content: Raw bytes to append; may be empty.

        Raises:
            InvalidMediaPathError: If either name is not a safe path segment.
            StorageError: If the directory or file cannot be written.
        """
        directory_path = self._directory_path(directory)
        file_path = directory_path / validate_segment(filename, "filename")

        try:
            if not directory_path.exists():
                directory_path.mkdir(parents=True, exist_ok=True)
                logger.info(f"Created session directory: {directory_path}")
                self._chown(directory_path)

            with file_path.open("ab") as f:
                f.write(content)
            logger.debug(f"Appended {len(content)} bytes to: {file_path}")
        except OSError as e:
            logger.error(f"Failed to write {file_path}: {e}")
            raise StorageError(f"Failed to write file: {e}", code=_errno_name(e))

        self._chown(file_path)

    def list_directories(self) -> list[str]:
        """List session directories under the storage root in sorted order."""
        if not self.storage_root.is_dir():
            logger.warning(f"Storage root not found: {self.storage_root}")
            raise MediaNotFoundError(f"Storage root not found: {self.storage_root}", code="ENOENT")

        directories = []
        for entry in self.storage_root.iterdir():
            if not entry.is_dir():
                continue
            try:
                directories.append(validate_segment(entry.name, "directory"))
            except InvalidMediaPathError:
                # Created outside the API and cannot be addressed by a route
                logger.warning(f"Skipping unaddressable session directory: {entry.name!r}")
        return sorted(directories)

    def latest_directory(self) -> str:
        """Return the last session directory in sorted order."""
        directories = self.list_directories()
        if not directories:
            logger.warning(f"No session directories in: {self.storage_root}")
            raise MediaNotFoundError("No session directories available", code="ENOENT")
        return directories[-1]

    def list_files(self, directory: str) -> list[str]:
        """List file names in a session directory in sorted order."""
        directory_path = self._directory_path(directory)
        if not directory_path.is_dir():
            logger.warning(f"Session directory not found: {directory}")
            raise MediaNotFoundError(f"Session directory not found: {directory}", code="ENOENT")

        return sorted(entry.name for entry in directory_path.iterdir() if entry.is_file())

    def read_file(self, directory: str, filename: str) -> bytes:
        """Read ``<root>/<directory>/<filename>``.

        Raises:
            InvalidMediaPathError: If either name is not a safe path segment.
            FileNotFoundError: If the path is missing or not a regular file.
            StorageError: If the file cannot be read.
        """
        file_path = self._directory_path(directory) / validate_segment(filename, "filename")

        if not file_path.is_file():
            logger.warning(f"Media file not found: {file_path}")
            raise FileNotFoundError(errno.ENOENT, "Media file not found", str(file_path))

        try:
            content = file_path.read_bytes()
            logger.debug(f"Read {len(content)} bytes from: {file_path}")
            return content
        except OSError as e:
            logger.error(f"Failed to read {file_path}: {e}")
            raise StorageError(f"Failed to read file: {e}", code=_errno_name(e))
