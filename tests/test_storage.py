"""Unit tests for storage module."""

from pathlib import Path
from typing import Protocol
from unittest.mock import Mock

import pytest

from media_upload_relay.storage import (
    InvalidMediaPathError,
    LocalMediaStorage,
    MediaNotFoundError,
    MediaStorage,
    StorageError,
)


class TestMediaStorage:
    """Test MediaStorage interface."""

    def test_interface_protocol(self):
        """Test that MediaStorage is a proper Protocol."""
        assert issubclass(MediaStorage, Protocol)

    def test_interface_methods_defined(self):
        """Test that interface has required methods."""
        for name in ("append", "list_directories", "latest_directory", "list_files", "read_file"):
            assert hasattr(MediaStorage, name)

    def test_runtime_checkable(self):
        """Test that MediaStorage can be used with isinstance at runtime."""
        mock_storage = Mock(spec=MediaStorage)
        assert isinstance(mock_storage, MediaStorage)

    def test_non_compliant_class(self):
        """Test that non-compliant classes don't match the protocol."""
        class WriteOnly:
            def append(self, directory: str, filename: str, content: bytes) -> None:
                pass

        assert not isinstance(WriteOnly(), MediaStorage)

    def test_error_hierarchy(self):
        assert issubclass(MediaNotFoundError, StorageError)
        assert issubclass(InvalidMediaPathError, StorageError)
        assert StorageError("boom", code="EACCES").code == "EACCES"


class TestLocalMediaStorage:
    """Test LocalMediaStorage implementation."""

    def test_init_does_not_create_root(self, media_root):
        """The root is only created by the first upload."""
        _ = LocalMediaStorage(storage_root=media_root)
        assert not media_root.exists()

    def test_init_default_root_from_settings(self, monkeypatch, tmp_path):
        """Test initialization with the storage root from settings."""
        custom_root = tmp_path / "custom_storage"
        monkeypatch.setenv("STORAGE_ROOT", str(custom_root))

        from config import get_settings
        get_settings.cache_clear()
        try:
            storage = LocalMediaStorage()
            assert storage.storage_root == custom_root
        finally:
            get_settings.cache_clear()

    def test_init_owner_from_settings(self, monkeypatch, tmp_path):
        monkeypatch.setenv("FILE_OWNER_UID", "1001")

        from config import get_settings
        get_settings.cache_clear()
        try:
            storage = LocalMediaStorage(storage_root=tmp_path)
            assert storage.file_owner == (1001, 1001)
        finally:
            get_settings.cache_clear()

    def test_append_creates_directory_and_file(self, storage, media_root):
        """Writing to a new (directory, filename) creates both."""
        storage.append("2024-01-31_12-00-00", "screenshot.png", b"\x89PNG\r\n")

        saved_file = media_root / "2024-01-31_12-00-00" / "screenshot.png"
        assert saved_file.parent.is_dir()
        assert saved_file.read_bytes() == b"\x89PNG\r\n"

    def test_append_concatenates(self, storage, media_root):
        """Repeated writes to the same name append rather than overwrite."""
        storage.append("session", "microphone.wav", b"RIFF")
        storage.append("session", "microphone.wav", b"WAVE")

        assert (media_root / "session" / "microphone.wav").read_bytes() == b"RIFFWAVE"

    def test_append_empty_payload_creates_empty_file(self, storage, media_root):
        storage.append("session", "empty.bin", b"")
        assert (media_root / "session" / "empty.bin").read_bytes() == b""

    def test_append_into_existing_directory(self, storage, media_root):
        (media_root / "session").mkdir(parents=True)
        storage.append("session", "a.png", b"a")
        assert (media_root / "session" / "a.png").exists()

    @pytest.mark.parametrize("directory, filename", [
        ("..", "escape.png"),
        (".", "here.png"),
        ("session", ".."),
        ("a/b", "nested.png"),
        ("session", "..\\evil.png"),
        ("", "blank.png"),
    ])
    def test_append_rejects_unsafe_names(self, storage, media_root, directory, filename):
        with pytest.raises(InvalidMediaPathError):
            storage.append(directory, filename, b"data")
        assert not media_root.exists()

    def test_append_storage_error(self, storage, media_root):
        """A target that cannot be opened for appending is a StorageError."""
        (media_root / "session" / "taken.png").mkdir(parents=True)

        with pytest.raises(StorageError, match="Failed to write file") as exc_info:
            storage.append("session", "taken.png", b"data")
        assert exc_info.value.code == "EISDIR"

    def test_append_changes_ownership_when_configured(self, media_root, monkeypatch):
        storage = LocalMediaStorage(storage_root=media_root, file_owner=(1001, 1002))
        chown = Mock()
        monkeypatch.setattr("media_upload_relay.storage.local.os.chown", chown)

        storage.append("session", "shot.png", b"data")
        storage.append("session", "shot.png", b"more")

        chowned = [call.args for call in chown.call_args_list]
        # Directory once on creation, file after every write
        assert chowned == [
            (media_root / "session", 1001, 1002),
            (media_root / "session" / "shot.png", 1001, 1002),
            (media_root / "session" / "shot.png", 1001, 1002),
        ]

    def test_append_without_owner_skips_chown(self, storage, monkeypatch):
        chown = Mock()
        monkeypatch.setattr("media_upload_relay.storage.local.os.chown", chown)

        storage.append("session", "shot.png", b"data")
        chown.assert_not_called()

    def test_chown_failure_is_storage_error(self, media_root, monkeypatch):
        storage = LocalMediaStorage(storage_root=media_root, file_owner=(1001, 1001))

        def deny(path, uid, gid):
            raise PermissionError(1, "Operation not permitted")

        monkeypatch.setattr("media_upload_relay.storage.local.os.chown", deny)

        with pytest.raises(StorageError, match="Failed to change ownership") as exc_info:
            storage.append("session", "shot.png", b"data")
        assert exc_info.value.code == "EPERM"

    def test_list_directories_missing_root(self, storage):
        with pytest.raises(MediaNotFoundError):
            storage.list_directories()

    def test_list_directories_sorted_and_only_dirs(self, storage, media_root):
        for name in ("2024-02-01_09-30-15", "2024-01-31_12-00-00"):
            (media_root / name).mkdir(parents=True)
        (media_root / "stray.txt").write_bytes(b"x")

        assert storage.list_directories() == ["2024-01-31_12-00-00", "2024-02-01_09-30-15"]

    def test_list_directories_empty_root(self, storage, media_root):
        media_root.mkdir()
        assert storage.list_directories() == []

    def test_list_directories_skips_unaddressable_names(self, storage, media_root):
        """Directories created outside the API with a backslash are left out."""
        (media_root / "2024-01-31_12-00-00").mkdir(parents=True)
        (media_root / "z\\weird").mkdir()

        assert storage.list_directories() == ["2024-01-31_12-00-00"]
        assert storage.latest_directory() == "2024-01-31_12-00-00"

    def test_latest_directory_is_last_in_order(self, storage):
        storage.append("2024-02-01_09-30-15", "b.png", b"b")
        storage.append("2024-01-31_12-00-00", "a.png", b"a")

        assert storage.latest_directory() == "2024-02-01_09-30-15"

    def test_latest_directory_without_sessions(self, storage, media_root):
        media_root.mkdir()
        with pytest.raises(MediaNotFoundError, match="No session directories"):
            storage.latest_directory()

    def test_list_files(self, storage):
        storage.append("session", "screenshot.png", b"p")
        storage.append("session", "microphone.wav", b"w")

        assert storage.list_files("session") == ["microphone.wav", "screenshot.png"]

    def test_list_files_missing_directory(self, storage):
        with pytest.raises(MediaNotFoundError, match="Session directory not found"):
            storage.list_files("nope")

    def test_read_file_success(self, storage):
        content = b"test media data \x00\x01\x02"
        storage.append("session", "clip.wav", content)

        assert storage.read_file("session", "clip.wav") == content

    def test_read_file_not_found(self, storage):
        with pytest.raises(FileNotFoundError):
            storage.read_file("session", "missing.png")

    def test_read_file_directory_is_not_a_file(self, storage, media_root):
        (media_root / "session" / "folder.png").mkdir(parents=True)
        with pytest.raises(FileNotFoundError):
            storage.read_file("session", "folder.png")

    def test_read_file_storage_error(self, storage, monkeypatch):
        """Test StorageError when read fails."""
        storage.append("session", "clip.wav", b"content")

        def mock_read_bytes(self):
            raise IOError("Simulated read failure")

        monkeypatch.setattr(Path, "read_bytes", mock_read_bytes)

        with pytest.raises(StorageError, match="Failed to read file"):
            storage.read_file("session", "clip.wav")

    def test_implements_media_storage_protocol(self, storage):
        assert isinstance(storage, MediaStorage)
