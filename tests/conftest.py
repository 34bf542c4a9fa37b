"""Shared fixtures for the media upload relay tests."""

import pytest
from fastapi.testclient import TestClient

from media_upload_relay.dependencies import get_media_storage
from media_upload_relay.main import app
from media_upload_relay.storage import LocalMediaStorage
from config import get_settings


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Drop cached settings after monkeypatched environment variables are restored."""
    yield
    get_settings.cache_clear()


@pytest.fixture
def media_root(tmp_path):
    """Storage root inside the test's temporary directory (not created yet)."""
    return tmp_path / "unity_uploaded_media_files"


@pytest.fixture
def storage(media_root):
    """LocalMediaStorage rooted at media_root without ownership rewrite."""
    return LocalMediaStorage(storage_root=media_root, file_owner=None)


@pytest.fixture
def client(storage):
    """TestClient whose media routes use the temporary storage."""
    app.dependency_overrides[get_media_storage] = lambda: storage
    yield TestClient(app)
    app.dependency_overrides.clear()
