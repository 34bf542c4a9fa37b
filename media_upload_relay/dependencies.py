"""FastAPI dependency injection configuration."""

import logging

from media_upload_relay.storage.base import MediaStorage
from media_upload_relay.storage.local import LocalMediaStorage
from config import get_settings

logger = logging.getLogger(__name__)


# Global instance for media storage
_media_storage: MediaStorage | None = None


def get_media_storage() -> MediaStorage:
    """Get the media storage instance.

    Media is always kept on the local filesystem below ``STORAGE_ROOT``.
    The instance is created on first use and shared by all requests.

    Returns:
        MediaStorage: The configured storage instance
    """
    global _media_storage

    if _media_storage is None:
        settings = get_settings()
        _media_storage = LocalMediaStorage()
        logger.info(f"Created local media storage with root: {settings.storage_root}")

    return _media_storage


def reset_media_storage() -> None:
    """Drop the cached storage instance so the next call rebuilds it from settings."""
    global _media_storage
    _media_storage = None
