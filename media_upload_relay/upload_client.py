"""Client for uploading captured media to the relay server."""
import logging
import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from config import Settings

logger = logging.getLogger(__name__)


def make_session_id(time_format: str, now: Optional[datetime] = None) -> str:
    """Name a client session after the current UTC time.

    Args:
        time_format: strftime format, e.g. ``%Y-%m-%d_%H-%M-%S``
        now: Timestamp to format instead of the current UTC time

    Returns:
        The formatted session identifier
    """
    if now is None:
        now = datetime.now(timezone.utc)
    return now.strftime(time_format)


class MediaUploadClient(ABC):
    """Base class for clients uploading binary media into one session.

    The session ID is fixed when the client is created, so every upload made
    through one instance lands in the same session directory on the server.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.session_id = make_session_id(settings.session_name_time_format)
        logger.info(f"Initialized upload session: {self.session_id}")

    @abstractmethod
    async def upload_binary_data(self, filename: str, content: bytes) -> Optional[Dict[str, Any]]:
        """Upload raw bytes as ``filename`` into the current session.

        Args:
            filename: Name of the file on the server (must include the extension)
            content: Binary payload

        Returns:
            The server's JSON response, or None when nothing was sent
        """
        pass

    async def upload_file(self, path: str | Path, filename: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Upload a local file, by default under its own name."""
        file_path = Path(path)
        if not file_path.is_file():
            raise FileNotFoundError(f"Media file not found: {path}")
        return await self.upload_binary_data(filename or file_path.name, file_path.read_bytes())


class HttpMediaUploadClient(MediaUploadClient):
    """Upload client that PUTs data to the relay server."""

    def __init__(self, settings: Settings):
        """Initialize the HTTP upload client.

        Args:
            settings: Application settings containing the upload URL
        """
        if not settings.upload_url:
            raise ValueError("UPLOAD_URL must be set to upload media")

        super().__init__(settings)
        self.upload_url = settings.upload_url.rstrip("/")
        self.timeout = settings.upload_timeout

    def prepare_upload_url(self, filename: str) -> str:
        """Compose ``<upload_url>/<session_id>/<filename>``."""
        return f"{self.upload_url}/{quote(self.session_id, safe='')}/{quote(filename, safe='')}"

    async def upload_binary_data(self, filename: str, content: bytes) -> Optional[Dict[str, Any]]:
        """Upload bytes with an HTTP PUT request.

        Raises:
            httpx.HTTPError: If the server is unreachable or answers with an error
            ValueError: If the server answers with a body that is not JSON
        """
        url = self.prepare_upload_url(filename)
        logger.debug(f"Starting upload of {len(content)} bytes to: {url}")
        start_time = time.time()

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.put(url, content=content)

                if response.status_code != 200:
                    logger.error(
                        f"Upload server returned error: {response.status_code} - {response.text}"
                    )
                    response.raise_for_status()

                try:
                    result = response.json()
                except ValueError as e:
                    logger.error(f"Upload of {filename} returned a non-JSON response: {e}")
                    raise

                elapsed_time = time.time() - start_time
                logger.info(f"Upload of {filename} completed in {elapsed_time:.2f}s")

                return result

        except httpx.HTTPError as e:
            logger.error(f"Upload of {filename} failed: {e}")
            raise


class DisabledMediaUploadClient(MediaUploadClient):
    """Upload client used when connecting to the server is not allowed.

    Uploads are dropped and reported as errors in the log.
    """

    async def upload_binary_data(self, filename: str, content: bytes) -> Optional[Dict[str, Any]]:
        logger.error(
            f"Upload of {filename} skipped: is_allowed_to_connect = {self.settings.is_allowed_to_connect}"
        )
        return None


def create_upload_client(settings: Settings) -> MediaUploadClient:
    """Factory function to create the appropriate upload client based on settings.

    Args:
        settings: Application settings

    Returns:
        MediaUploadClient instance (either HttpMediaUploadClient or DisabledMediaUploadClient)
    """
    if not settings.is_allowed_to_connect:
        logger.info("Creating DisabledMediaUploadClient")
        return DisabledMediaUploadClient(settings)
    else:
        logger.info("Creating HttpMediaUploadClient")
        return HttpMediaUploadClient(settings)
