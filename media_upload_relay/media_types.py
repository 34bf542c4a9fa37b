"""Content-type lookup for stored media files."""
from typing import Optional

MEDIA_TYPES: dict[str, str] = {
    "png": "image/png",
    "wav": "audio/wav",
}


def media_type_for(filename: str) -> Optional[str]:
    """Return the content-type for ``filename`` based on its last 3 characters.

    Unknown types return None so that no Content-Type header is sent.
    """
    return MEDIA_TYPES.get(filename[-3:])
