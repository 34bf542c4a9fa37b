"""Pydantic schemas for request/response validation."""

from .media import DirectoryListResponse, MediaFilesResponse
from .upload import ErrorResponse, UploadResponse

__all__ = [
    "UploadResponse",
    "ErrorResponse",
    "DirectoryListResponse",
    "MediaFilesResponse",
]
