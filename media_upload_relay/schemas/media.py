"""Schemas for the media listing endpoints."""

from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field


class DirectoryListResponse(BaseModel):
    """All session directories known to the server."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "status": "ok",
                    "status_code": 200,
                    "directories": ["2024-01-31_12-00-00", "2024-02-01_09-30-15"]
                }
            ]
        }
    )

    status: Literal["ok"] = "ok"
    status_code: int = 200

    directories: List[str] = Field(
        ...,
        description="Session directory names in listing order"
    )


class MediaFilesResponse(BaseModel):
    """Access URLs for the files of one session directory."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "status": "ok",
                    "status_code": 200,
                    "directory": "2024-02-01_09-30-15",
                    "files": [
                        "https://example.org:3000/umu/getfile/2024-02-01_09-30-15/microphone.wav",
                        "https://example.org:3000/umu/getfile/2024-02-01_09-30-15/screenshot.png"
                    ]
                }
            ]
        }
    )

    status: Literal["ok"] = "ok"
    status_code: int = 200

    directory: str = Field(
        ...,
        description="Session directory the files belong to"
    )

    files: List[str] = Field(
        ...,
        description="Access URL for each file in the directory"
    )
