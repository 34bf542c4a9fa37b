"""Upload-related Pydantic schemas for API responses."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class UploadResponse(BaseModel):
    """Response model for a successful binary upload.

    Returned after the payload has been appended to the target file.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "status": "ok",
                    "status_code": 200,
                    "description": "Upload binary data was successful."
                }
            ]
        }
    )

    status: Literal["ok"] = Field(
        default="ok",
        description="Outcome of the request"
    )

    status_code: int = Field(
        default=200,
        description="HTTP status code, repeated in the body"
    )

    description: str = Field(
        default="Upload binary data was successful.",
        description="Human readable outcome"
    )


class ErrorResponse(BaseModel):
    """Body shared by all error responses of the media routes."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "status": "not found",
                    "status_code": 404,
                    "code": "ENOENT",
                    "description": "Session directory not found: 2024-01-31_12-00-00"
                },
                {
                    "status": "error",
                    "status_code": 400,
                    "code": "ENOENT",
                    "description": "Requested file does not exist on server."
                }
            ]
        }
    )

    status: Literal["error", "not found"] = Field(
        ...,
        description="Error category"
    )

    status_code: int = Field(
        ...,
        ge=400,
        le=599,
        description="HTTP status code, repeated in the body"
    )

    code: Optional[str] = Field(
        None,
        description="Symbolic errno name of the underlying filesystem error, if any",
        examples=["ENOENT", "EACCES"]
    )

    description: str = Field(
        "",
        description="Minimal description of the failure"
    )
