"""Application settings and configuration."""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(
        default="Unity Media Upload Relay",
        description="Application name"
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version"
    )
    environment: Literal["local", "dev", "stage", "prod"] = Field(
        default="local",
        description="Deployment environment"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # API Configuration
    route_prefix: str = Field(
        default="/umu",
        description="Prefix of the media upload and retrieval routes"
    )
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins"
    )
    cors_methods: list[str] = Field(
        default=["GET", "PUT", "POST", "DELETE"],
        description="Allowed CORS methods"
    )
    cors_headers: list[str] = Field(
        default=["Content-Type"],
        description="Allowed CORS request headers"
    )

    # Storage Configuration (for uploaded media files)
    storage_root: Path = Field(
        default=Path("data/unity_uploaded_media_files"),
        description="Root directory holding one sub-directory per session"
    )
    file_access_base_url: Optional[str] = Field(
        default=None,
        description="Base URL for file access links, e.g. https://host:port/umu/getfile."
                    " Derived from the request when unset."
    )
    file_owner_uid: Optional[int] = Field(
        default=None,
        description="User ID that uploaded directories and files are chowned to"
    )
    file_owner_gid: Optional[int] = Field(
        default=None,
        description="Group ID for ownership rewrite (defaults to file_owner_uid)"
    )

    @field_validator("storage_root", mode="before")
    @classmethod
    def resolve_storage_path(cls, v: str | Path) -> Path:
        """Ensure storage root is a Path object."""
        if isinstance(v, str):
            return Path(v)
        return v

    # Upload Client Configuration
    upload_url: Optional[str] = Field(
        default=None,
        description="Upload endpoint, e.g. https://host:port/umu/uploadbinarydata"
    )
    session_name_time_format: str = Field(
        default="%Y-%m-%d_%H-%M-%S",
        description="strftime format used to name a client session from UTC now"
    )
    is_allowed_to_connect: bool = Field(
        default=True,
        description="Whether the upload client may contact the server"
    )
    upload_timeout: int = Field(
        default=30,
        description="Timeout for upload client requests (seconds)"
    )

    # Logging Configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level"
    )
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format"
    )
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format"
    )
    log_file: Optional[Path] = Field(
        default=None,
        description="Path to log file (if None, logs to stdout only)"
    )

    @property
    def log_level_numeric(self) -> int:
        """Get numeric log level."""
        return getattr(logging, self.log_level)

    @property
    def file_owner(self) -> Optional[tuple[int, int]]:
        """(uid, gid) for ownership rewrite, or None when disabled."""
        if self.file_owner_uid is None:
            return None
        gid = self.file_owner_gid if self.file_owner_gid is not None else self.file_owner_uid
        return (self.file_owner_uid, gid)

    def configure_logging(self) -> None:
        """Configure logging based on settings."""
        import sys

        # Base logging configuration
        handlers: list[logging.Handler] = []

        # Console handler
        console_handler = logging.StreamHandler(sys.stdout)
        handlers.append(console_handler)

        # File handler if specified
        if self.log_file:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(self.log_file)
            handlers.append(file_handler)

        # Configure formatter
        if self.log_json:
            # JSON formatter for structured logging
            import json

            class JSONFormatter(logging.Formatter):
                def format(self, record: logging.LogRecord) -> str:
                    log_obj = {
                        "timestamp": self.formatTime(record),
                        "level": record.levelname,
                        "logger": record.name,
                        "message": record.getMessage(),
                        "module": record.module,
                        "function": record.funcName,
                        "line": record.lineno,
                    }
                    if record.exc_info:
                        log_obj["exception"] = self.formatException(record.exc_info)
                    return json.dumps(log_obj)

            formatter = JSONFormatter()
        else:
            formatter = logging.Formatter(self.log_format)

        # Apply formatter to all handlers
        for handler in handlers:
            handler.setFormatter(formatter)

        # Configure root logger
        logging.basicConfig(
            level=self.log_level_numeric,
            handlers=handlers,
            force=True,
        )

        # Set specific logger levels
        if self.debug:
            logging.getLogger("media_upload_relay").setLevel(logging.DEBUG)
        else:
            # Reduce noise from third-party libraries
            logging.getLogger("urllib3").setLevel(logging.WARNING)
            logging.getLogger("httpx").setLevel(logging.WARNING)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
