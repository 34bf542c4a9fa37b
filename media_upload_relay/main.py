import logging
from contextlib import asynccontextmanager
from typing import Any, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from media_upload_relay.dependencies import get_media_storage
from media_upload_relay.media_types import media_type_for
from media_upload_relay.schemas import (
    DirectoryListResponse,
    ErrorResponse,
    MediaFilesResponse,
    UploadResponse,
)
from media_upload_relay.storage.base import (
    InvalidMediaPathError,
    MediaNotFoundError,
    MediaStorage,
    StorageError,
)
from config import get_settings

# Get settings and configure logging before anything else
settings = get_settings()
settings.configure_logging()

# Create logger for this module
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown."""
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Debug mode: {settings.debug}")
    logger.info(f"Storage root: {settings.storage_root}")
    if not settings.storage_root.exists():
        logger.info("Storage root does not exist yet, it is created on first upload")

    yield

    # Shutdown
    logger.info("Shutting down application")


# Create FastAPI app with settings
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    debug=settings.debug,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=settings.cors_methods,
    allow_headers=settings.cors_headers,
)

router = APIRouter(prefix=settings.route_prefix, tags=["media"])

ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@app.get("/")
def index() -> dict[str, str]:
    """Landing endpoint naming the service."""
    return {"title": settings.app_name}


@app.get("/health")
def health_check() -> dict[str, str]:
    """Simple health-check endpoint."""
    return {
        "status": "ok",
        "environment": settings.environment,
        "version": settings.app_version,
    }


@app.get("/config")
def get_config() -> dict[str, Any]:
    """Get current configuration (non-sensitive values only)."""
    return {
        "app_name": settings.app_name,
        "app_version": settings.app_version,
        "environment": settings.environment,
        "debug": settings.debug,
        "route_prefix": settings.route_prefix,
        "storage_root": str(settings.storage_root),
        "file_access_base_url": settings.file_access_base_url,
        "log_level": settings.log_level,
        "log_json": settings.log_json,
    }


def _error_response(status_code: int, description: str, code: Optional[str] = None) -> JSONResponse:
    """Build the JSON error body shared by all media routes."""
    body = ErrorResponse(
        status="not found" if status_code == 404 else "error",
        status_code=status_code,
        code=code,
        description=description,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())


def _file_access_base(request: Request) -> str:
    """Base URL under which stored files can be fetched."""
    if settings.file_access_base_url:
        return settings.file_access_base_url.rstrip("/")
    base_url = str(request.base_url).rstrip("/")
    return f"{base_url}{settings.route_prefix}/getfile"


def _file_access_urls(request: Request, directory: str, filenames: list[str]) -> list[str]:
    base = _file_access_base(request)
    return [f"{base}/{quote(directory, safe='')}/{quote(name, safe='')}" for name in filenames]


@router.put(
    "/uploadbinarydata/{directory}/{filename}",
    response_model=UploadResponse,
    responses=ERROR_RESPONSES,
)
async def upload_binary_data(
    directory: str,
    filename: str,
    request: Request,
    storage: MediaStorage = Depends(get_media_storage),
):
    """Append the raw request body to ``<directory>/<filename>``.

    The session directory is created when it does not exist yet. Uploading
    to the same name again appends to the existing file. The filename must
    carry its extension (e.g. ``.png``), which selects the content-type
    when the file is fetched later.
    """
    content = await request.body()
    logger.info(f"Receiving upload: {directory}/{filename}, content length: {len(content)}")

    try:
        storage.append(directory, filename, content)
    except InvalidMediaPathError as e:
        logger.warning(f"Rejected upload path {directory!r}/{filename!r}: {e}")
        return _error_response(400, str(e))
    except StorageError as e:
        logger.error(f"Failed to store upload {directory}/{filename}: {e}")
        return _error_response(500, "Upload binary data was not successful.", code=e.code)

    logger.info(f"Successfully stored upload: {directory}/{filename}")
    return UploadResponse()


@router.get(
    "/listalldirectories",
    response_model=DirectoryListResponse,
    responses=ERROR_RESPONSES,
)
async def list_all_directories(storage: MediaStorage = Depends(get_media_storage)):
    """List all session directories."""
    try:
        directories = storage.list_directories()
    except MediaNotFoundError:
        return _error_response(404, "")

    logger.info(f"Listing {len(directories)} session directories.")
    return DirectoryListResponse(directories=directories)


@router.get(
    "/getlatestmediafiles",
    response_model=MediaFilesResponse,
    responses=ERROR_RESPONSES,
)
async def get_latest_media_files(
    request: Request,
    storage: MediaStorage = Depends(get_media_storage),
):
    """Access URLs for the files in the latest session directory.

    The latest directory is the last one in listing order, which for
    timestamp-named sessions is the most recently created.
    """
    try:
        directory = storage.latest_directory()
        files = storage.list_files(directory)
    except MediaNotFoundError:
        return _error_response(404, "")
    except StorageError as e:
        logger.error(f"Failed to list latest session directory: {e}")
        return _error_response(500, "Latest media files could not be listed.", code=e.code)

    logger.info(f"Listing {len(files)} files for latest directory {directory}.")
    return MediaFilesResponse(directory=directory, files=_file_access_urls(request, directory, files))


@router.get(
    "/getmediafilesfordirectory/{directory}",
    response_model=MediaFilesResponse,
    responses=ERROR_RESPONSES,
)
async def get_media_files_for_directory(
    directory: str,
    request: Request,
    storage: MediaStorage = Depends(get_media_storage),
):
    """Access URLs for the files in a given session directory."""
    try:
        files = storage.list_files(directory)
    except InvalidMediaPathError as e:
        return _error_response(400, str(e))
    except MediaNotFoundError:
        return _error_response(404, "")

    logger.info(f"Listing {len(files)} files for directory {directory}.")
    return MediaFilesResponse(directory=directory, files=_file_access_urls(request, directory, files))


@router.get(
    "/getfile/{directory}/{filename}",
    response_class=Response,
    responses={
        200: {"content": {"image/png": {}, "audio/wav": {}}},
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def get_file(
    directory: str,
    filename: str,
    storage: MediaStorage = Depends(get_media_storage),
):
    """Return the bytes of a stored file.

    The content-type is derived from the last 3 characters of the filename:
    ``png`` is served as image/png and ``wav`` as audio/wav. Any other file is
    sent without a Content-Type header.
    """
    try:
        content = storage.read_file(directory, filename)
    except InvalidMediaPathError as e:
        return _error_response(400, str(e))
    except FileNotFoundError:
        return _error_response(400, "Requested file does not exist on server.", code="ENOENT")
    except StorageError as e:
        logger.error(f"Failed to read {directory}/{filename}: {e}")
        return _error_response(500, "Requested file could not be read.", code=e.code)

    logger.info(f"Serving file {directory}/{filename} ({len(content)} bytes)")
    return Response(content=content, media_type=media_type_for(filename))


app.include_router(router)
