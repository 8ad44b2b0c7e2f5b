"""Routes for listing and reading captured pod logs.

GET /health              -- liveness and version.
GET /logs                -- every ``*.log`` file in the log directory.
GET /logs?name=<file>    -- one log file as text/plain.
"""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from fastapi import APIRouter, Query, Request
from fastapi.responses import FileResponse, JSONResponse

from podlogkeeper.api.schemas import ErrorResponse, HealthResponse, LogFileEntry, LogListResponse

router = APIRouter()


def is_valid_log_name(name: str) -> bool:
    """True for a bare ``*.log`` file name with no path component."""
    if not name.endswith(".log") or name == ".log":
        return False
    # NAME_MAX on common filesystems
    if len(name.encode("utf-8", errors="replace")) > 255:
        return False
    if any(sep in name for sep in ("/", "\\", "\x00")):
        return False
    return ".." not in name


def _error(status_code: int, error: str, detail: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, detail=detail).model_dump(),
    )


def list_log_files(log_directory: Path) -> list[LogFileEntry]:
    if not log_directory.is_dir():
        return []
    entries = []
    for path in sorted(log_directory.glob("*.log")):
        if not path.is_file():
            continue
        stat = path.stat()
        entries.append(
            LogFileEntry(
                name=path.name,
                size_bytes=stat.st_size,
                modified_at=datetime.fromtimestamp(stat.st_mtime, tz=UTC),
            )
        )
    return entries


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    from podlogkeeper import __version__

    return HealthResponse(version=__version__)


@router.get(
    "/logs",
    response_model=None,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def logs(
    request: Request,
    name: str = Query(default="", max_length=512),
) -> LogListResponse | FileResponse | JSONResponse:
    log_directory = Path(request.app.state.log_directory)

    if not name:
        entries = list_log_files(log_directory)
        return LogListResponse(directory=str(log_directory), count=len(entries), logs=entries)

    if not is_valid_log_name(name):
        return _error(400, "INVALID_LOG_NAME", f"Not a log file name: {name!r}")

    path = log_directory / name
    if not path.is_file():
        return _error(404, "LOG_NOT_FOUND", f"No captured log named {name!r}")
    return FileResponse(path, media_type="text/plain", filename=name)
