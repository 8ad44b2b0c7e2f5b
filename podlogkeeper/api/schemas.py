"""Response models for the log listing API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class LogFileEntry(BaseModel):
    """One captured log file."""

    name: str
    size_bytes: int = Field(ge=0)
    modified_at: datetime


class LogListResponse(BaseModel):
    """Contents of the log directory."""

    directory: str
    count: int
    logs: list[LogFileEntry]


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str


class ErrorResponse(BaseModel):
    """Error envelope returned by every failing endpoint."""

    error: str
    detail: str
