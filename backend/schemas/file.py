"""File listing schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field


class FileSummary(BaseModel):
    """A synced Drive file."""

    file_id: str
    file_name: str
    file_path: str
    file_size: int | None = None
    mime_type: str | None = None
    modified_time: str | None = None
    created_time: str | None = None
    updated_time: str | None = None


class Pagination(BaseModel):
    """Paging metadata for list responses."""

    page: int = Field(ge=1)
    limit: int = Field(ge=1)
    total: int = Field(ge=0)
    total_pages: int = Field(ge=1)


class FileListResponse(BaseModel):
    """Paged file list."""

    files: list[FileSummary]
    pagination: Pagination
