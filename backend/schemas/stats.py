"""Aggregate statistics and sync schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field


class StatsResponse(BaseModel):
    """Counts shown on the dashboard."""

    total_files: int = Field(ge=0)
    total_cids: int = Field(ge=0)
    found_cids: int = Field(ge=0)
    not_found_cids: int = Field(ge=0)
    last_sync_time: str | None = None
    sync_in_progress: bool = False
    total_files_synced: int = Field(default=0, ge=0)


class SyncTriggerResponse(BaseModel):
    """Acknowledgement that a background sync was scheduled."""

    message: str


class SyncStatusResponse(BaseModel):
    """Persisted state of the most recent sync."""

    in_progress: bool
    last_sync_time: str | None = None
    total_files_synced: int = Field(default=0, ge=0)
    last_error: str | None = None
