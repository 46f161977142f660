"""Aggregate statistics."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import func, select

from backend.models.cid import CidRecord, CidStatus
from backend.models.file import FileRecord
from backend.schemas.stats import StatsResponse, SyncStatusResponse
from backend.services.system_config_service import (
    LAST_SYNC_ERROR,
    LAST_SYNC_TIME,
    SYNC_IN_PROGRESS,
    TOTAL_FILES_SYNCED,
    get_config_value,
)

if TYPE_CHECKING:
    from sqlalchemy import Select
    from sqlalchemy.ext.asyncio import AsyncSession


def _as_int(value: str | None) -> int:
    try:
        return max(0, int(value or 0))
    except ValueError:
        return 0


async def _count(session: AsyncSession, stmt: Select[tuple[int]]) -> int:
    result = await session.execute(stmt)
    return int(result.scalar() or 0)


async def get_stats(session: AsyncSession) -> StatsResponse:
    """Collect dashboard counts and sync state."""
    total_files = await _count(session, select(func.count()).select_from(FileRecord))
    total_cids = await _count(session, select(func.count()).select_from(CidRecord))
    found_cids = await _count(
        session,
        select(func.count()).select_from(CidRecord).where(CidRecord.status == CidStatus.FOUND),
    )
    not_found_cids = await _count(
        session,
        select(func.count())
        .select_from(CidRecord)
        .where(CidRecord.status == CidStatus.NOT_FOUND),
    )
    return StatsResponse(
        total_files=total_files,
        total_cids=total_cids,
        found_cids=found_cids,
        not_found_cids=not_found_cids,
        last_sync_time=await get_config_value(session, LAST_SYNC_TIME),
        sync_in_progress=await get_config_value(session, SYNC_IN_PROGRESS) == "true",
        total_files_synced=_as_int(await get_config_value(session, TOTAL_FILES_SYNCED)),
    )


async def get_sync_status(session: AsyncSession) -> SyncStatusResponse:
    """Return the persisted state of the latest sync."""
    return SyncStatusResponse(
        in_progress=await get_config_value(session, SYNC_IN_PROGRESS) == "true",
        last_sync_time=await get_config_value(session, LAST_SYNC_TIME),
        total_files_synced=_as_int(await get_config_value(session, TOTAL_FILES_SYNCED)),
        last_error=await get_config_value(session, LAST_SYNC_ERROR),
    )
