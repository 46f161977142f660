"""CID checks: substring matching against synced file names, with history."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from backend.database import begin_write
from backend.models.cid import CidRecord, CidStatus
from backend.models.file import FileRecord
from backend.models.history import QueryHistoryRecord
from backend.schemas.cid import (
    CidCheckResponse,
    FoundCid,
    MatchedFile,
    QueryHistoryEntry,
    normalize_cids,
)
from backend.services.datetime_service import format_iso, now_utc

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


async def find_matching_files(session: AsyncSession, cid: str) -> list[FileRecord]:
    """Return files whose name contains ``cid``, case-sensitively, oldest first.

    LIKE narrows the candidates in SQL; its case folding depends on the
    backend, so the exact match is enforced in Python.
    """
    stmt = (
        select(FileRecord)
        .where(FileRecord.file_name.contains(cid, autoescape=True))
        .order_by(FileRecord.id)
    )
    candidates = (await session.execute(stmt)).scalars().all()
    return [record for record in candidates if cid in record.file_name]


def _mark_found(record: CidRecord, file_id: str, now: datetime) -> None:
    record.status = CidStatus.FOUND
    if record.file_id is None:
        record.file_id = file_id
    record.last_checked_time = now
    if record.first_found_time is None:
        record.first_found_time = now


def _dialect_insert(session: AsyncSession) -> Callable[..., Any]:
    if session.get_bind().dialect.name == "postgresql":
        return postgresql_insert
    return sqlite_insert


async def record_cid_result(
    session: AsyncSession, cid: str, first_match: FileRecord | None, now: datetime
) -> None:
    """Upsert the CID row with the outcome of one check.

    Runs as one INSERT ... ON CONFLICT so concurrent checks of a new CID
    cannot both insert it. The first associated file and the first-found
    time are never overwritten.
    """
    insert = _dialect_insert(session)
    if first_match is not None:
        stmt = insert(CidRecord).values(
            cid=cid,
            file_id=first_match.file_id,
            status=CidStatus.FOUND,
            first_found_time=now,
            last_checked_time=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[CidRecord.cid],
            set_={
                "status": stmt.excluded.status,
                "file_id": func.coalesce(CidRecord.file_id, stmt.excluded.file_id),
                "first_found_time": func.coalesce(
                    CidRecord.first_found_time, stmt.excluded.first_found_time
                ),
                "last_checked_time": stmt.excluded.last_checked_time,
            },
        )
    else:
        stmt = insert(CidRecord).values(cid=cid, status=CidStatus.NOT_FOUND, last_checked_time=now)
        stmt = stmt.on_conflict_do_update(
            index_elements=[CidRecord.cid],
            set_={
                "status": stmt.excluded.status,
                "last_checked_time": stmt.excluded.last_checked_time,
            },
        )
    await session.execute(stmt)


async def check_cids(
    session: AsyncSession,
    cids: list[str],
    ip_address: str | None = None,
) -> CidCheckResponse:
    """Check each CID in turn, persist its status, and log the batch.

    Raises ValueError if the batch holds no usable CID.
    """
    batch = normalize_cids(cids)
    await begin_write(session)
    response = CidCheckResponse(total=len(batch))

    for cid in batch:
        matches = await find_matching_files(session, cid)
        await record_cid_result(session, cid, matches[0] if matches else None, now_utc())
        if matches:
            response.found.append(
                FoundCid(
                    cid=cid,
                    files=[
                        MatchedFile(
                            file_id=m.file_id,
                            file_name=m.file_name,
                            file_path=m.file_path,
                        )
                        for m in matches
                    ],
                )
            )
        else:
            response.not_found.append(cid)

    response.found_count = len(response.found)
    response.not_found_count = len(response.not_found)

    session.add(
        QueryHistoryRecord(
            query_text=",".join(cids),
            total_cids=response.total,
            found_cids=response.found_count,
            not_found_cids=response.not_found_count,
            query_time=now_utc(),
            ip_address=ip_address,
        )
    )
    await session.commit()
    logger.info(
        "Checked %d CIDs from %s: %d found, %d not found",
        response.total,
        ip_address or "unknown",
        response.found_count,
        response.not_found_count,
    )
    return response


async def refresh_unmatched_cids(session: AsyncSession) -> int:
    """Flip previously unmatched CIDs to found when a synced file now matches.

    Does not commit; runs inside the sync transaction.
    """
    stmt = select(CidRecord).where(CidRecord.status != CidStatus.FOUND).order_by(CidRecord.id)
    unmatched = (await session.execute(stmt)).scalars().all()
    flipped = 0
    now = now_utc()
    for record in unmatched:
        matches = await find_matching_files(session, record.cid)
        if not matches:
            continue
        _mark_found(record, matches[0].file_id, now)
        flipped += 1
    if flipped:
        await session.flush()
        logger.info("%d previously unmatched CIDs now match synced files", flipped)
    return flipped


async def list_query_history(session: AsyncSession, limit: int = 20) -> list[QueryHistoryEntry]:
    """Return the most recent batch checks, newest first."""
    stmt = (
        select(QueryHistoryRecord)
        .order_by(QueryHistoryRecord.query_time.desc(), QueryHistoryRecord.id.desc())
        .limit(limit)
    )
    rows = (await session.execute(stmt)).scalars().all()
    return [
        QueryHistoryEntry(
            id=row.id,
            query_text=row.query_text,
            total_cids=row.total_cids,
            found_cids=row.found_cids,
            not_found_cids=row.not_found_cids,
            query_time=format_iso(row.query_time),
            ip_address=row.ip_address,
        )
        for row in rows
    ]
