"""File listing queries."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from sqlalchemy import func, or_, select

from backend.models.file import FileRecord
from backend.schemas.file import FileListResponse, FileSummary, Pagination
from backend.services.datetime_service import format_iso

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


def file_summary(record: FileRecord) -> FileSummary:
    """Convert an ORM row to its API representation."""
    return FileSummary(
        file_id=record.file_id,
        file_name=record.file_name,
        file_path=record.file_path,
        file_size=record.file_size,
        mime_type=record.mime_type,
        modified_time=format_iso(record.modified_time),
        created_time=format_iso(record.created_time),
        updated_time=format_iso(record.updated_time),
    )


async def list_files(
    session: AsyncSession,
    *,
    page: int = 1,
    limit: int = 50,
    search: str | None = None,
) -> FileListResponse:
    """List files newest-modified first, optionally filtered by name or path."""
    stmt = select(FileRecord)
    if search:
        stmt = stmt.where(
            or_(
                FileRecord.file_name.contains(search, autoescape=True),
                FileRecord.file_path.contains(search, autoescape=True),
            )
        )

    count_stmt = select(func.count()).select_from(stmt.subquery())
    total = (await session.execute(count_stmt)).scalar() or 0

    stmt = stmt.order_by(FileRecord.modified_time.desc(), FileRecord.id.desc())
    stmt = stmt.offset((page - 1) * limit).limit(limit)
    records = (await session.execute(stmt)).scalars().all()

    return FileListResponse(
        files=[file_summary(r) for r in records],
        pagination=Pagination(
            page=page,
            limit=limit,
            total=total,
            total_pages=max(1, math.ceil(total / limit)),
        ),
    )
