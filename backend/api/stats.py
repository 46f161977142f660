"""Aggregate statistics endpoint."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backend.api.deps import get_session
from backend.schemas.stats import StatsResponse
from backend.services.stats_service import get_stats

router = APIRouter(prefix="/api/stats", tags=["stats"])


@router.get("", response_model=StatsResponse)
async def stats(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> StatsResponse:
    return await get_stats(session)
