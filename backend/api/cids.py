"""CID check and query history endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from backend.api.deps import get_client_ip, get_session, get_settings
from backend.config import Settings
from backend.schemas.cid import CidCheckRequest, CidCheckResponse, QueryHistoryEntry
from backend.services.cid_service import check_cids, list_query_history

router = APIRouter(prefix="/api", tags=["cids"])


@router.post("/check-cids", response_model=CidCheckResponse)
async def check_cids_endpoint(
    body: CidCheckRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
    settings: Annotated[Settings, Depends(get_settings)],
    client_ip: Annotated[str, Depends(get_client_ip)],
) -> CidCheckResponse:
    """Check a batch of CIDs against synced file names."""
    if len(body.cids) > settings.cid_batch_limit:
        raise HTTPException(
            status_code=422,
            detail=f"At most {settings.cid_batch_limit} CIDs can be checked at once",
        )
    return await check_cids(session, body.cids, client_ip)


@router.get("/history", response_model=list[QueryHistoryEntry])
async def query_history(
    session: Annotated[AsyncSession, Depends(get_session)],
    limit: int = Query(20, ge=1, le=200),
) -> list[QueryHistoryEntry]:
    """Most recent CID checks."""
    return await list_query_history(session, limit)
