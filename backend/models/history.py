"""Query history model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from backend.models.base import Base


class QueryHistoryRecord(Base):
    """One batch CID check (append-only)."""

    __tablename__ = "query_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    query_text: Mapped[str] = mapped_column(Text, nullable=False)
    total_cids: Mapped[int] = mapped_column(Integer, nullable=False)
    found_cids: Mapped[int] = mapped_column(Integer, nullable=False)
    not_found_cids: Mapped[int] = mapped_column(Integer, nullable=False)
    query_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)

    __table_args__ = (Index("idx_query_history_query_time", "query_time"),)
