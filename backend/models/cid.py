"""CID tracking model."""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from backend.models.base import Base


class CidStatus(enum.StrEnum):
    """Outcome of the most recent check of a CID."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    PENDING = "pending"


class CidRecord(Base):
    """A CID and the result of its latest check."""

    __tablename__ = "dmm_cids"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    cid: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    file_id: Mapped[str | None] = mapped_column(
        String(255),
        ForeignKey("files.file_id", ondelete="SET NULL", onupdate="CASCADE"),
        nullable=True,
    )
    status: Mapped[CidStatus] = mapped_column(
        Enum(CidStatus, name="cid_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=CidStatus.PENDING,
    )
    first_found_time: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    last_checked_time: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (Index("idx_dmm_cids_status", "status"),)
