"""SQLAlchemy ORM models for the CID checker."""

from backend.models.base import Base
from backend.models.cid import CidRecord, CidStatus
from backend.models.file import FileRecord
from backend.models.history import QueryHistoryRecord
from backend.models.system_config import SystemConfig

__all__ = [
    "Base",
    "CidRecord",
    "CidStatus",
    "FileRecord",
    "QueryHistoryRecord",
    "SystemConfig",
]
