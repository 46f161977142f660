"""CID check schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

CID_MAX_LENGTH = 50


def normalize_cids(raw: list[str]) -> list[str]:
    """Strip CIDs and drop blanks and repeats, keeping first-seen order.

    Raises ValueError when no CID remains.
    """
    seen: set[str] = set()
    cids: list[str] = []
    for item in raw:
        cid = item.strip()
        if not cid or cid in seen:
            continue
        seen.add(cid)
        cids.append(cid)
    if not cids:
        raise ValueError("At least one non-empty CID is required")
    return cids


class CidCheckRequest(BaseModel):
    """Batch of CIDs to check against synced file names."""

    cids: list[str] = Field(min_length=1)

    @field_validator("cids")
    @classmethod
    def cids_must_be_nonempty(cls, v: list[str]) -> list[str]:
        """Reject batches without a single usable CID."""
        _ = cls
        cids = normalize_cids(v)
        too_long = [cid for cid in cids if len(cid) > CID_MAX_LENGTH]
        if too_long:
            raise ValueError(f"CIDs must be at most {CID_MAX_LENGTH} characters: {too_long[0]}")
        return cids


class MatchedFile(BaseModel):
    """File whose name contains a checked CID."""

    file_id: str
    file_name: str
    file_path: str


class FoundCid(BaseModel):
    """A CID together with every file it matched."""

    cid: str
    files: list[MatchedFile]


class CidCheckResponse(BaseModel):
    """Found/not-found partition of a CID batch."""

    total: int = Field(ge=0)
    found: list[FoundCid] = Field(default_factory=list)
    not_found: list[str] = Field(default_factory=list)
    found_count: int = Field(default=0, ge=0)
    not_found_count: int = Field(default=0, ge=0)


class QueryHistoryEntry(BaseModel):
    """One recorded batch check."""

    id: int
    query_text: str
    total_cids: int
    found_cids: int
    not_found_cids: int
    query_time: str | None = None
    ip_address: str | None = None
