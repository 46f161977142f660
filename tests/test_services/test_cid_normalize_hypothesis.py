"""Property-based tests for CID batch normalization."""

from __future__ import annotations

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from backend.schemas.cid import normalize_cids

PROPERTY_SETTINGS = settings(
    max_examples=200,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)

_CID = st.text(alphabet="ABCDEFXYZ0123456789-_ \t", min_size=0, max_size=12)
_BATCH = st.lists(_CID, max_size=30)


class TestNormalizeCidsProperties:
    @PROPERTY_SETTINGS
    @given(raw=_BATCH)
    def test_result_is_stripped_unique_and_ordered(self, raw: list[str]) -> None:
        expected: list[str] = []
        for item in raw:
            stripped = item.strip()
            if stripped and stripped not in expected:
                expected.append(stripped)

        if not expected:
            with pytest.raises(ValueError):
                normalize_cids(raw)
            return

        result = normalize_cids(raw)
        assert result == expected
        assert all(cid == cid.strip() and cid for cid in result)
        assert len(set(result)) == len(result)

    @PROPERTY_SETTINGS
    @given(raw=_BATCH)
    def test_idempotent(self, raw: list[str]) -> None:
        try:
            once = normalize_cids(raw)
        except ValueError:
            return
        assert normalize_cids(once) == once

    @PROPERTY_SETTINGS
    @given(blanks=st.lists(st.sampled_from(["", " ", "\t", "  \n "]), max_size=10))
    def test_all_whitespace_rejected(self, blanks: list[str]) -> None:
        with pytest.raises(ValueError, match="At least one non-empty CID"):
            normalize_cids(blanks)
