"""Pincode resolution: partial or complete postal code → candidate records.

Query rules
-----------
- 1-5 digits: prefix search, ascending by pincode, capped at
  ``Settings.pincode_search_limit``.
- 6 digits: every record sharing the code (one pincode can cover several
  localities), ordered by city then locality. Not capped.
- Anything else (empty, non-digit, 7+ characters) raises InvalidQueryError.
  Input is never trimmed or truncated here; sanitising keystrokes is the
  caller's job.
"""
from __future__ import annotations

import re
from typing import Optional

from estateloc.config import Settings
from estateloc.location.errors import InvalidQueryError
from estateloc.location.index import PINCODE_LENGTH, DatasetIndex
from estateloc.location.models import PincodeRecord, PincodeValidation, normalise_key

_QUERY_PATTERN = re.compile(r"[0-9]{1,6}")
# Indian pincodes never start with 0.
_VALID_PINCODE_PATTERN = re.compile(r"[1-9][0-9]{5}")


def check_query(query: str) -> str:
    """Return *query* unchanged if it is 1-6 ASCII digits.

    Raises:
        InvalidQueryError: For anything else.
    """
    if not isinstance(query, str) or not _QUERY_PATTERN.fullmatch(query):
        raise InvalidQueryError(f"Pincode query must be 1-6 digits, got {query!r}")
    return query


class PincodeResolver:
    def __init__(self, index: DatasetIndex, settings: Settings) -> None:
        self._index = index
        self._limit = settings.pincode_search_limit

    def search(
        self,
        query: str,
        state: str | None = None,
        district: str | None = None,
    ) -> list[PincodeRecord]:
        """Return ranked records for a full or partial pincode.

        Args:
            query: 1-6 digits.
            state: Optional state to narrow results to (case-insensitive).
            district: Optional district to narrow results to.

        Returns:
            Matching records; empty when the pincode is unknown or the index
            is not loaded yet.

        Raises:
            InvalidQueryError: Query is empty, non-numeric or too long.
        """
        check_query(query)
        limit = self._limit if len(query) < PINCODE_LENGTH else None
        if not state and not district:
            return self._index.records_with_prefix(query, limit)

        records = self._index.records_with_prefix(query)
        if state:
            state_key = normalise_key(state)
            records = [r for r in records if normalise_key(r.state) == state_key]
        if district:
            district_key = normalise_key(district)
            records = [r for r in records if normalise_key(r.district) == district_key]

        return records[:limit]

    def best_match(self, pincode: str) -> Optional[PincodeRecord]:
        """First record of an exact search, or None when the code is unknown."""
        check_query(pincode)
        if len(pincode) != PINCODE_LENGTH:
            return None
        records = self._index.records_for(pincode)
        return records[0] if records else None

    def validate(self, pincode: str) -> PincodeValidation:
        """Check format and existence of a complete pincode. Never raises."""
        text = pincode if isinstance(pincode, str) else ""
        if not _VALID_PINCODE_PATTERN.fullmatch(text):
            return PincodeValidation(
                pincode=text,
                valid=False,
                exists=False,
                message="Pincode must be 6 digits and cannot start with 0",
            )
        records = self._index.records_for(text)
        if not records:
            return PincodeValidation(
                pincode=text,
                valid=True,
                exists=False,
                message="Valid format but pincode not found in dataset",
            )
        first = records[0]
        return PincodeValidation(
            pincode=text,
            valid=True,
            exists=True,
            message=f"Valid pincode for {first.district}, {first.state}",
        )
