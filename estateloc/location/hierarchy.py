"""Forward cascading queries and name search over a DatasetIndex."""
from __future__ import annotations

from typing import Optional

from rapidfuzz import fuzz, process

from estateloc.config import Settings
from estateloc.location.index import DatasetIndex
from estateloc.location.models import (
    LocationLevel,
    LocationMatch,
    Selection,
    normalise_key,
)

MIN_NAME_QUERY_LENGTH = 2


class HierarchyResolver:
    """State → districts → cities, answered straight from the index.

    Unknown or empty keys give empty lists, never errors.
    """

    def __init__(self, index: DatasetIndex, settings: Settings) -> None:
        self._index = index
        self._search_limit = settings.location_search_limit
        self._suggestion_limit = settings.location_suggestion_limit
        self._fuzzy_threshold = settings.fuzzy_match_threshold

    def get_states(self) -> list[str]:
        return self._index.states()

    def get_districts(self, state: str | None) -> list[str]:
        return self._index.districts(state)

    def get_cities(self, state: str | None, district: str | None) -> list[str]:
        return self._index.cities(state, district)

    # -----------------------------------------------------------------------
    # Canonical names
    # -----------------------------------------------------------------------

    def canonical_state(self, name: str | None) -> Optional[str]:
        """Dataset spelling of *name*, matched case-insensitively."""
        if not name:
            return None
        return self._index.state_name(name)

    def canonical_district(self, state: str | None, name: str | None) -> Optional[str]:
        if not state or not name:
            return None
        return self._index.district_name(state, name)

    def canonical_city(
        self, state: str | None, district: str | None, name: str | None
    ) -> Optional[str]:
        if not state or not district or not name:
            return None
        return self._index.city_name(state, district, name)

    # -----------------------------------------------------------------------
    # Name search
    # -----------------------------------------------------------------------

    def _candidates(self, level: LocationLevel | None) -> list[LocationMatch]:
        found: list[LocationMatch] = []
        if level in (None, LocationLevel.state):
            found.extend(
                LocationMatch(name=s, level=LocationLevel.state, state=s)
                for s in self._index.states()
            )
        if level in (None, LocationLevel.district):
            found.extend(
                LocationMatch(name=d, level=LocationLevel.district, state=s, district=d)
                for s, d in self._index.iter_districts()
            )
        if level in (None, LocationLevel.city):
            found.extend(
                LocationMatch(name=c, level=LocationLevel.city, state=s, district=d)
                for s, d, c in self._index.iter_cities()
            )
        return found

    def search_locations(
        self,
        query: str,
        level: LocationLevel | None = None,
        limit: int | None = None,
    ) -> list[LocationMatch]:
        """Autocomplete state, district and city names.

        Substring matches win: exact names first, then alphabetical. When
        nothing contains the query, names scoring at least
        ``fuzzy_match_threshold`` with rapidfuzz's WRatio are returned,
        best score first.

        Args:
            query: Free text typed by the user; fewer than two characters
                returns nothing.
            level: Restrict to one hierarchy level.
            limit: Maximum number of hits (defaults to location_search_limit).

        Returns:
            List of LocationMatch, possibly empty.
        """
        term = normalise_key(query or "")
        if len(term) < MIN_NAME_QUERY_LENGTH:
            return []
        limit = self._search_limit if limit is None else limit
        candidates = self._candidates(level)

        substring_hits = [c for c in candidates if term in normalise_key(c.name)]
        if substring_hits:
            substring_hits.sort(
                key=lambda c: (normalise_key(c.name) != term, normalise_key(c.name), c.full_path)
            )
            return substring_hits[:limit]

        keys = [normalise_key(c.name) for c in candidates]
        scored = process.extract(
            term,
            keys,
            scorer=fuzz.WRatio,
            limit=None,
            score_cutoff=self._fuzzy_threshold,
        )
        fuzzy_hits = [
            candidates[position].model_copy(update={"score": float(score)})
            for _, score, position in scored
        ]
        fuzzy_hits.sort(key=lambda c: (-c.score, normalise_key(c.name), c.full_path))
        return fuzzy_hits[:limit]

    def _children(
        self, level: LocationLevel, state: str | None, district: str | None
    ) -> list[LocationMatch]:
        if level is LocationLevel.state:
            return [
                LocationMatch(name=s, level=level, state=s) for s in self._index.states()
            ]
        state_name = self.canonical_state(state)
        if state_name is None:
            return []
        if level is LocationLevel.district:
            return [
                LocationMatch(name=d, level=level, state=state_name, district=d)
                for d in self._index.districts(state_name)
            ]
        district_name = self.canonical_district(state_name, district)
        if district_name is None:
            return []
        return [
            LocationMatch(name=c, level=level, state=state_name, district=district_name)
            for c in self._index.cities(state_name, district_name)
        ]

    def suggest(
        self,
        level: LocationLevel,
        query: str = "",
        state: str | None = None,
        district: str | None = None,
        limit: int | None = None,
    ) -> list[LocationMatch]:
        """Dropdown suggestions for one level, scoped to its parent.

        Districts need *state* and cities need both *state* and *district*;
        a missing or unknown parent gives an empty list. With an empty
        *query* every child is returned in name order. Otherwise names
        containing the query are returned, exact match first, capped at
        *limit* (defaults to location_suggestion_limit).
        """
        level = LocationLevel(level)
        children = self._children(level, state, district)
        term = normalise_key(query or "")
        if not term:
            return children
        limit = self._suggestion_limit if limit is None else limit
        hits = [c for c in children if term in normalise_key(c.name)]
        hits.sort(key=lambda c: (normalise_key(c.name) != term, normalise_key(c.name)))
        return hits[:limit]

    @staticmethod
    def format_address(selection: Selection) -> str:
        """Render a selection as ``"City, District, State, India - Pincode"``."""
        parts = [p for p in (selection.city, selection.district, selection.state) if p]
        if not parts:
            return ""
        text = ", ".join(parts + ["India"])
        if selection.pincode:
            text = f"{text} - {selection.pincode}"
        return text
