"""LocationEngine — the single entry point the address forms use.

Wires a DatasetIndex to the hierarchy and pincode resolvers and hands out
SelectionCoordinators bound to them.

Usage::

    from estateloc.location import get_engine

    engine = get_engine()
    await engine.initialize()
    engine.get_districts("Karnataka")
    records = engine.search("5600")
    coordinator = engine.coordinator()
    coordinator.set_from_pincode(records[0])
"""
from __future__ import annotations

from functools import lru_cache
from typing import Optional

from estateloc.config import Settings, get_settings
from estateloc.location.hierarchy import HierarchyResolver
from estateloc.location.index import DatasetIndex, RecordSource
from estateloc.location.models import (
    DatasetStats,
    LocationLevel,
    LocationMatch,
    PincodeRecord,
    PincodeValidation,
    Selection,
)
from estateloc.location.pincode import PincodeResolver
from estateloc.location.selection import SelectionCoordinator
from estateloc.location.sources import source_from_settings


class LocationEngine:
    """Read-only location index plus the resolvers built on it."""

    def __init__(self, source: RecordSource, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self.index = DatasetIndex(source)
        self.hierarchy = HierarchyResolver(self.index, self.settings)
        self.pincodes = PincodeResolver(self.index, self.settings)

    @classmethod
    def from_settings(cls, settings: Settings) -> "LocationEngine":
        """Build an engine reading the dataset configured in *settings*.

        Raises:
            DatasetLoadError: Neither a dataset URL nor a path is configured.
        """
        return cls(source_from_settings(settings), settings)

    @property
    def is_ready(self) -> bool:
        return self.index.is_ready

    async def initialize(self) -> None:
        """Load the dataset once. See DatasetIndex.initialize."""
        await self.index.initialize()

    # -----------------------------------------------------------------------
    # Forward queries
    # -----------------------------------------------------------------------

    def get_states(self) -> list[str]:
        return self.hierarchy.get_states()

    def get_districts(self, state: str | None) -> list[str]:
        return self.hierarchy.get_districts(state)

    def get_cities(self, state: str | None, district: str | None) -> list[str]:
        return self.hierarchy.get_cities(state, district)

    def search_locations(
        self,
        query: str,
        level: LocationLevel | None = None,
        limit: int | None = None,
    ) -> list[LocationMatch]:
        return self.hierarchy.search_locations(query, level, limit)

    def suggest(
        self,
        level: LocationLevel,
        query: str = "",
        state: str | None = None,
        district: str | None = None,
        limit: int | None = None,
    ) -> list[LocationMatch]:
        return self.hierarchy.suggest(level, query, state, district, limit)

    def format_address(self, selection: Selection) -> str:
        return self.hierarchy.format_address(selection)

    # -----------------------------------------------------------------------
    # Reverse queries
    # -----------------------------------------------------------------------

    def search(
        self,
        query: str,
        state: str | None = None,
        district: str | None = None,
    ) -> list[PincodeRecord]:
        return self.pincodes.search(query, state=state, district=district)

    def best_match(self, pincode: str) -> Optional[PincodeRecord]:
        return self.pincodes.best_match(pincode)

    def validate_pincode(self, pincode: str) -> PincodeValidation:
        return self.pincodes.validate(pincode)

    def pincodes_for_state(self, state: str, limit: int = 50) -> list[str]:
        return self.index.pincodes_for_state(state, limit)

    def pincodes_for_district(self, state: str, district: str, limit: int = 30) -> list[str]:
        return self.index.pincodes_for_district(state, district, limit)

    def stats(self) -> DatasetStats:
        return self.index.stats()

    # -----------------------------------------------------------------------
    # Selections
    # -----------------------------------------------------------------------

    def coordinator(self) -> SelectionCoordinator:
        """A fresh, empty selection bound to this engine's index."""
        return SelectionCoordinator(self.hierarchy)


@lru_cache
def get_engine() -> LocationEngine:
    """Return the process-wide engine built from ``get_settings()``.

    Cached so every form shares one index; call ``initialize()`` on it once
    at startup.
    """
    return LocationEngine.from_settings(get_settings())
