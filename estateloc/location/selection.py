"""SelectionCoordinator — one in-progress address selection kept consistent.

Every stored district is one of ``get_districts(state)`` and every stored
city one of ``get_cities(state, district)``. Setting a field clears all
fields below it; ``set_from_pincode`` fills all four at once from a record
the index produced.

Each mutation builds a complete new Selection and swaps it in, so observers
and readers never see a half-updated combination.
"""
from __future__ import annotations

import logging
from typing import Callable

from estateloc.location.errors import InvalidSelectionError
from estateloc.location.hierarchy import HierarchyResolver
from estateloc.location.models import PincodeRecord, Selection, SelectionLevel

logger = logging.getLogger(__name__)

SelectionListener = Callable[[Selection, Selection], None]


class SelectionCoordinator:
    """Cascading state → district → city selection with pincode reverse fill.

    Usage::

        coordinator = engine.coordinator()
        unsubscribe = coordinator.subscribe(lambda old, new: form.refresh(new))
        coordinator.set_state("Karnataka")
        coordinator.set_district("Bengaluru Urban")

    Listeners receive ``(previous, current)`` after each mutation that
    changes the selection.
    """

    def __init__(self, hierarchy: HierarchyResolver) -> None:
        self._hierarchy = hierarchy
        self._selection = Selection()
        self._listeners: list[SelectionListener] = []

    @property
    def selection(self) -> Selection:
        return self._selection

    @property
    def level(self) -> SelectionLevel:
        return self._selection.level

    def subscribe(self, listener: SelectionListener) -> Callable[[], None]:
        """Register *listener*; returns a function that removes it again."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _commit(self, selection: Selection) -> Selection:
        """Swap in *selection* and notify every listener if it changed.

        A listener that raises does not stop the others from being told;
        the first such exception is re-raised once all have run. The new
        selection stays committed either way.
        """
        previous = self._selection
        self._selection = selection
        if selection == previous:
            return selection
        logger.debug("Selection %s -> %s", previous.level.name, selection.level.name)
        failure: Exception | None = None
        for listener in list(self._listeners):
            try:
                listener(previous, selection)
            except Exception as exc:
                logger.exception("Selection listener %r failed", listener)
                if failure is None:
                    failure = exc
        if failure is not None:
            raise failure
        return selection

    # -----------------------------------------------------------------------
    # Mutations
    # -----------------------------------------------------------------------

    def clear(self) -> Selection:
        return self._commit(Selection())

    def set_state(self, state: str | None) -> Selection:
        """Select *state* and drop district, city and pincode.

        ``None`` or ``""`` clears the whole selection.

        Raises:
            InvalidSelectionError: State is not in the dataset.
        """
        if not state:
            return self.clear()
        canonical = self._hierarchy.canonical_state(state)
        if canonical is None:
            raise InvalidSelectionError(f"Unknown state {state!r}")
        return self._commit(Selection(state=canonical))

    def set_district(self, district: str) -> Selection:
        """Select *district* within the current state and drop city and pincode.

        Raises:
            InvalidSelectionError: No state is selected, or the district does
                not belong to it.
        """
        current = self._selection
        if current.state is None:
            raise InvalidSelectionError("Select a state before choosing a district")
        canonical = self._hierarchy.canonical_district(current.state, district)
        if canonical is None:
            raise InvalidSelectionError(
                f"District {district!r} is not in state {current.state!r}"
            )
        return self._commit(Selection(state=current.state, district=canonical))

    def set_city(self, city: str) -> Selection:
        """Select *city* within the current district and drop the pincode.

        Raises:
            InvalidSelectionError: State or district missing, or the city does
                not belong to the pair.
        """
        current = self._selection
        if current.state is None or current.district is None:
            raise InvalidSelectionError("Select a state and district before choosing a city")
        canonical = self._hierarchy.canonical_city(current.state, current.district, city)
        if canonical is None:
            raise InvalidSelectionError(
                f"City {city!r} is not in {current.district!r}, {current.state!r}"
            )
        return self._commit(
            Selection(state=current.state, district=current.district, city=canonical)
        )

    def set_from_pincode(self, record: PincodeRecord) -> Selection:
        """Fill state, district, city and pincode from *record* in one step."""
        return self._commit(
            Selection(
                state=record.state,
                district=record.district,
                city=record.city,
                pincode=record.pincode,
            )
        )
