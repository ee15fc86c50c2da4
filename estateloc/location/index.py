"""DatasetIndex — in-memory state → district → city → pincode index.

The index is built once by ``initialize()`` and never mutated afterwards.
Until that call succeeds every query answers as if the dataset were empty,
and ``is_ready`` is False.

Lookup structures (all keyed by ``normalise_key`` of the names):
  _states     state key → display name
  _districts  state key → {district key → display name}
  _cities     (state key, district key) → {city key → display name}
  _by_prefix  pincode prefix (1-6 digits) → records ordered by sort_key()
"""
from __future__ import annotations

import asyncio
import inspect
import logging
from collections import defaultdict
from typing import Any, Awaitable, Callable, Iterable, Mapping, Union

from pydantic import ValidationError

from estateloc.location.errors import DatasetLoadError
from estateloc.location.models import (
    DatasetStats,
    PincodeRecord,
    RawLocationRecord,
    normalise_key,
)

logger = logging.getLogger(__name__)

RecordIterable = Iterable[Mapping[str, Any]]
RecordSource = Union[
    RecordIterable,
    Callable[[], RecordIterable],
    Callable[[], Awaitable[RecordIterable]],
]

PINCODE_LENGTH = 6


def _sorted_names(names: Iterable[str]) -> list[str]:
    return sorted(names, key=lambda n: (normalise_key(n), n))


class DatasetIndex:
    """Immutable hierarchical index over a pincode directory.

    Usage::

        index = DatasetIndex(JsonFileRecordSource("pincodes.json"))
        await index.initialize()
        index.states()
    """

    def __init__(self, source: RecordSource) -> None:
        self._source = source
        self._lock = asyncio.Lock()
        self._ready = False
        self._reset()

    def _reset(self) -> None:
        self._states: dict[str, str] = {}
        self._districts: dict[str, dict[str, str]] = {}
        self._cities: dict[tuple[str, str], dict[str, str]] = {}
        self._by_prefix: dict[str, list[PincodeRecord]] = {}
        self._record_count = 0

    # -----------------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------------

    @property
    def is_ready(self) -> bool:
        """True once initialize() has completed successfully."""
        return self._ready

    async def initialize(self) -> None:
        """Load the source and build every index in one pass.

        Idempotent: once built, further calls return immediately. Concurrent
        callers wait for the same build.

        Raises:
            DatasetLoadError: Source failed, returned something that is not a
                sequence of mappings, or contained an invalid record. The
                index stays uninitialized and the call may be retried.
        """
        if self._ready:
            logger.debug("Location index already built; skipping")
            return
        async with self._lock:
            if self._ready:
                return
            try:
                raw = await self._load_source()
                self._build(raw)
            except DatasetLoadError as exc:
                self._reset()
                logger.warning("Location dataset failed to load: %s", exc)
                raise
            self._ready = True
        logger.info(
            "Loaded %d location records (%d pincodes, %d states)",
            self._record_count,
            self._unique_pincode_count(),
            len(self._states),
        )

    async def _load_source(self) -> list[Any]:
        source = self._source
        try:
            result = source() if callable(source) else source
            if inspect.isawaitable(result):
                result = await result
        except DatasetLoadError:
            raise
        except Exception as exc:
            raise DatasetLoadError(f"Record source failed: {exc}") from exc

        if result is None or isinstance(result, (str, bytes, Mapping)):
            raise DatasetLoadError("Record source must yield a sequence of records")
        try:
            return list(result)
        except TypeError as exc:
            raise DatasetLoadError("Record source must yield a sequence of records") from exc

    def _build(self, raw_records: list[Any]) -> None:
        states: dict[str, str] = {}
        districts: dict[str, dict[str, str]] = defaultdict(dict)
        cities: dict[tuple[str, str], dict[str, str]] = defaultdict(dict)
        by_prefix: dict[str, list[PincodeRecord]] = defaultdict(list)

        for position, raw in enumerate(raw_records):
            if not isinstance(raw, Mapping):
                raise DatasetLoadError(f"Record {position} is not a mapping: {raw!r}")
            try:
                record = RawLocationRecord.model_validate(raw).to_pincode_record()
            except ValidationError as exc:
                raise DatasetLoadError(f"Record {position} is malformed: {exc}") from exc

            state_key = normalise_key(record.state)
            district_key = normalise_key(record.district)
            city_key = normalise_key(record.city)

            # Records carry the display names chosen by the first occurrence.
            record = record.model_copy(
                update={
                    "state": states.setdefault(state_key, record.state),
                    "district": districts[state_key].setdefault(district_key, record.district),
                    "city": cities[(state_key, district_key)].setdefault(city_key, record.city),
                }
            )
            for length in range(1, PINCODE_LENGTH + 1):
                by_prefix[record.pincode[:length]].append(record)

        for bucket in by_prefix.values():
            bucket.sort(key=PincodeRecord.sort_key)

        self._states = states
        self._districts = dict(districts)
        self._cities = dict(cities)
        self._by_prefix = dict(by_prefix)
        self._record_count = len(raw_records)

    def _unique_pincode_count(self) -> int:
        return sum(1 for key in self._by_prefix if len(key) == PINCODE_LENGTH)

    # -----------------------------------------------------------------------
    # Hierarchy lookups
    # -----------------------------------------------------------------------

    def states(self) -> list[str]:
        """All state names, sorted case-insensitively."""
        return _sorted_names(self._states.values())

    def districts(self, state: str | None) -> list[str]:
        """Districts of *state*, sorted; empty when the state is unknown."""
        if not state:
            return []
        names = self._districts.get(normalise_key(state), {})
        return _sorted_names(names.values())

    def cities(self, state: str | None, district: str | None) -> list[str]:
        """Cities of the (state, district) pair, sorted; empty when unknown."""
        if not state or not district:
            return []
        names = self._cities.get((normalise_key(state), normalise_key(district)), {})
        return _sorted_names(names.values())

    def state_name(self, state: str) -> str | None:
        """Display name of *state*, or None when unknown."""
        return self._states.get(normalise_key(state))

    def district_name(self, state: str, district: str) -> str | None:
        """Display name of *district* within *state*, or None when unknown."""
        return self._districts.get(normalise_key(state), {}).get(normalise_key(district))

    def city_name(self, state: str, district: str, city: str) -> str | None:
        """Display name of *city* within (state, district), or None when unknown."""
        key = (normalise_key(state), normalise_key(district))
        return self._cities.get(key, {}).get(normalise_key(city))

    def iter_districts(self) -> Iterable[tuple[str, str]]:
        """Yield (state, district) display-name pairs."""
        for state_key, names in self._districts.items():
            for name in names.values():
                yield self._states[state_key], name

    def iter_cities(self) -> Iterable[tuple[str, str, str]]:
        """Yield (state, district, city) display-name triples."""
        for (state_key, district_key), names in self._cities.items():
            state = self._states[state_key]
            district = self._districts[state_key][district_key]
            for name in names.values():
                yield state, district, name

    # -----------------------------------------------------------------------
    # Pincode lookups
    # -----------------------------------------------------------------------

    def records_with_prefix(self, prefix: str, limit: int | None = None) -> list[PincodeRecord]:
        """Records whose pincode starts with *prefix*, in sort_key() order.

        With *limit*, only the first *limit* records of the bucket are copied.
        """
        return self._by_prefix.get(prefix, [])[:limit]

    def records_for(self, pincode: str) -> list[PincodeRecord]:
        """Every record carrying exactly *pincode*."""
        if len(pincode) != PINCODE_LENGTH:
            return []
        return self.records_with_prefix(pincode)

    def pincodes_for_state(self, state: str, limit: int = 50) -> list[str]:
        """Distinct pincodes within *state*, ascending, at most *limit*."""
        state_key = normalise_key(state)
        return self._pincodes_where(
            lambda r: normalise_key(r.state) == state_key, limit
        )

    def pincodes_for_district(self, state: str, district: str, limit: int = 30) -> list[str]:
        """Distinct pincodes within (state, district), ascending, at most *limit*."""
        state_key = normalise_key(state)
        district_key = normalise_key(district)
        return self._pincodes_where(
            lambda r: normalise_key(r.state) == state_key
            and normalise_key(r.district) == district_key,
            limit,
        )

    def _pincodes_where(self, predicate: Callable[[PincodeRecord], bool], limit: int) -> list[str]:
        found: list[str] = []
        for pincode in sorted(k for k in self._by_prefix if len(k) == PINCODE_LENGTH):
            if len(found) >= limit:
                break
            if any(predicate(r) for r in self._by_prefix[pincode]):
                found.append(pincode)
        return found

    def stats(self) -> DatasetStats:
        """Record and entity counts for the loaded dataset."""
        return DatasetStats(
            total_records=self._record_count,
            total_pincodes=self._unique_pincode_count(),
            total_states=len(self._states),
            total_districts=sum(len(d) for d in self._districts.values()),
            total_cities=sum(len(c) for c in self._cities.values()),
        )
