"""Tests for LocationEngine wiring and the process-wide get_engine()."""
import json

import pytest

from estateloc.config import Settings, get_settings
from estateloc.location.engine import LocationEngine, get_engine
from estateloc.location.errors import DatasetLoadError
from estateloc.location.sources import JsonFileRecordSource

KARNATAKA = [
    {"state": "Karnataka", "district": "Bengaluru Urban", "city": "Bengaluru", "pincode": "560001"},
    {
        "state": "Karnataka",
        "district": "Bengaluru Urban",
        "city": "Bengaluru",
        "pincode": "560100",
        "locality": "Electronic City",
    },
]


@pytest.fixture
def clear_caches():
    get_settings.cache_clear()
    get_engine.cache_clear()
    yield
    get_settings.cache_clear()
    get_engine.cache_clear()


class TestLocationEngine:
    @pytest.mark.asyncio
    async def test_karnataka_scenario(self, settings):
        engine = LocationEngine(KARNATAKA, settings)
        assert engine.is_ready is False

        await engine.initialize()

        assert engine.is_ready is True
        assert [r.pincode for r in engine.search("560")] == ["560001", "560100"]
        assert len(engine.search("560001")) == 1
        assert "Bengaluru Urban" in engine.get_districts("Karnataka")

        coordinator = engine.coordinator()
        coordinator.set_from_pincode(engine.search("560")[1])
        assert coordinator.selection.model_dump() == {
            "state": "Karnataka",
            "district": "Bengaluru Urban",
            "city": "Bengaluru",
            "pincode": "560100",
        }

    def test_coordinators_are_independent(self, engine):
        first = engine.coordinator()
        second = engine.coordinator()
        first.set_state("Bihar")
        assert second.selection.state is None

    def test_stats_and_pincode_listing(self, engine):
        assert engine.stats().total_states == 3
        assert engine.pincodes_for_state("Maharashtra") == ["400001", "431107"]
        assert engine.pincodes_for_district("Maharashtra", "Mumbai") == ["400001"]

    def test_from_settings_uses_file(self, tmp_path):
        path = tmp_path / "pincodes.json"
        path.write_text(json.dumps(KARNATAKA), encoding="utf-8")
        engine = LocationEngine.from_settings(Settings(location_dataset_path=path))
        assert isinstance(engine.index._source, JsonFileRecordSource)


class TestGetEngine:
    @pytest.mark.asyncio
    async def test_reads_dataset_from_environment(self, tmp_path, monkeypatch, clear_caches):
        path = tmp_path / "pincodes.json"
        path.write_text(json.dumps({"records": KARNATAKA}), encoding="utf-8")
        monkeypatch.setenv("LOCATION_DATASET_PATH", str(path))
        monkeypatch.delenv("LOCATION_DATASET_URL", raising=False)

        engine = get_engine()
        await engine.initialize()

        assert engine is get_engine()
        assert engine.get_states() == ["Karnataka"]

    def test_unconfigured_dataset_fails(self, monkeypatch, clear_caches):
        monkeypatch.delenv("LOCATION_DATASET_PATH", raising=False)
        monkeypatch.delenv("LOCATION_DATASET_URL", raising=False)
        with pytest.raises(DatasetLoadError):
            get_engine()
