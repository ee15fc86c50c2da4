"""Shared test fixtures for location engine tests."""
import asyncio

import pytest
import respx

from estateloc.config import Settings
from estateloc.location.engine import LocationEngine

TEST_SETTINGS = Settings(
    location_dataset_url=None,
    location_dataset_path=None,
    pincode_search_limit=5,
    location_search_limit=10,
    location_suggestion_limit=20,
    fuzzy_match_threshold=80.0,
    dataset_fetch_attempts=2,
    dataset_fetch_timeout=5.0,
)


@pytest.fixture
def records():
    """Small multi-state dataset.

    Covers a pincode shared by two localities (400001), a district name used
    in two states (Aurangabad), and a row with no city (falls back to its
    district).
    """
    return [
        {"state": "Karnataka", "district": "Bengaluru Urban", "city": "Bengaluru", "pincode": "560001"},
        {
            "state": "Karnataka",
            "district": "Bengaluru Urban",
            "city": "Bengaluru",
            "pincode": "560100",
            "locality": "Electronic City",
        },
        {"state": "Karnataka", "district": "Mysuru", "city": "Mysuru", "pincode": "570001"},
        {"state": "Karnataka", "district": "Mysuru", "city": "Nanjangud", "pincode": "571301"},
        {
            "state": "Maharashtra",
            "district": "Mumbai",
            "city": "Mumbai",
            "pincode": "400001",
            "locality": "Fort",
        },
        {
            "state": "Maharashtra",
            "district": "Mumbai",
            "city": "Colaba",
            "pincode": "400001",
            "locality": "Ballard Estate",
        },
        {"state": "Maharashtra", "district": "Aurangabad", "city": "Paithan", "pincode": "431107"},
        {"state": "Bihar", "district": "Aurangabad", "city": "Daudnagar", "pincode": "824113"},
        {"statename": "Bihar", "district": "Patna", "officename": "Patna GPO", "pincode": 800001},
    ]


@pytest.fixture
def settings():
    return TEST_SETTINGS


@pytest.fixture
def engine(records, settings):
    """A LocationEngine over ``records`` that has already been initialized."""
    built = LocationEngine(records, settings)
    asyncio.run(built.initialize())
    return built


@pytest.fixture
def cold_engine(records, settings):
    """A LocationEngine over ``records`` that has NOT been initialized."""
    return LocationEngine(records, settings)


@pytest.fixture
def mock_dataset_host():
    """respx router intercepting httpx calls to the dataset host."""
    with respx.mock(assert_all_called=False) as mock:
        yield mock
