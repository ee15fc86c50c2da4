"""Location resolution engine: state → district → city → pincode."""

from .engine import LocationEngine, get_engine
from .errors import (
    DatasetLoadError,
    InvalidQueryError,
    InvalidSelectionError,
    LocationError,
)
from .hierarchy import HierarchyResolver
from .index import DatasetIndex
from .models import (
    DatasetStats,
    LocationLevel,
    LocationMatch,
    PincodeRecord,
    PincodeValidation,
    Selection,
    SelectionLevel,
)
from .pincode import PincodeResolver
from .selection import SelectionCoordinator
from .sources import (
    HttpRecordSource,
    JsonFileRecordSource,
    StaticRecordSource,
    source_from_settings,
)

__all__ = [
    "DatasetIndex",
    "DatasetLoadError",
    "DatasetStats",
    "HierarchyResolver",
    "HttpRecordSource",
    "InvalidQueryError",
    "InvalidSelectionError",
    "JsonFileRecordSource",
    "LocationEngine",
    "LocationError",
    "LocationLevel",
    "LocationMatch",
    "PincodeRecord",
    "PincodeResolver",
    "PincodeValidation",
    "Selection",
    "SelectionCoordinator",
    "SelectionLevel",
    "StaticRecordSource",
    "get_engine",
    "source_from_settings",
]
