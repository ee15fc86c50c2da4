"""Pydantic v2 models for the location engine.

Raw input records tolerate the field names of the data.gov.in all-India
pincode directory (``statename``, ``officename`` ...) alongside the plain
names, and ignore undocumented keys. Everything the engine hands back to
callers is frozen.

Hierarchy:
  Input
    RawLocationRecord   -- one source row, validated and normalised

  Values returned to callers
    PincodeRecord       -- pincode + (state, district, city) + locality
    Selection           -- in-progress address selection
    SelectionLevel      -- how far down the hierarchy a Selection reaches
    LocationLevel       -- state / district / city, for name search
    LocationMatch       -- a name-search hit
    PincodeValidation   -- format + existence check result
    DatasetStats        -- index size summary
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

PINCODE_PATTERN = re.compile(r"[0-9]{6}")


def normalise_key(name: str) -> str:
    """Return the case-insensitive lookup key for a location name."""
    return " ".join(name.split()).casefold()


# ---------------------------------------------------------------------------
# Input records
# ---------------------------------------------------------------------------


class RawLocationRecord(BaseModel):
    """A single source row as supplied by the record source."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    state: str = Field(validation_alias=AliasChoices("state", "statename", "state_name"))
    district: str = Field(validation_alias=AliasChoices("district", "districtname"))
    city: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("city", "cityname", "taluk")
    )
    pincode: str = Field(validation_alias=AliasChoices("pincode", "pin", "postal_code"))
    locality: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("locality", "officename", "area")
    )

    @field_validator("state", "district", mode="before")
    @classmethod
    def _require_name(cls, v: object) -> str:
        text = " ".join(str(v).split()) if v is not None else ""
        if not text:
            raise ValueError("name must not be blank")
        return text

    @field_validator("city", "locality", mode="before")
    @classmethod
    def _optional_text(cls, v: object) -> Optional[str]:
        if v is None:
            return None
        text = " ".join(str(v).split())
        return text or None

    @field_validator("pincode", mode="before")
    @classmethod
    def _coerce_pincode(cls, v: object) -> str:
        if isinstance(v, bool):
            raise ValueError("pincode must be 6 digits")
        text = str(v).strip() if v is not None else ""
        if not PINCODE_PATTERN.fullmatch(text):
            raise ValueError(f"pincode must be 6 digits, got {v!r}")
        return text

    def to_pincode_record(self) -> "PincodeRecord":
        """Convert to a PincodeRecord, using the district when no city is given."""
        return PincodeRecord(
            pincode=self.pincode,
            state=self.state,
            district=self.district,
            city=self.city or self.district,
            locality=self.locality,
        )


# ---------------------------------------------------------------------------
# Values handed to callers
# ---------------------------------------------------------------------------


class PincodeRecord(BaseModel):
    """A postal code and the location tuple it belongs to."""

    model_config = ConfigDict(frozen=True)

    pincode: str = Field(pattern=r"^[0-9]{6}$")
    state: str
    district: str
    city: str
    locality: Optional[str] = None

    @property
    def display_name(self) -> str:
        """Suggestion label, e.g. ``"560100 - Electronic City, Bengaluru Urban"``."""
        place = self.locality or self.city
        return f"{self.pincode} - {place}, {self.district}"

    def sort_key(self) -> tuple[str, str, str, str, str]:
        """Ordering for search results: code, then city, locality, district, state."""
        return (
            self.pincode,
            normalise_key(self.city),
            normalise_key(self.locality or ""),
            normalise_key(self.district),
            normalise_key(self.state),
        )


class SelectionLevel(int, Enum):
    """Consistency levels of an address selection, shallowest first."""

    NONE = 0
    STATE = 1
    DISTRICT = 2
    CITY = 3
    RESOLVED = 4


class Selection(BaseModel):
    """An address selection. Each field is only set when its parent is."""

    model_config = ConfigDict(frozen=True)

    state: Optional[str] = None
    district: Optional[str] = None
    city: Optional[str] = None
    pincode: Optional[str] = None

    @model_validator(mode="after")
    def _check_chain(self) -> "Selection":
        chain = [self.state, self.district, self.city, self.pincode]
        seen_gap = False
        for value in chain:
            if value is None:
                seen_gap = True
            elif seen_gap:
                raise ValueError("selection fields must be filled top-down")
        return self

    @property
    def level(self) -> SelectionLevel:
        """How far down the hierarchy this selection reaches."""
        filled = sum(v is not None for v in (self.state, self.district, self.city, self.pincode))
        return SelectionLevel(filled)


class LocationLevel(str, Enum):
    """Hierarchy level of a named location."""

    state = "state"
    district = "district"
    city = "city"


class LocationMatch(BaseModel):
    """A name-search hit with enough context to seed a selection."""

    model_config = ConfigDict(frozen=True)

    name: str
    level: LocationLevel
    state: str
    district: Optional[str] = None
    score: float = 100.0

    @property
    def full_path(self) -> str:
        parts = ["India", self.state]
        if self.district is not None:
            parts.append(self.district)
        if self.level is LocationLevel.city:
            parts.append(self.name)
        return " > ".join(parts)


class PincodeValidation(BaseModel):
    """Outcome of validating a complete pincode."""

    model_config = ConfigDict(frozen=True)

    pincode: str
    valid: bool
    exists: bool
    message: str


class DatasetStats(BaseModel):
    """Counts describing a loaded dataset."""

    model_config = ConfigDict(frozen=True)

    total_records: int = 0
    total_pincodes: int = 0
    total_states: int = 0
    total_districts: int = 0
    total_cities: int = 0
