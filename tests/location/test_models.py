"""Tests for the location pydantic models."""
import pytest
from pydantic import ValidationError

from estateloc.location.models import (
    LocationLevel,
    LocationMatch,
    PincodeRecord,
    RawLocationRecord,
    Selection,
    SelectionLevel,
    normalise_key,
)


class TestRawLocationRecord:
    def test_plain_field_names(self):
        """Plain keys validate and strip surrounding whitespace."""
        raw = RawLocationRecord.model_validate(
            {"state": " Karnataka ", "district": "Bengaluru  Urban", "city": "Bengaluru", "pincode": "560001"}
        )
        assert raw.state == "Karnataka"
        assert raw.district == "Bengaluru Urban"
        assert raw.locality is None

    def test_data_gov_in_aliases(self):
        """statename / officename keys from the public directory are accepted."""
        raw = RawLocationRecord.model_validate(
            {"statename": "Bihar", "district": "Patna", "officename": "Patna GPO", "pincode": 800001}
        )
        assert raw.state == "Bihar"
        assert raw.locality == "Patna GPO"
        assert raw.pincode == "800001"

    def test_missing_city_falls_back_to_district(self):
        """A row without a city is indexed under its district name."""
        raw = RawLocationRecord.model_validate(
            {"state": "Bihar", "district": "Patna", "pincode": "800001"}
        )
        assert raw.to_pincode_record().city == "Patna"

    def test_unknown_keys_ignored(self):
        raw = RawLocationRecord.model_validate(
            {"state": "Bihar", "district": "Patna", "pincode": "800001", "delivery": "Delivery"}
        )
        assert not hasattr(raw, "delivery")

    @pytest.mark.parametrize("pincode", ["56000", "5600011", "56O001", "", None, True])
    def test_bad_pincode_rejected(self, pincode):
        with pytest.raises(ValidationError):
            RawLocationRecord.model_validate(
                {"state": "Karnataka", "district": "Mysuru", "pincode": pincode}
            )

    def test_blank_state_rejected(self):
        with pytest.raises(ValidationError):
            RawLocationRecord.model_validate(
                {"state": "  ", "district": "Mysuru", "pincode": "570001"}
            )


class TestPincodeRecord:
    def test_frozen(self):
        record = PincodeRecord(pincode="560001", state="Karnataka", district="Bengaluru Urban", city="Bengaluru")
        with pytest.raises(ValidationError):
            record.city = "Mysuru"

    def test_display_name_prefers_locality(self):
        record = PincodeRecord(
            pincode="560100",
            state="Karnataka",
            district="Bengaluru Urban",
            city="Bengaluru",
            locality="Electronic City",
        )
        assert record.display_name == "560100 - Electronic City, Bengaluru Urban"


class TestSelection:
    def test_empty_selection_level(self):
        assert Selection().level is SelectionLevel.NONE

    def test_resolved_level(self):
        selection = Selection(state="Karnataka", district="Mysuru", city="Mysuru", pincode="570001")
        assert selection.level is SelectionLevel.RESOLVED

    def test_gap_in_chain_rejected(self):
        """A district without a state can never be constructed."""
        with pytest.raises(ValidationError):
            Selection(district="Mysuru")


class TestLocationMatch:
    def test_city_full_path(self):
        match = LocationMatch(
            name="Bengaluru", level=LocationLevel.city, state="Karnataka", district="Bengaluru Urban"
        )
        assert match.full_path == "India > Karnataka > Bengaluru Urban > Bengaluru"

    def test_state_full_path(self):
        match = LocationMatch(name="Karnataka", level=LocationLevel.state, state="Karnataka")
        assert match.full_path == "India > Karnataka"


def test_normalise_key_is_case_and_space_insensitive():
    assert normalise_key("  Bengaluru   URBAN ") == normalise_key("bengaluru urban")
