# fleetrecon/tests/test_plates.py

import pytest

from fleetrecon.ingest.plates import (
    extract_license_plate, is_vehicle_incentive, normalize_driver_name, normalize_plate,
)


class TestNormalization:

    def test_normalize_plate(self):
        """Test plates are uppercased with whitespace removed"""
        assert normalize_plate(" b-mu 1234 ") == "B-MU1234"
        assert normalize_plate(None) == ""

    def test_normalize_driver_name(self):
        """Test name parts are joined with single spaces"""
        assert normalize_driver_name(" Max ", "Mustermann") == "Max Mustermann"
        assert normalize_driver_name("Anna   Lena", None, "Schmidt") == "Anna Lena Schmidt"
        assert normalize_driver_name("", "  ") is None


class TestExtractLicensePlate:
    """Plate lookup in free text payment descriptions"""

    @pytest.mark.parametrize("description, expected", [
        ("Prämie 700 Fahrten B-MU 1234", "B-MU1234"),
        ("Auszahlung für HH-AB123", "HH-AB123"),
        ("Bonus M-X 7E Fahrten", "M-X7E"),
        ("Bonus 2024-06 B-MU 1234", "B-MU1234"),
    ])
    def test_finds_plate(self, description, expected):
        """Test plates are extracted and normalized"""
        assert extract_license_plate(description) == expected

    @pytest.mark.parametrize("description", [
        None,
        "",
        "Wochenauszahlung",
        "Zahlung 3f2e19ab-cd12-4e5f-8a9b-0c1d2e3f4a5b",
        "Referenz ab-cd12-4e5f Auszahlung",
        "Trip 9f8e7d6c-ab-cd12",
    ])
    def test_rejects_missing_and_uuid_fragments(self, description):
        """Test UUID pieces that look like plates are never returned"""
        assert extract_license_plate(description) is None

    def test_incentives_only_requires_vehicle_incentive(self):
        """Test campaign text only yields a plate for vehicle based incentives"""
        assert extract_license_plate("Umsatzgarantie B-MU 1234", incentives_only=True) is None
        assert extract_license_plate("Umsatzgarantie B-MU 1234") == "B-MU1234"
        assert extract_license_plate("Aktion 250 Fahrten B-MU 1234", incentives_only=True) == "B-MU1234"

    def test_is_vehicle_incentive(self):
        assert is_vehicle_incentive("Bonus 700 Trips")
        assert is_vehicle_incentive("PRÄMIE 250 FAHRTEN")
        assert not is_vehicle_incentive("Bonus Wochenende")
        assert not is_vehicle_incentive("700 Fahrten")
