# fleetrecon/tests/test_classifier.py

import pytest

from fleetrecon.tests.conftest import (
    BOLT_PAYMENTS_HEADER, BOLT_TRIPS_HEADER, UBER_CAMPAIGN_HEADER,
    UBER_PAYMENTS_HEADER, UBER_TRIPS_HEADER, build_csv,
)
from fleetrecon.uploads.classifier import classify_content, classify_header, read_header_line
from fleetrecon.uploads.models import FileType, Platform


class TestClassifyHeader:
    """Header line to (platform, file type)"""

    @pytest.mark.parametrize("header, platform, file_type", [
        (";".join(UBER_TRIPS_HEADER), Platform.UBER, FileType.TRIPS),
        (";".join(UBER_PAYMENTS_HEADER), Platform.UBER, FileType.PAYMENTS),
        (";".join(UBER_CAMPAIGN_HEADER), Platform.UBER, FileType.CAMPAIGN),
        (";".join(BOLT_TRIPS_HEADER), Platform.BOLT, FileType.TRIPS),
        (";".join(BOLT_PAYMENTS_HEADER), Platform.BOLT, FileType.PAYMENTS),
        ("Fahrer;Kampagne;Datum;Betrag", Platform.BOLT, FileType.CAMPAIGN),
        ("Zeitpunkt;Beschreibung;Betrag", Platform.UBER, FileType.PAYMENTS),
    ])
    def test_known_headers(self, header, platform, file_type):
        """Test every supported export is recognized"""
        classification = classify_header(header)

        assert classification is not None
        assert classification.platform == platform
        assert classification.file_type == file_type

    def test_matching_is_case_insensitive(self):
        """Test header case does not matter"""
        classification = classify_header("KENNZEICHEN,FAHRTPREIS,BESTELLZEIT")

        assert classification.platform == Platform.BOLT
        assert classification.file_type == FileType.TRIPS

    def test_first_rule_wins(self):
        """Test a header matching several rules takes the earliest one"""
        classification = classify_header("Kennzeichen;Fahrtpreis;Zeitpunkt der Fahrtbestellung")

        assert classification.platform == Platform.BOLT
        assert classification.file_type == FileType.TRIPS

    @pytest.mark.parametrize("header", [None, "", "   ", "\ufeff", "foo;bar;baz"])
    def test_unrecognized_headers_return_none(self, header):
        """Test empty and unknown headers are not classified"""
        assert classify_header(header) is None


class TestClassifyContent:
    """Classification from raw file bytes"""

    def test_bom_is_stripped(self):
        """Test a UTF-8 BOM in front of the header is ignored"""
        content = build_csv(BOLT_PAYMENTS_HEADER, [])

        assert content.startswith("\ufeff".encode("utf-8"))
        classification = classify_content(content)
        assert classification.platform == Platform.BOLT
        assert classification.file_type == FileType.PAYMENTS

    def test_reads_only_first_line(self):
        """Test data rows never influence the classification"""
        content = b"Spalte A;Spalte B\r\nKennzeichen;Fahrtpreis\r\n"

        assert read_header_line(content) == "Spalte A;Spalte B"
        assert classify_content(content) is None

    def test_empty_file(self):
        """Test an empty upload is unclassified"""
        assert classify_content(b"") is None
