# fleetrecon/ingest/extractors/uber.py

"""
Uber export extractors

Uber exports are German-localized: trip logs keyed by "Kennzeichen" and
"Zeitpunkt der Fahrtbestellung", payment reports with
"An dein Unternehmen gezahlt", and campaign reports keyed by driver name.
"""

from typing import Optional, Tuple

from fleetrecon.ingest.extractor_registry import ExtractContext, ExtractResult, extractor
from fleetrecon.ingest.extractors.common import (
    Row, first_value, run_extraction, transaction_record, trip_record
)
from fleetrecon.ingest.parsing import parse_amount_cents, parse_timestamp
from fleetrecon.ingest.plates import extract_license_plate, normalize_driver_name, normalize_plate
from fleetrecon.records.models import TransactionCategory
from fleetrecon.uploads.models import FileType, Platform

FIRST_NAME = "Vorname des Fahrers"
LAST_NAME = "Nachname des Fahrers"
COMPANY_NAME_KEYS = ("Name des Unternehmens", "Firmenname")


def _driver_name(row: Row) -> Optional[str]:
    return normalize_driver_name(row.get(FIRST_NAME), row.get(LAST_NAME))


@extractor(Platform.UBER, FileType.TRIPS, description="Uber trip log")
def extract_uber_trips(content: bytes, context: ExtractContext) -> ExtractResult:
    def transform(row: Row, result: ExtractResult) -> Optional[Tuple[str, dict]]:
        license_plate = normalize_plate(row.get("Kennzeichen"))
        order_time = parse_timestamp(row.get("Zeitpunkt der Fahrtbestellung"))
        trip_status = row.get("Fahrtstatus")
        if not license_plate or order_time is None or not trip_status:
            return None

        result.record_date(order_time)
        return trip_record(
            context, Platform.UBER,
            license_plate=license_plate,
            order_time=order_time,
            trip_status=trip_status,
            raw=row,
            trip_id=row.get("Fahrt-ID") or None,
            driver_name=_driver_name(row),
        )

    return run_extraction(content, context, ExtractResult(Platform.UBER, FileType.TRIPS), transform)


@extractor(Platform.UBER, FileType.PAYMENTS, description="Uber payment report")
def extract_uber_payments(content: bytes, context: ExtractContext) -> ExtractResult:
    """
    Per-ride earnings (rows with a trip UUID) and payouts (rows without).

    The plate comes from "Kennzeichen" when present, otherwise from the
    description. Rows with neither plate nor driver name are dropped.
    """

    def transform(row: Row, result: ExtractResult) -> Optional[Tuple[str, dict]]:
        if result.company_name is None:
            result.company_name = first_value(row, *COMPANY_NAME_KEYS)

        if "An dein Unternehmen gezahlt" in row:
            amount = parse_amount_cents(row.get("An dein Unternehmen gezahlt"))
        else:
            amount = parse_amount_cents(row.get("Betrag"))
        transaction_time = parse_timestamp(first_value(row, "vs-Berichterstattung", "Zeitpunkt"))
        if amount is None or transaction_time is None:
            return None

        description = row.get("Beschreibung") or None
        license_plate = normalize_plate(row.get("Kennzeichen")) or extract_license_plate(description) or ""

        return transaction_record(
            context, Platform.UBER, TransactionCategory.PAYMENT,
            license_plate=license_plate,
            driver_name=_driver_name(row),
            transaction_time=transaction_time,
            amount=amount,
            raw=row,
            description=description,
            trip_uuid=first_value(row, "Fahrt-UUID", "Fahrt-ID"),
            revenue=parse_amount_cents(row.get("Deine Umsätze")),
            fare_price=parse_amount_cents(row.get("Fahrpreis")),
        )

    return run_extraction(content, context, ExtractResult(Platform.UBER, FileType.PAYMENTS), transform)


@extractor(Platform.UBER, FileType.CAMPAIGN, description="Uber incentive campaign report")
def extract_uber_campaign(content: bytes, context: ExtractContext) -> ExtractResult:
    """
    Campaign payouts are keyed by driver. The plate is only taken from the
    campaign text for vehicle based incentives; otherwise the cross-reference
    pass fills it in from the driver's trips.
    """

    def transform(row: Row, result: ExtractResult) -> Optional[Tuple[str, dict]]:
        driver_name = _driver_name(row)
        campaign = row.get("Kampagne") or None
        amount = parse_amount_cents(first_value(row, "Betrag", "Auszahlung"))
        transaction_time = parse_timestamp(first_value(row, "Zeitpunkt", "Datum"))
        if not driver_name or amount is None or transaction_time is None:
            return None

        return transaction_record(
            context, Platform.UBER, TransactionCategory.CAMPAIGN,
            license_plate=extract_license_plate(campaign, incentives_only=True) or "",
            driver_name=driver_name,
            transaction_time=transaction_time,
            amount=amount,
            raw=row,
            description=campaign,
        )

    return run_extraction(content, context, ExtractResult(Platform.UBER, FileType.CAMPAIGN), transform)
