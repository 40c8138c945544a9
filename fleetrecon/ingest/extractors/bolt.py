# fleetrecon/ingest/extractors/bolt.py

"""
Bolt export extractors

Bolt trip logs carry "Kennzeichen" and "Fahrtpreis"; earnings reports are
keyed by driver ("Fahrer") with "Nettoeinnahmen" as the amount paid out.
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

COMPANY_NAME_KEYS = ("Flottenname", "Unternehmen")


@extractor(Platform.BOLT, FileType.TRIPS, description="Bolt trip log")
def extract_bolt_trips(content: bytes, context: ExtractContext) -> ExtractResult:
    def transform(row: Row, result: ExtractResult) -> Optional[Tuple[str, dict]]:
        license_plate = normalize_plate(row.get("Kennzeichen"))
        order_time = parse_timestamp(first_value(row, "Bestellzeit", "Datum"))
        trip_status = first_value(row, "Status", "Fahrtstatus")
        if not license_plate or order_time is None or not trip_status:
            return None

        result.record_date(order_time)
        return trip_record(
            context, Platform.BOLT,
            license_plate=license_plate,
            order_time=order_time,
            trip_status=trip_status,
            raw=row,
            trip_id=row.get("Fahrt-ID") or None,
            driver_name=normalize_driver_name(row.get("Fahrer")),
        )

    return run_extraction(content, context, ExtractResult(Platform.BOLT, FileType.TRIPS), transform)


@extractor(Platform.BOLT, FileType.PAYMENTS, description="Bolt earnings report")
def extract_bolt_payments(content: bytes, context: ExtractContext) -> ExtractResult:
    def transform(row: Row, result: ExtractResult) -> Optional[Tuple[str, dict]]:
        if result.company_name is None:
            result.company_name = first_value(row, *COMPANY_NAME_KEYS)

        driver_name = normalize_driver_name(row.get("Fahrer"))
        transaction_time = parse_timestamp(row.get("Datum"))
        amount = parse_amount_cents(row.get("Nettoeinnahmen"))
        if not driver_name or transaction_time is None or amount is None:
            return None

        return transaction_record(
            context, Platform.BOLT, TransactionCategory.PAYMENT,
            license_plate="",
            driver_name=driver_name,
            transaction_time=transaction_time,
            amount=amount,
            raw=row,
            description=first_value(row, "Beschreibung", "Zahlungsart"),
            trip_uuid=row.get("Fahrt-ID") or None,
            revenue=parse_amount_cents(row.get("Bruttoeinnahmen")),
            fare_price=parse_amount_cents(row.get("Fahrtpreis")),
        )

    return run_extraction(content, context, ExtractResult(Platform.BOLT, FileType.PAYMENTS), transform)


@extractor(Platform.BOLT, FileType.CAMPAIGN, description="Bolt campaign payouts")
def extract_bolt_campaign(content: bytes, context: ExtractContext) -> ExtractResult:
    def transform(row: Row, result: ExtractResult) -> Optional[Tuple[str, dict]]:
        driver_name = normalize_driver_name(row.get("Fahrer"))
        campaign = row.get("Kampagne") or None
        amount = parse_amount_cents(row.get("Betrag"))
        transaction_time = parse_timestamp(row.get("Datum"))
        if not driver_name or amount is None or transaction_time is None:
            return None

        return transaction_record(
            context, Platform.BOLT, TransactionCategory.CAMPAIGN,
            license_plate=extract_license_plate(campaign, incentives_only=True) or "",
            driver_name=driver_name,
            transaction_time=transaction_time,
            amount=amount,
            raw=row,
            description=campaign,
        )

    return run_extraction(content, context, ExtractResult(Platform.BOLT, FileType.CAMPAIGN), transform)
