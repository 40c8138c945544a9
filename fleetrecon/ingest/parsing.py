# fleetrecon/ingest/parsing.py

"""
Field parsing shared by all extractors

- timestamps: vendor formats, ISO 8601, generic fallback
- money: European and plain decimal notation to integer cents via Decimal
- distances: numeric shape check, centi-km
- raw payload lookups with column aliases
"""

import re
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, Mapping, Optional, Union
from zoneinfo import ZoneInfo

import pandas as pd

from fleetrecon.core.config import settings

EPOCH = datetime(1970, 1, 1)

# Uber appends the numeric offset and zone name: "2024-06-03 10:15:00 +0200 CEST"
_TRAILING_ZONE = re.compile(r" \+\d{4} [A-Z]+$")

TIMESTAMP_FORMATS = [
    "%Y-%m-%d %H:%M:%S.%f",   # 2024-06-03 10:15:00.123
    "%Y-%m-%d %H:%M:%S",      # 2024-06-03 10:15:00
    "%Y-%m-%dT%H:%M:%S.%f",   # 2024-06-03T10:15:00.123
    "%Y-%m-%dT%H:%M:%S",      # 2024-06-03T10:15:00
    "%d.%m.%Y %H:%M:%S",      # 03.06.2024 10:15:00
    "%d.%m.%Y %H:%M",         # 03.06.2024 10:15
    "%d.%m.%Y",               # 03.06.2024
    "%Y-%m-%d %H:%M",         # 2024-06-03 10:15
]

_CURRENCY_NOISE = re.compile(r"(?:EUR|€|\s)", re.IGNORECASE)
_DISTANCE_SHAPE = re.compile(r"^-?\d+(?:[.,]\d+)?$")
_DISTANCE_UNIT = re.compile(r"\s*km$", re.IGNORECASE)

CENT = Decimal("1")

DISTANCE_KEYS = ("Fahrtdistanz", "Fahrtdistanz (km)", "Distanz", "Strecke (km)")
TRIP_START_KEYS = ("Startzeit der Fahrt", "Abholzeit")
TRIP_END_KEYS = ("Ankunftszeit der Fahrt", "Ankunftszeit", "Abgabezeit")


def _to_local_naive(value: datetime) -> datetime:
    """Aware datetimes are converted to the operator's zone, then the offset is dropped"""
    if value.tzinfo is None:
        return value
    return value.astimezone(ZoneInfo(settings.local_timezone)).replace(tzinfo=None)


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """
    Parse a vendor timestamp into a naive local datetime.

    Returns None when nothing matches; callers drop the row.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return _to_local_naive(value)

    text = str(value).strip()
    if not text:
        return None
    text = _TRAILING_ZONE.sub("", text)

    try:
        return _to_local_naive(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except ValueError:
        pass

    for fmt in TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue

    # Generic fallback for anything the vendors invent next
    parsed = pd.to_datetime(text, dayfirst=True, errors="coerce")
    if pd.isna(parsed):
        return None
    return _to_local_naive(parsed.to_pydatetime())


def epoch_millis(value: datetime) -> int:
    """Milliseconds since epoch of a naive wall-clock datetime, used in dedup keys"""
    return (value - EPOCH) // timedelta(milliseconds=1)


def _decimal_to_cents(amount: Decimal) -> int:
    return int((amount * 100).quantize(CENT, rounding=ROUND_HALF_UP))


def parse_amount_cents(value: Union[str, int, float, Decimal, None]) -> Optional[int]:
    """
    Parse a money value in euros into integer cents.

    A comma marks European notation: dots are thousands separators and the
    comma is the decimal separator ("1.234,56" -> 123456). Without a comma a
    single dot is the decimal point and repeated dots are thousands
    separators. Rounds half away from zero. Returns None when unparseable.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        try:
            amount = Decimal(str(value))
        except InvalidOperation:
            return None
        return _decimal_to_cents(amount) if amount.is_finite() else None

    text = _CURRENCY_NOISE.sub("", str(value))
    if not text:
        return None

    negative = text.startswith("(") and text.endswith(")")
    if negative:
        text = text[1:-1]

    if "," in text:
        text = text.replace(".", "").replace(",", ".")
    elif text.count(".") > 1:
        text = text.replace(".", "")

    try:
        amount = Decimal(text)
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None

    return _decimal_to_cents(-amount if negative else amount)


def parse_distance(value: Optional[str]) -> int:
    """Distance in km to integer centi-km; 0 when the value does not look numeric"""
    if value is None:
        return 0
    text = _DISTANCE_UNIT.sub("", str(value).strip())
    if not _DISTANCE_SHAPE.match(text):
        return 0
    return _decimal_to_cents(Decimal(text.replace(",", ".")))


def get_raw_value(raw: Mapping[str, Optional[str]], keys: Iterable[str]) -> Optional[str]:
    """First non-blank value among column aliases"""
    for key in keys:
        value = raw.get(key)
        if value is not None and str(value).strip():
            return str(value).strip()
    return None


def raw_distance(raw: Mapping[str, Optional[str]]) -> int:
    return parse_distance(get_raw_value(raw, DISTANCE_KEYS))


def raw_trip_window(raw: Mapping[str, Optional[str]]):
    """(start, end) of the ride itself when both are present and ordered, else None"""
    start = parse_timestamp(get_raw_value(raw, TRIP_START_KEYS))
    end = parse_timestamp(get_raw_value(raw, TRIP_END_KEYS))
    if start is None or end is None or end < start:
        return None
    return start, end


def raw_duration_seconds(raw: Mapping[str, Optional[str]]) -> Optional[int]:
    window = raw_trip_window(raw)
    if window is None:
        return None
    start, end = window
    return int((end - start).total_seconds())
