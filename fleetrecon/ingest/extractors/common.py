# fleetrecon/ingest/extractors/common.py

"""
Streaming CSV helpers shared by the platform extractors

Rows are read one at a time from a text wrapper over the upload bytes and
flushed to the batch sink in fixed size batches. The sink commits before it
returns, so a slow store slows parsing down instead of growing the buffer.
"""

import csv
import io
from datetime import datetime
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from fleetrecon.ingest.extractor_registry import ExtractContext, ExtractResult
from fleetrecon.ingest.parsing import (
    epoch_millis, get_raw_value, raw_distance, raw_duration_seconds
)
from fleetrecon.uploads.classifier import read_header_line
from fleetrecon.uploads.models import Platform
from fleetrecon.utils.logger import get_logger

logger = get_logger(__name__)

Row = Dict[str, str]
Transform = Callable[[Row, ExtractResult], Optional[Tuple[str, dict]]]

# Column widths of the record tables; rows that do not fit are dropped
MAX_PLATE_LENGTH = 20
MAX_STATUS_LENGTH = 50
MAX_ID_LENGTH = 64
MAX_DRIVER_NAME_LENGTH = 255
MAX_DESCRIPTION_LENGTH = 500


def fits(value: Optional[str], limit: int) -> bool:
    return value is None or len(value) <= limit


def detect_delimiter(header_line: str) -> str:
    return ";" if header_line.count(";") > header_line.count(",") else ","


def iter_rows(content: bytes) -> Iterator[Tuple[int, Row]]:
    """
    Yield (line_number, row) with stripped keys and values.

    Whitespace-only rows are skipped. Values beyond the header width are ignored.
    """
    delimiter = detect_delimiter(read_header_line(content))
    stream = io.TextIOWrapper(io.BytesIO(content), encoding="utf-8-sig", errors="replace", newline="")
    reader = csv.DictReader(stream, delimiter=delimiter)
    if not reader.fieldnames:
        return
    reader.fieldnames = [name.strip() for name in reader.fieldnames]

    for row in reader:
        cleaned = {
            key: value.strip() if isinstance(value, str) else ""
            for key, value in row.items()
            if key is not None
        }
        if not any(cleaned.values()):
            continue
        yield reader.line_num, cleaned


def first_value(row: Row, *keys: str) -> Optional[str]:
    return get_raw_value(row, keys)


class BatchWriter:
    """Buffers records and hands full batches to the sink"""

    def __init__(self, context: ExtractContext):
        self.context = context
        self.buffer: List[dict] = []
        self.rows_since_flush = 0

    def row_read(self) -> None:
        self.rows_since_flush += 1

    def add(self, record: dict) -> None:
        self.buffer.append(record)
        if len(self.buffer) >= self.context.batch_size:
            self.flush()

    def flush(self) -> None:
        if self.buffer:
            self.context.on_batch(self.buffer)
            self.buffer = []
        if self.context.on_rows and self.rows_since_flush:
            self.context.on_rows(self.rows_since_flush)
        self.rows_since_flush = 0


def run_extraction(content: bytes, context: ExtractContext, result: ExtractResult, transform: Transform) -> ExtractResult:
    """
    Drive one extractor over a file.

    `transform` returns (dedup_key, record) for an acceptable row or None to drop it.
    """
    writer = BatchWriter(context)

    for line_number, row in iter_rows(content):
        writer.row_read()
        transformed = transform(row, result)
        if transformed is None:
            result.skipped += 1
            logger.debug(f"Dropped line {line_number} of {result.platform.value}/{result.file_type.value}")
            continue

        dedup_key, record = transformed
        if dedup_key in context.seen_keys:
            result.skipped += 1
            continue
        context.seen_keys.add(dedup_key)

        writer.add(record)
        result.count += 1

    writer.flush()
    return result


def trip_record(
    context: ExtractContext,
    platform: Platform,
    license_plate: str,
    order_time: datetime,
    trip_status: str,
    raw: Row,
    trip_id: Optional[str] = None,
    driver_name: Optional[str] = None,
) -> Optional[Tuple[str, dict]]:
    """Build a trip record; None when a field is wider than its column"""
    if not (
        fits(license_plate, MAX_PLATE_LENGTH)
        and fits(trip_status, MAX_STATUS_LENGTH)
        and fits(trip_id, MAX_ID_LENGTH)
        and fits(driver_name, MAX_DRIVER_NAME_LENGTH)
    ):
        return None

    dedup_key = f"{license_plate}-{epoch_millis(order_time)}"
    return dedup_key, {
        "session_id": context.session_id,
        "upload_id": context.upload_id,
        "trip_id": trip_id,
        "license_plate": license_plate,
        "driver_name": driver_name,
        "order_time": order_time,
        "trip_status": trip_status,
        "platform": platform.value,
        "raw_data": raw,
    }


def transaction_record(
    context: ExtractContext,
    platform: Platform,
    category: str,
    license_plate: str,
    driver_name: Optional[str],
    transaction_time: datetime,
    amount: int,
    raw: Row,
    description: Optional[str] = None,
    trip_uuid: Optional[str] = None,
    revenue: Optional[int] = None,
    fare_price: Optional[int] = None,
) -> Optional[Tuple[str, dict]]:
    """
    Build a transaction record.

    None when neither plate nor driver identifies it, or when the plate,
    driver name or trip UUID is wider than its column. The dedup key then
    stays within its own column as well.
    """
    if not (
        fits(license_plate, MAX_PLATE_LENGTH)
        and fits(driver_name, MAX_DRIVER_NAME_LENGTH)
        and fits(trip_uuid or None, MAX_ID_LENGTH)
    ):
        return None

    if license_plate:
        dedup_key = f"{license_plate}-{epoch_millis(transaction_time)}-{amount}"
    elif driver_name:
        dedup_key = f"~{driver_name}-{epoch_millis(transaction_time)}-{amount}"
    else:
        return None

    return dedup_key, {
        "session_id": context.session_id,
        "upload_id": context.upload_id,
        "license_plate": license_plate,
        "driver_name": driver_name,
        "transaction_time": transaction_time,
        "amount": amount,
        "revenue": revenue,
        "fare_price": fare_price,
        "description": description[:MAX_DESCRIPTION_LENGTH] if description else None,
        "trip_uuid": trip_uuid or None,
        "platform": platform.value,
        "category": category,
        "distance": raw_distance(raw),
        "duration_seconds": raw_duration_seconds(raw),
        "dedup_key": dedup_key,
        "raw_data": raw,
    }


def count_data_rows(content: bytes) -> int:
    """Data rows of a file (lines minus the header), counted without parsing"""
    lines = content.count(b"\n")
    if content and not content.endswith(b"\n"):
        lines += 1
    return max(lines - 1, 0)
