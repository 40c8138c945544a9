# fleetrecon/ingest/services.py

"""
Streaming Ingest Pipeline

Drives one multi-file upload end to end:
1. store every file verbatim and classify it from its header line
2. run the matching extractor per file (trips, then payments, then campaigns)
3. insert-ignore each batch and commit before parsing continues
4. back-fill plates of driver keyed transactions from the driver's trips
"""

import bisect
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence, Set, Tuple

from sqlalchemy.orm import Session

from fleetrecon.core.config import settings
from fleetrecon.ingest.exceptions import FileTooLargeError, IngestFailedError, NoFilesError
from fleetrecon.ingest.extractor_registry import (
    ExtractContext, ExtractResult, get_extractor, import_extractors
)
from fleetrecon.ingest.extractors.common import count_data_rows
from fleetrecon.ingest.progress import (
    ProgressBroker, ProgressPhase, ProgressTracker, progress_broker
)
from fleetrecon.records.repository import RecordRepository
from fleetrecon.sessions.repository import WorkSessionRepository
from fleetrecon.uploads.classifier import FileClassification, classify_content
from fleetrecon.uploads.models import FileType, Upload
from fleetrecon.uploads.repository import UploadRepository
from fleetrecon.utils.logger import get_logger

logger = get_logger(__name__)

PROCESSING_ORDER = {FileType.TRIPS: 0, FileType.PAYMENTS: 1, FileType.CAMPAIGN: 2}

PHASE_BY_FILE_TYPE = {
    FileType.TRIPS: ProgressPhase.TRIPS,
    FileType.PAYMENTS: ProgressPhase.TRANSACTIONS,
    FileType.CAMPAIGN: ProgressPhase.CAMPAIGN,
}


@dataclass
class UploadedFile:
    filename: str
    content: bytes
    mime_type: Optional[str] = None


PHASE_LABELS = {
    ProgressPhase.TRIPS: "trip import",
    ProgressPhase.TRANSACTIONS: "payment import",
    ProgressPhase.CAMPAIGN: "campaign import",
    ProgressPhase.CROSS_REFERENCE: "plate cross-reference",
}


def failure_message(filename: Optional[str], phase: str) -> str:
    """Caller facing text for an aborted ingest, free of database error details"""
    step = PHASE_LABELS.get(phase, "ingest")
    if filename:
        return f"Ingest failed during {step} of '{filename}'. Rows saved before the error were kept."
    return f"Ingest failed during {step}. Rows saved before the error were kept."


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class FileOutcome:
    """What happened to one uploaded file"""
    filename: str
    upload_id: int
    platform: Optional[str]
    file_type: str
    count: int = 0
    skipped: int = 0
    min_date: Optional[datetime] = None
    max_date: Optional[datetime] = None
    company_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "filename": self.filename,
            "upload_id": self.upload_id,
            "platform": self.platform,
            "file_type": self.file_type,
            "count": self.count,
            "skipped": self.skipped,
            "date_range": {
                "min_date": _isoformat(self.min_date),
                "max_date": _isoformat(self.max_date),
            },
            "company_name": self.company_name,
        }


@dataclass
class IngestResult:
    trips_added: int = 0
    transactions_added: int = 0
    plates_backfilled: int = 0
    company_name: Optional[str] = None
    min_date: Optional[datetime] = None
    max_date: Optional[datetime] = None
    unclassified_files: int = 0
    files: List[FileOutcome] = field(default_factory=list)
    # platform -> {"trips": rows accepted, "transactions": rows accepted}
    platform_totals: Dict[str, Dict[str, int]] = field(default_factory=dict)

    def merge_extract(self, extract: ExtractResult) -> None:
        totals = self.platform_totals.setdefault(
            extract.platform.value, {"trips": 0, "transactions": 0}
        )
        if extract.file_type == FileType.TRIPS:
            totals["trips"] += extract.count
        else:
            totals["transactions"] += extract.count

        if self.company_name is None and extract.company_name:
            self.company_name = extract.company_name
        if extract.min_date and (self.min_date is None or extract.min_date < self.min_date):
            self.min_date = extract.min_date
        if extract.max_date and (self.max_date is None or extract.max_date > self.max_date):
            self.max_date = extract.max_date

    def summary(self) -> dict:
        return {
            "trips_added": self.trips_added,
            "transactions_added": self.transactions_added,
            "plates_backfilled": self.plates_backfilled,
            "company_name": self.company_name,
            "date_range": {
                "min_date": _isoformat(self.min_date),
                "max_date": _isoformat(self.max_date),
            },
            "unclassified_files": self.unclassified_files,
            "platform_totals": {platform: dict(totals) for platform, totals in self.platform_totals.items()},
            "files": [outcome.to_dict() for outcome in self.files],
        }


def resolve_driver_plate(
    trips: Sequence[Tuple[datetime, str]],
    when: datetime,
    window: timedelta,
) -> Optional[str]:
    """
    Plate for a driver keyed transaction.

    `trips` are the driver's (order_time, plate) pairs sorted by time. The
    nearest trip within `window` wins; otherwise the driver's only plate is
    used when there is exactly one; otherwise None.
    """
    if not trips:
        return None

    times = [order_time for order_time, _ in trips]
    position = bisect.bisect_left(times, when)
    best: Optional[Tuple[timedelta, str]] = None
    for candidate in (position - 1, position):
        if 0 <= candidate < len(trips):
            order_time, plate = trips[candidate]
            distance = abs(order_time - when)
            if distance <= window and (best is None or distance < best[0]):
                best = (distance, plate)
    if best is not None:
        return best[1]

    plates = {plate for _, plate in trips}
    if len(plates) == 1:
        return plates.pop()
    return None


class IngestService:
    """
    Service layer for CSV ingestion, reprocessing and plate cross-reference.
    """

    def __init__(
        self,
        db: Session,
        broker: ProgressBroker = progress_broker,
        batch_size: Optional[int] = None,
    ):
        import_extractors()
        self.db = db
        self.broker = broker
        self.batch_size = batch_size or settings.ingest_batch_size
        self.record_repo = RecordRepository(db)
        self.upload_repo = UploadRepository(db)
        self.session_repo = WorkSessionRepository(db)

    # --- PUBLIC OPERATIONS --- #

    def ingest_files(self, session_id: str, files: List[UploadedFile]) -> IngestResult:
        """
        Store, classify and ingest a multi-file upload.

        Raises:
            NoFilesError: no files given
            FileTooLargeError: a file exceeds the upload limit
            IngestFailedError: extraction or persistence failed part way
        """
        if not files:
            raise NoFilesError()

        limit = settings.max_upload_size_bytes
        for uploaded in files:
            if len(uploaded.content) > limit:
                raise FileTooLargeError(uploaded.filename, len(uploaded.content), limit)

        logger.info("Starting ingest", session_id=session_id, files=len(files))
        entries = self._store_uploads(session_id, files)
        return self._run(session_id, entries)

    def reprocess_session(self, session_id: str) -> IngestResult:
        """Rebuild a session's trips and transactions from its stored uploads"""
        uploads = self.upload_repo.list_uploads(session_id, with_content=True)
        if not uploads:
            raise NoFilesError("No stored uploads for this session")

        logger.info("Reprocessing session", session_id=session_id, uploads=len(uploads))
        self.record_repo.delete_by_session(session_id)

        entries = []
        for upload in uploads:
            classification = classify_content(upload.content)
            self._apply_classification(upload, classification)
            entries.append((upload, classification))
        self.db.commit()

        return self._run(session_id, entries)

    def cross_reference_plates(self, session_id: str) -> int:
        """
        Fill in plates of transactions that were keyed by driver name only.

        Returns the number of transactions that received a plate.
        """
        pending = self.record_repo.get_plateless_transactions(session_id)
        if not pending:
            return 0

        trip_index = self.record_repo.get_driver_trip_index(session_id)
        window = timedelta(hours=settings.cross_reference_window_hours)

        updates: List[Tuple[int, str]] = []
        backfilled = 0
        for transaction_id, platform, driver_name, transaction_time in pending:
            plate = resolve_driver_plate(
                trip_index.get((platform, driver_name), []), transaction_time, window
            )
            if plate is None:
                continue
            updates.append((transaction_id, plate))
            if len(updates) >= self.batch_size:
                backfilled += self._flush_plate_updates(updates)
                updates = []

        backfilled += self._flush_plate_updates(updates)
        logger.info(
            "Cross-reference finished", session_id=session_id,
            pending=len(pending), backfilled=backfilled,
        )
        return backfilled

    # --- PIPELINE --- #

    def _store_uploads(
        self, session_id: str, files: List[UploadedFile]
    ) -> List[Tuple[Upload, Optional[FileClassification]]]:
        entries = []
        for uploaded in files:
            classification = classify_content(uploaded.content)
            upload = self.upload_repo.create_upload(
                session_id=session_id,
                filename=uploaded.filename,
                content=uploaded.content,
                platform=classification.platform.value if classification else None,
                file_type=classification.file_type.value if classification else FileType.OTHER.value,
                mime_type=uploaded.mime_type,
            )
            entries.append((upload, classification))

        self.session_repo.touch(session_id)
        self.db.commit()
        return entries

    @staticmethod
    def _apply_classification(upload: Upload, classification: Optional[FileClassification]) -> None:
        upload.platform = classification.platform.value if classification else None
        upload.file_type = classification.file_type.value if classification else FileType.OTHER.value

    def _run(
        self,
        session_id: str,
        entries: List[Tuple[Upload, Optional[FileClassification]]],
    ) -> IngestResult:
        result = IngestResult()

        classified = []
        for upload, classification in entries:
            if classification is None:
                result.unclassified_files += 1
                result.files.append(FileOutcome(
                    filename=upload.filename, upload_id=upload.id,
                    platform=None, file_type=FileType.OTHER.value,
                ))
                logger.warning("Unrecognized file header, stored only", filename=upload.filename)
            else:
                classified.append((upload, classification))
        classified.sort(key=lambda entry: PROCESSING_ORDER[entry[1].file_type])

        trips_before = self.record_repo.count_trips(session_id)
        transactions_before = self.record_repo.count_transactions(session_id)

        tracker = ProgressTracker(
            self.broker, session_id,
            total=sum(count_data_rows(upload.content) for upload, _ in classified),
        )
        seen_trip_keys: Set[str] = set()
        seen_transaction_keys: Set[str] = set()
        current_file: Optional[str] = None

        try:
            for upload, classification in classified:
                current_file = upload.filename
                is_trip_file = classification.file_type == FileType.TRIPS
                extract = self._ingest_file(
                    session_id, upload, classification, tracker,
                    seen_trip_keys if is_trip_file else seen_transaction_keys,
                )
                result.merge_extract(extract)
                result.files.append(FileOutcome(
                    filename=upload.filename, upload_id=upload.id,
                    platform=classification.platform.value,
                    file_type=classification.file_type.value,
                    count=extract.count, skipped=extract.skipped,
                    min_date=extract.min_date, max_date=extract.max_date,
                    company_name=extract.company_name,
                ))

            current_file = None
            tracker.start_phase(ProgressPhase.CROSS_REFERENCE)
            result.plates_backfilled = self.cross_reference_plates(session_id)

            if result.company_name:
                self.session_repo.update_company_name(session_id, result.company_name)
            self.session_repo.touch(session_id, current_step=2)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(
                "Ingest failed", session_id=session_id, filename=current_file,
                phase=tracker.phase, error=str(e), exc_info=True
            )
            # The underlying error text can carry SQL and row values; keep it in the log only
            raise IngestFailedError(
                failure_message(current_file, tracker.phase),
                unclassified_count=result.unclassified_files,
                filename=current_file,
                phase=tracker.phase,
            ) from e

        result.trips_added = self.record_repo.count_trips(session_id) - trips_before
        result.transactions_added = self.record_repo.count_transactions(session_id) - transactions_before
        tracker.complete()

        logger.info(
            "Ingest finished", session_id=session_id,
            trips_added=result.trips_added,
            transactions_added=result.transactions_added,
            plates_backfilled=result.plates_backfilled,
            unclassified=result.unclassified_files,
        )
        return result

    def _ingest_file(
        self,
        session_id: str,
        upload: Upload,
        classification: FileClassification,
        tracker: ProgressTracker,
        seen_keys: Set[str],
    ) -> ExtractResult:
        phase = PHASE_BY_FILE_TYPE[classification.file_type]
        if tracker.phase != phase or tracker.processed == 0:
            tracker.start_phase(phase)

        metadata = get_extractor(classification.platform, classification.file_type)
        sink = self._flush_trips if classification.file_type == FileType.TRIPS else self._flush_transactions
        context = ExtractContext(
            session_id=session_id,
            on_batch=sink,
            seen_keys=seen_keys,
            batch_size=self.batch_size,
            on_rows=tracker.advance,
            upload_id=upload.id,
        )

        extract = metadata.function(upload.content, context)
        logger.info(
            "Extracted file", filename=upload.filename,
            platform=classification.platform.value, file_type=classification.file_type.value,
            count=extract.count, skipped=extract.skipped,
        )
        return extract

    # --- BATCH SINKS --- #

    def _flush_trips(self, rows: List[dict]) -> None:
        self.record_repo.insert_trips(rows)
        self.db.commit()
        logger.debug(f"Flushed {len(rows)} trips")

    def _flush_transactions(self, rows: List[dict]) -> None:
        self.record_repo.insert_transactions(rows)
        self.db.commit()
        logger.debug(f"Flushed {len(rows)} transactions")

    def _flush_plate_updates(self, updates: List[Tuple[int, str]]) -> int:
        if not updates:
            return 0
        count = self.record_repo.update_transaction_plates(updates)
        self.db.commit()
        return count
