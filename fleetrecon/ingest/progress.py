# fleetrecon/ingest/progress.py

"""
Ingest progress reporting

`ProgressBroker` fans progress events out to whoever listens for a session
(a WebSocket bridge, a test, nothing at all). Delivery is fire-and-forget:
a failing listener is logged and never interrupts ingestion.

`ProgressTracker` turns row counts into monotonic percentages for one run.
"""

import threading
from dataclasses import asdict, dataclass
from typing import Callable, Dict, List, Optional

from fleetrecon.utils.logger import get_logger

logger = get_logger(__name__)


class ProgressPhase:
    TRIPS = "trips"
    TRANSACTIONS = "transactions"
    CAMPAIGN = "campaign"
    CROSS_REFERENCE = "cross_reference"
    COMPLETE = "complete"


PHASE_MESSAGES = {
    ProgressPhase.TRIPS: "Fahrten werden gespeichert...",
    ProgressPhase.TRANSACTIONS: "Zahlungen werden gespeichert...",
    ProgressPhase.CAMPAIGN: "Kampagnen werden gespeichert...",
    ProgressPhase.CROSS_REFERENCE: "Kennzeichen werden zugeordnet...",
    ProgressPhase.COMPLETE: "Daten erfolgreich gespeichert!",
}


@dataclass
class ProgressEvent:
    phase: str
    total: int
    processed: int
    percent: int
    message: str

    def to_dict(self) -> dict:
        return asdict(self)


ProgressListener = Callable[[ProgressEvent], None]


class ProgressBroker:
    """Per-session registry of progress listeners"""

    def __init__(self):
        self._listeners: Dict[str, List[ProgressListener]] = {}
        self._lock = threading.Lock()

    def register(self, session_id: str, listener: ProgressListener) -> None:
        with self._lock:
            self._listeners.setdefault(session_id, []).append(listener)

    def unregister(self, session_id: str, listener: Optional[ProgressListener] = None) -> None:
        """Remove one listener, or every listener of the session when none is given"""
        with self._lock:
            if listener is None:
                self._listeners.pop(session_id, None)
                return
            listeners = self._listeners.get(session_id, [])
            if listener in listeners:
                listeners.remove(listener)
            if not listeners:
                self._listeners.pop(session_id, None)

    def has_connection(self, session_id: str) -> bool:
        with self._lock:
            return bool(self._listeners.get(session_id))

    def broadcast(self, session_id: str, event: ProgressEvent) -> None:
        with self._lock:
            listeners = list(self._listeners.get(session_id, []))

        for listener in listeners:
            try:
                listener(event)
            except Exception as e:
                logger.warning(
                    "Progress listener failed", session_id=session_id, error=str(e), exc_info=True
                )


progress_broker = ProgressBroker()


class ProgressTracker:
    """
    Monotonic progress for one ingest run.

    `total` is the number of data rows across all classified files. Percent
    never decreases and stays below 100 until `complete()` is called.
    """

    def __init__(self, broker: ProgressBroker, session_id: str, total: int):
        self.broker = broker
        self.session_id = session_id
        self.total = max(total, 0)
        self.processed = 0
        self.percent = 0
        self.phase = ProgressPhase.TRIPS

    def _emit(self, percent: int) -> None:
        self.percent = max(self.percent, percent)
        self.broker.broadcast(
            self.session_id,
            ProgressEvent(
                phase=self.phase,
                total=self.total,
                processed=self.processed,
                percent=self.percent,
                message=PHASE_MESSAGES[self.phase],
            ),
        )

    def _running_percent(self) -> int:
        if not self.total:
            return 0
        return min(self.processed * 100 // self.total, 99)

    def start_phase(self, phase: str) -> None:
        self.phase = phase
        self._emit(self._running_percent())

    def advance(self, rows: int) -> None:
        self.processed = min(self.processed + rows, self.total) if self.total else self.processed + rows
        self._emit(self._running_percent())

    def complete(self) -> None:
        self.phase = ProgressPhase.COMPLETE
        self.processed = self.total
        self._emit(100)
