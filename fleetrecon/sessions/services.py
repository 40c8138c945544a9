# fleetrecon/sessions/services.py

from sqlalchemy.orm import Session

from fleetrecon.records.repository import RecordRepository
from fleetrecon.sessions.models import WorkSession
from fleetrecon.sessions.repository import WorkSessionRepository
from fleetrecon.uploads.repository import UploadRepository
from fleetrecon.utils.logger import get_logger

logger = get_logger(__name__)


class WorkSessionService:
    """Session lifecycle: lookup and reset"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = WorkSessionRepository(db)
        self.record_repo = RecordRepository(db)
        self.upload_repo = UploadRepository(db)

    def get_current(self, session_id: str) -> WorkSession:
        work_session = self.repo.touch(session_id)
        self.db.commit()
        return work_session

    def reset(self, session_id: str) -> dict:
        """
        Drop all trips, transactions and uploads of a session and start over
        at step 1. The session row itself is kept.
        """
        try:
            trips_deleted, transactions_deleted = self.record_repo.delete_by_session(session_id)
            uploads_deleted = self.upload_repo.delete_by_session(session_id)

            work_session = self.repo.touch(session_id, current_step=1)
            work_session.company_name = None
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            "Session reset", session_id=session_id, trips=trips_deleted,
            transactions=transactions_deleted, uploads=uploads_deleted,
        )
        return {
            "status": "success",
            "trips_deleted": trips_deleted,
            "transactions_deleted": transactions_deleted,
            "uploads_deleted": uploads_deleted,
        }
