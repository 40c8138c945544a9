# fleetrecon/sessions/repository.py

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from fleetrecon.sessions.models import WorkSession
from fleetrecon.utils.logger import get_logger

logger = get_logger(__name__)


class WorkSessionRepository:
    """Data Access Layer for work sessions"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, session_id: str) -> Optional[WorkSession]:
        return self.db.query(WorkSession).filter(
            WorkSession.session_id == session_id
        ).first()

    def get_or_create(self, session_id: str) -> WorkSession:
        work_session = self.get(session_id)
        if work_session is None:
            work_session = WorkSession(session_id=session_id, current_step=1)
            self.db.add(work_session)
            self.db.flush()
            logger.info("Created work session", session_id=session_id)
        return work_session

    def touch(self, session_id: str, current_step: Optional[int] = None) -> WorkSession:
        work_session = self.get_or_create(session_id)
        work_session.last_activity_at = datetime.now()
        if current_step is not None:
            work_session.current_step = current_step
        self.db.flush()
        return work_session

    def update_company_name(self, session_id: str, company_name: str) -> None:
        work_session = self.get_or_create(session_id)
        work_session.company_name = company_name[:255]
        self.db.flush()
