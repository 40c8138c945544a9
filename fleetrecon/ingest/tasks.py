# fleetrecon/ingest/tasks.py

from fleetrecon.core.db import SessionLocal
from fleetrecon.ingest.exceptions import NoFilesError
from fleetrecon.ingest.services import IngestService
from fleetrecon.utils.logger import get_logger
from fleetrecon.worker.app import app

logger = get_logger(__name__)


@app.task(name="ingest.reprocess_session_task", bind=True, max_retries=3)
def reprocess_session_task(self, session_id: str):
    """
    Rebuild a session's trips and transactions from its stored uploads.

    Retries with exponential backoff on unexpected failures; a session
    without uploads is reported and not retried.
    """
    db = SessionLocal()
    try:
        logger.info("Starting reprocess task", session_id=session_id, attempt=self.request.retries + 1)
        result = IngestService(db).reprocess_session(session_id)
        return result.summary()
    except NoFilesError as e:
        logger.warning("Nothing to reprocess", session_id=session_id, reason=str(e))
        return {"status": "skipped", "message": str(e)}
    except Exception as e:
        logger.error(f"Reprocess task failed for session {session_id}: {e}", exc_info=True)
        raise self.retry(exc=e, countdown=60 * (2 ** self.request.retries))
    finally:
        db.close()
