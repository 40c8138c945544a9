# fleetrecon/sessions/router.py

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from fleetrecon.core.db import get_db
from fleetrecon.core.dependencies import get_session_id
from fleetrecon.sessions.schemas import ResetResponse, WorkSessionResponse
from fleetrecon.sessions.services import WorkSessionService
from fleetrecon.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/sessions", tags=["Sessions"])


def get_work_session_service(db: Session = Depends(get_db)) -> WorkSessionService:
    """Dependency to get WorkSessionService instance"""
    return WorkSessionService(db)


@router.get("/current", response_model=WorkSessionResponse)
def get_current_session(
    session_id: str = Depends(get_session_id),
    service: WorkSessionService = Depends(get_work_session_service),
):
    return service.get_current(session_id)


@router.post("/reset", response_model=ResetResponse)
def reset_session(
    session_id: str = Depends(get_session_id),
    service: WorkSessionService = Depends(get_work_session_service),
):
    """Delete the session's trips, transactions and uploads"""
    try:
        return service.reset(session_id)
    except Exception as e:
        logger.error(f"Failed to reset session {session_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to reset session",
        ) from e
