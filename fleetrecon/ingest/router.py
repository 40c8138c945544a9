# fleetrecon/ingest/router.py

"""
Ingest API Router

Multi-file CSV upload and background reprocessing of stored uploads.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from fleetrecon.core.db import get_db
from fleetrecon.core.dependencies import get_session_id
from fleetrecon.ingest.exceptions import FileTooLargeError, IngestFailedError, NoFilesError
from fleetrecon.ingest.schemas import IngestResponse, ReprocessResponse
from fleetrecon.ingest.services import IngestService, UploadedFile
from fleetrecon.ingest.tasks import reprocess_session_task
from fleetrecon.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/ingest", tags=["Ingest"])


def get_ingest_service(db: Session = Depends(get_db)) -> IngestService:
    """Dependency to get IngestService instance"""
    return IngestService(db)


@router.post("/upload", response_model=IngestResponse)
def upload_files(
    files: Optional[List[UploadFile]] = File(None, description="Uber / Bolt CSV exports"),
    session_id: str = Depends(get_session_id),
    service: IngestService = Depends(get_ingest_service),
):
    """
    Upload one or more CSV exports

    Files are classified by their header line, stored, and ingested in the
    order trips, payments, campaigns. Unrecognized files are stored and
    counted in `unclassified_files`.
    """
    try:
        uploaded = [
            UploadedFile(
                filename=upload.filename or "upload.csv",
                content=upload.file.read(),
                mime_type=upload.content_type,
            )
            for upload in files or []
        ]
        return service.ingest_files(session_id, uploaded).summary()
    except NoFilesError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except FileTooLargeError as e:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=str(e)) from e
    except IngestFailedError as e:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": e.message,
                "filename": e.filename,
                "unclassified_files": e.unclassified_count,
            },
        )
    except Exception as e:
        logger.error(f"Upload failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Upload failed",
        ) from e


@router.post("/reprocess", response_model=ReprocessResponse, status_code=status.HTTP_202_ACCEPTED)
def reprocess_session(session_id: str = Depends(get_session_id)):
    """Queue a rebuild of the session's records from its stored uploads"""
    try:
        task = reprocess_session_task.delay(session_id)
        logger.info("Queued reprocess task", session_id=session_id, task_id=task.id)
        return {
            "status": "queued",
            "task_id": task.id,
            "message": "Reprocessing has been queued",
        }
    except Exception as e:
        logger.error(f"Failed to queue reprocess task: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to queue reprocessing",
        ) from e
