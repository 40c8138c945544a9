# fleetrecon/uploads/router.py

"""
Stored Uploads API Router
"""

import io
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from fleetrecon.core.db import get_db
from fleetrecon.core.dependencies import get_session_id
from fleetrecon.uploads.repository import UploadRepository
from fleetrecon.uploads.schemas import UploadResponse
from fleetrecon.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/uploads", tags=["Uploads"])


def get_upload_repository(db: Session = Depends(get_db)) -> UploadRepository:
    """Dependency to get UploadRepository instance"""
    return UploadRepository(db)


@router.get("", response_model=List[UploadResponse])
def list_uploads(
    session_id: str = Depends(get_session_id),
    repo: UploadRepository = Depends(get_upload_repository),
):
    """List the session's uploads with their classification"""
    return repo.list_uploads(session_id)


@router.get("/{upload_id}/download")
def download_upload(
    upload_id: int,
    session_id: str = Depends(get_session_id),
    repo: UploadRepository = Depends(get_upload_repository),
):
    """Return the original file bytes"""
    upload = repo.get_upload(session_id, upload_id)
    if upload is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Upload not found")

    return StreamingResponse(
        io.BytesIO(upload.content),
        media_type=upload.mime_type or "text/csv",
        headers={"Content-Disposition": f"attachment; filename={upload.filename}"},
    )
