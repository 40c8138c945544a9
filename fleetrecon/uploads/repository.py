# fleetrecon/uploads/repository.py

"""
Upload Repository - Data Access Layer
"""

from typing import List, Optional

from sqlalchemy.orm import Session, defer

from fleetrecon.uploads.models import Upload
from fleetrecon.utils.logger import get_logger

logger = get_logger(__name__)


class UploadRepository:
    """Data Access Layer for stored uploads"""

    def __init__(self, db: Session):
        self.db = db

    def create_upload(
        self,
        session_id: str,
        filename: str,
        content: bytes,
        platform: Optional[str],
        file_type: str,
        mime_type: Optional[str] = None,
    ) -> Upload:
        upload = Upload(
            session_id=session_id,
            filename=filename[:255],
            mime_type=mime_type,
            size=len(content),
            platform=platform,
            file_type=file_type,
            content=content,
        )
        self.db.add(upload)
        self.db.flush()
        logger.info(
            "Stored upload", upload_id=upload.id, filename=filename,
            platform=platform, file_type=file_type, size=upload.size,
        )
        return upload

    def get_upload(self, session_id: str, upload_id: int) -> Optional[Upload]:
        return self.db.query(Upload).filter(
            Upload.session_id == session_id,
            Upload.id == upload_id,
        ).first()

    def list_uploads(self, session_id: str, with_content: bool = False) -> List[Upload]:
        """List a session's uploads in upload order, content column deferred unless asked for"""
        query = self.db.query(Upload).filter(Upload.session_id == session_id)
        if not with_content:
            query = query.options(defer(Upload.content))
        return query.order_by(Upload.id).all()

    def delete_by_session(self, session_id: str) -> int:
        return self.db.query(Upload).filter(
            Upload.session_id == session_id
        ).delete(synchronize_session=False)
