# fleetrecon/uploads/schemas.py

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class UploadResponse(BaseModel):
    """Stored upload metadata, without the file content"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    filename: str
    mime_type: Optional[str] = None
    size: int
    platform: Optional[str] = None
    file_type: str
    created_on: datetime
