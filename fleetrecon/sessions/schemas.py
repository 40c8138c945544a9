# fleetrecon/sessions/schemas.py

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class WorkSessionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    session_id: str
    company_name: Optional[str] = None
    current_step: int
    last_activity_at: datetime


class ResetResponse(BaseModel):
    status: str
    trips_deleted: int
    transactions_deleted: int
    uploads_deleted: int
