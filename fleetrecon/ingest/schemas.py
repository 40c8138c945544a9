# fleetrecon/ingest/schemas.py

"""
Ingest Module Pydantic Schemas
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class DateRange(BaseModel):
    min_date: Optional[datetime] = None
    max_date: Optional[datetime] = None


class PlatformTotals(BaseModel):
    trips: int = 0
    transactions: int = 0


class FileOutcomeResponse(BaseModel):
    filename: str
    upload_id: int
    platform: Optional[str] = Field(None, description="uber | bolt, null when unrecognized")
    file_type: str = Field(..., description="trips | payments | campaign | other")
    count: int = Field(0, description="Rows accepted")
    skipped: int = Field(0, description="Rows dropped as invalid or duplicate")
    date_range: DateRange = Field(default_factory=DateRange, description="Earliest and latest row timestamp in the file")
    company_name: Optional[str] = Field(None, description="Company name found in the file")


class IngestResponse(BaseModel):
    """Result of one multi-file upload"""
    trips_added: int
    transactions_added: int
    plates_backfilled: int = 0
    company_name: Optional[str] = None
    date_range: DateRange
    unclassified_files: int = 0
    platform_totals: Dict[str, PlatformTotals] = Field(
        default_factory=dict, description="Rows accepted per platform, keyed uber | bolt"
    )
    files: List[FileOutcomeResponse] = Field(default_factory=list)


class ReprocessResponse(BaseModel):
    status: str
    task_id: str
    message: str
