# fleetrecon/reconciliation/schemas.py

"""
Reconciliation Module Pydantic Schemas
"""

from decimal import Decimal
from typing import Dict, List

from pydantic import BaseModel, Field


class MonthlyStatsResponse(BaseModel):
    """Trip count, bonus and payout of one plate in one month"""
    month_key: str = Field(..., description="YYYY-MM")
    count: int = Field(..., description="Completed trips")
    bonus: Decimal = Field(..., description="Theoretical bonus in EUR")
    paid_amount: Decimal = Field(..., description="Actually paid in EUR")
    difference: Decimal = Field(..., description="bonus - paid_amount")


class DriverSummaryResponse(BaseModel):
    license_plate: str
    stats: Dict[str, MonthlyStatsResponse]
    total_count: int
    total_bonus: Decimal
    total_paid: Decimal
    total_difference: Decimal


class PromoRow(BaseModel):
    license_plate: str
    month: str
    trip_count: int
    theoretical_bonus: Decimal
    actual_paid: Decimal
    difference: Decimal


class PromoSummary(BaseModel):
    total_theoretical_bonus: Decimal
    total_actual_paid: Decimal
    total_difference: Decimal
    total_trips: int
    license_plate_count: int
    month_count: int


class PromoReportResponse(BaseModel):
    rows: List[PromoRow]
    summary: PromoSummary
