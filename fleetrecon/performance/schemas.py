# fleetrecon/performance/schemas.py

"""
Performance Module Pydantic Schemas

Money fields are cents, distance fields centi-km, hours are decimal hours.
"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class DateRangeResponse(BaseModel):
    min_date: Optional[datetime] = None
    max_date: Optional[datetime] = None
    available_months: List[str] = Field(default_factory=list, description="YYYY-MM with data")


class ShiftResponse(BaseModel):
    driver_name: str
    license_plate: str
    shift_start: datetime
    shift_end: datetime
    shift_type: str = Field(..., description="day or night")
    revenue: int
    distance: int
    hours_worked: float
    trip_count: int


class ShiftSummaryResponse(BaseModel):
    total_shifts: int
    day_shifts: int
    night_shifts: int
    avg_shift_duration: float = Field(..., description="Hours")
    avg_revenue_per_shift: int = Field(..., description="Cents")


class ShiftListResponse(BaseModel):
    shifts: List[ShiftResponse]
    summary: ShiftSummaryResponse


class RevenueRatios(BaseModel):
    revenue_per_hour: int
    revenue_per_km: int
    revenue_per_day: int
    revenue_per_trip: int


class KpiTotals(RevenueRatios):
    revenue: int
    distance: int
    duration_seconds: int
    trip_count: int
    driver_count: int
    vehicle_count: int
    active_days: int
    hours_worked: float


class DailyPerformance(BaseModel):
    day: date
    revenue: int
    distance: int
    duration_seconds: int
    trip_count: int
    hours: float


class MonthlyPerformance(BaseModel):
    month: str
    revenue: int
    distance: int
    duration_seconds: int
    trip_count: int
    active_days: int
    hours: float


class KpiResponse(BaseModel):
    totals: KpiTotals
    daily: List[DailyPerformance]
    monthly: List[MonthlyPerformance]
    shift_summary: ShiftSummaryResponse


class _ReportRow(RevenueRatios):
    revenue: int
    distance: int
    trip_count: int
    active_days: int
    hours_worked: float
    shift_count: int
    day_shift_count: int
    night_shift_count: int
    revenue_day_shift: int
    revenue_night_shift: int


class DriverPerformance(_ReportRow):
    driver_name: str


class VehiclePerformance(_ReportRow):
    license_plate: str
