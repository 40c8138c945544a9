# fleetrecon/performance/router.py

"""
Performance Dashboard API Router
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from fleetrecon.core.db import get_db
from fleetrecon.core.dependencies import get_session_id
from fleetrecon.performance.exceptions import InvalidDateRangeError
from fleetrecon.performance.schemas import (
    DateRangeResponse,
    DriverPerformance,
    KpiResponse,
    ShiftListResponse,
    VehiclePerformance,
)
from fleetrecon.performance.services import PerformanceService
from fleetrecon.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/performance", tags=["Performance"])


def get_performance_service(db: Session = Depends(get_db)) -> PerformanceService:
    """Dependency to get PerformanceService instance"""
    return PerformanceService(db)


def _run(operation: str, func, *args):
    try:
        return func(*args)
    except InvalidDateRangeError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except Exception as e:
        logger.error(f"Failed to load {operation}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to load {operation}",
        ) from e


@router.get("/daterange", response_model=DateRangeResponse)
def get_date_range(
    session_id: str = Depends(get_session_id),
    service: PerformanceService = Depends(get_performance_service),
):
    """First and last ride timestamp plus the months that have data"""
    return _run("date range", service.get_date_range, session_id)


@router.get("/kpis", response_model=KpiResponse)
def get_kpis(
    start_date: Optional[date] = Query(None, description="Inclusive"),
    end_date: Optional[date] = Query(None, description="Inclusive, whole day"),
    session_id: str = Depends(get_session_id),
    service: PerformanceService = Depends(get_performance_service),
):
    return _run("KPIs", service.get_kpis, session_id, start_date, end_date)


@router.get("/shifts", response_model=ShiftListResponse)
def get_shifts(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    session_id: str = Depends(get_session_id),
    service: PerformanceService = Depends(get_performance_service),
):
    return _run("shifts", service.get_shifts, session_id, start_date, end_date)


@router.get("/drivers", response_model=List[DriverPerformance])
def get_driver_report(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    session_id: str = Depends(get_session_id),
    service: PerformanceService = Depends(get_performance_service),
):
    return _run("driver report", service.get_driver_report, session_id, start_date, end_date)


@router.get("/vehicles", response_model=List[VehiclePerformance])
def get_vehicle_report(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    session_id: str = Depends(get_session_id),
    service: PerformanceService = Depends(get_performance_service),
):
    return _run("vehicle report", service.get_vehicle_report, session_id, start_date, end_date)
