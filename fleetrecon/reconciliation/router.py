# fleetrecon/reconciliation/router.py

"""
Reconciliation API Router
"""

import io
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from fleetrecon.core.db import get_db
from fleetrecon.core.dependencies import get_session_id
from fleetrecon.reconciliation.exceptions import InvalidReportFormatError
from fleetrecon.reconciliation.schemas import DriverSummaryResponse, PromoReportResponse
from fleetrecon.reconciliation.services import ReconciliationService
from fleetrecon.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/reconciliation", tags=["Reconciliation"])


def get_reconciliation_service(db: Session = Depends(get_db)) -> ReconciliationService:
    """Dependency to get ReconciliationService instance"""
    return ReconciliationService(db)


@router.get("/summaries", response_model=List[DriverSummaryResponse])
def get_driver_summaries(
    session_id: str = Depends(get_session_id),
    service: ReconciliationService = Depends(get_reconciliation_service),
):
    """
    Per plate, per month bonus reconciliation

    Sorted by plate; months inside each summary keyed YYYY-MM.
    """
    try:
        return [summary.to_dict() for summary in service.get_driver_summaries(session_id)]
    except Exception as e:
        logger.error(f"Failed to compute driver summaries: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to compute driver summaries",
        ) from e


@router.get("/promo", response_model=PromoReportResponse)
def get_promo_report(
    session_id: str = Depends(get_session_id),
    service: ReconciliationService = Depends(get_reconciliation_service),
):
    try:
        return service.promo_report(session_id)
    except Exception as e:
        logger.error(f"Failed to build promo report: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to build promo report",
        ) from e


@router.get("/promo/export")
def export_promo_report(
    format: str = Query("excel", description="excel or csv"),
    session_id: str = Depends(get_session_id),
    service: ReconciliationService = Depends(get_reconciliation_service),
):
    """Download the promo report as .xlsx or .csv"""
    try:
        content, media_type, filename = service.export_promo_report(session_id, format)
        return StreamingResponse(
            io.BytesIO(content),
            media_type=media_type,
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )
    except InvalidReportFormatError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except Exception as e:
        logger.error(f"Failed to export promo report: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to export promo report",
        ) from e
