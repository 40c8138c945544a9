# fleetrecon/reconciliation/services.py

"""
Reconciliation Service

Loads a session's completed trips and payout transactions, runs the bonus
engine and shapes the result for the summary and promo endpoints. Nothing is
cached: every call recomputes from the stored records.
"""

import io
from decimal import Decimal
from typing import List, Tuple

import pandas as pd
from openpyxl.styles import Font
from sqlalchemy.orm import Session

from fleetrecon.core.config import settings
from fleetrecon.reconciliation.engine import ZERO, DriverSummary, compute_driver_summaries
from fleetrecon.reconciliation.exceptions import InvalidReportFormatError
from fleetrecon.records.repository import RecordRepository
from fleetrecon.utils.logger import get_logger

logger = get_logger(__name__)

PROMO_COLUMNS = {
    "license_plate": "Kennzeichen",
    "month": "Monat",
    "trip_count": "Fahrten",
    "theoretical_bonus": "Theoretischer Bonus (EUR)",
    "actual_paid": "Ausgezahlt (EUR)",
    "difference": "Differenz (EUR)",
}


class ReconciliationService:
    """Service layer for bonus reconciliation"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = RecordRepository(db)

    def get_driver_summaries(self, session_id: str) -> List[DriverSummary]:
        trips = self.repo.get_completed_trips(session_id)
        payouts = self.repo.get_payout_transactions(session_id)
        summaries = compute_driver_summaries(trips, payouts, settings.bonus_tier_table)
        logger.info(
            "Computed driver summaries", session_id=session_id,
            trips=len(trips), payouts=len(payouts), plates=len(summaries),
        )
        return summaries

    def promo_report(self, session_id: str) -> dict:
        """Flat per plate and month rows plus totals"""
        summaries = self.get_driver_summaries(session_id)

        rows = []
        months = set()
        for summary in summaries:
            for month, stats in sorted(summary.stats.items()):
                months.add(month)
                rows.append({
                    "license_plate": summary.license_plate,
                    "month": month,
                    "trip_count": stats.count,
                    "theoretical_bonus": stats.bonus,
                    "actual_paid": stats.paid_amount,
                    "difference": stats.difference,
                })

        return {
            "rows": rows,
            "summary": {
                "total_theoretical_bonus": sum((row["theoretical_bonus"] for row in rows), ZERO),
                "total_actual_paid": sum((row["actual_paid"] for row in rows), ZERO),
                "total_difference": sum((row["difference"] for row in rows), ZERO),
                "total_trips": sum(row["trip_count"] for row in rows),
                "license_plate_count": len(summaries),
                "month_count": len(months),
            },
        }

    def export_promo_report(self, session_id: str, fmt: str = "excel") -> Tuple[bytes, str, str]:
        """
        Render the promo report as a downloadable file.

        Returns:
            (content, media_type, filename)
        """
        fmt = (fmt or "").lower()
        if fmt not in ("excel", "csv"):
            raise InvalidReportFormatError(fmt)

        report = self.promo_report(session_id)
        df = pd.DataFrame(report["rows"], columns=list(PROMO_COLUMNS))
        for column in ("theoretical_bonus", "actual_paid", "difference"):
            df[column] = df[column].map(lambda value: float(Decimal(value)))
        df = df.rename(columns=PROMO_COLUMNS)

        if fmt == "csv":
            content = df.to_csv(index=False, sep=";", decimal=",").encode("utf-8-sig")
            return content, "text/csv", f"promo_{session_id}.csv"

        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name="Promo", index=False)
            worksheet = writer.sheets["Promo"]
            for cell in worksheet[1]:
                cell.font = Font(bold=True)
        return (
            buffer.getvalue(),
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            f"promo_{session_id}.xlsx",
        )
