# fleetrecon/reconciliation/engine.py

"""
Bonus & Reconciliation Engine

Pure computation, no I/O: completed trips per plate and month are mapped to
a theoretical bonus through the tier table and netted against what was
actually paid out for that plate and month. The result does not depend on
input order.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Protocol, Sequence, Tuple

from fleetrecon.ingest.plates import normalize_plate
from fleetrecon.records.models import is_completed_status

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")

DEFAULT_BONUS_TIERS: Tuple[Tuple[int, int], ...] = ((700, 400), (250, 250))


class TripLike(Protocol):
    license_plate: str
    order_time: datetime
    trip_status: str


class TransactionLike(Protocol):
    license_plate: str
    transaction_time: datetime
    amount: int


@dataclass
class MonthlyStats:
    month_key: str
    count: int = 0
    bonus: Decimal = ZERO
    paid_amount: Decimal = ZERO
    difference: Decimal = ZERO

    def to_dict(self) -> dict:
        return {
            "month_key": self.month_key,
            "count": self.count,
            "bonus": self.bonus,
            "paid_amount": self.paid_amount,
            "difference": self.difference,
        }


@dataclass
class DriverSummary:
    license_plate: str
    stats: Dict[str, MonthlyStats] = field(default_factory=dict)
    total_count: int = 0
    total_bonus: Decimal = ZERO
    total_paid: Decimal = ZERO
    total_difference: Decimal = ZERO

    def to_dict(self) -> dict:
        return {
            "license_plate": self.license_plate,
            "stats": {key: stats.to_dict() for key, stats in self.stats.items()},
            "total_count": self.total_count,
            "total_bonus": self.total_bonus,
            "total_paid": self.total_paid,
            "total_difference": self.total_difference,
        }


def month_key(value: datetime) -> str:
    return value.strftime("%Y-%m")


def cents_to_euros(cents: int) -> Decimal:
    return (Decimal(cents) / 100).quantize(CENTS)


def bonus_for_count(count: int, tiers: Optional[Sequence[Tuple[int, int]]] = None) -> Decimal:
    """
    Theoretical bonus in euros for a monthly completed-trip count.

    Tier thresholds are inclusive lower bounds; the highest reached tier wins.
    """
    for threshold, bonus in sorted(tiers or DEFAULT_BONUS_TIERS, key=lambda tier: tier[0], reverse=True):
        if count >= threshold:
            return Decimal(bonus).quantize(CENTS)
    return ZERO


def compute_driver_summaries(
    trips: Iterable[TripLike],
    transactions: Iterable[TransactionLike],
    tiers: Optional[Sequence[Tuple[int, int]]] = None,
) -> List[DriverSummary]:
    """
    Build one DriverSummary per plate, sorted by plate.

    Only completed trips count. Every given transaction counts as paid for
    its plate and month; callers decide which transactions are payouts.
    Transactions without a plate are ignored.
    """
    trip_counts: Dict[Tuple[str, str], int] = {}
    for trip in trips:
        if not is_completed_status(trip.trip_status):
            continue
        plate = normalize_plate(trip.license_plate)
        if not plate:
            continue
        key = (plate, month_key(trip.order_time))
        trip_counts[key] = trip_counts.get(key, 0) + 1

    paid_cents: Dict[Tuple[str, str], int] = {}
    for transaction in transactions:
        plate = normalize_plate(transaction.license_plate)
        if not plate:
            continue
        key = (plate, month_key(transaction.transaction_time))
        paid_cents[key] = paid_cents.get(key, 0) + transaction.amount

    summaries: Dict[str, DriverSummary] = {}
    for plate, month in sorted(set(trip_counts) | set(paid_cents)):
        count = trip_counts.get((plate, month), 0)
        bonus = bonus_for_count(count, tiers)
        paid = cents_to_euros(paid_cents.get((plate, month), 0))

        summary = summaries.setdefault(plate, DriverSummary(license_plate=plate))
        summary.stats[month] = MonthlyStats(
            month_key=month,
            count=count,
            bonus=bonus,
            paid_amount=paid,
            difference=bonus - paid,
        )
        summary.total_count += count
        summary.total_bonus += bonus
        summary.total_paid += paid
        summary.total_difference += bonus - paid

    return [summaries[plate] for plate in sorted(summaries)]
