"""
Computed Views
==============
Read-only results derived from assignments and holidays. They are
recomputed on demand and never used as a source for further derivation.
"""
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .schedule import TimeSlot


@dataclass(frozen=True)
class ResolvedDayEntry:
    """Service hours one assignment provides on one calendar day."""
    date: date
    assignment_id: str
    worker_id: str
    user_id: str
    is_holiday: bool
    is_weekend: bool
    hours: float  # Unrounded; totals are rounded once
    slots: Tuple[TimeSlot, ...] = ()
    schedule_key: str = ""  # Which of the eight keys was applied

    @property
    def used_holiday_schedule(self) -> bool:
        return self.schedule_key == "holiday"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "assignment_id": self.assignment_id,
            "worker_id": self.worker_id,
            "user_id": self.user_id,
            "is_holiday": self.is_holiday,
            "is_weekend": self.is_weekend,
            "hours": self.hours,
            "slots": ", ".join(str(s) for s in self.slots),
            "schedule_key": self.schedule_key,
        }


@dataclass(frozen=True)
class ReassignmentRecord:
    """A weekday holiday on which the covering workers differ from the plain weekday pattern."""
    date: date
    user_id: str
    expected_worker_id: Optional[str]  # From the no-holiday pattern
    actual_worker_id: Optional[str]    # From the holiday-aware resolution
    reason: str
    expected_worker_ids: Tuple[str, ...] = ()
    actual_worker_ids: Tuple[str, ...] = ()
    expected_hours: float = 0.0
    actual_hours: float = 0.0
    holiday_name: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "user_id": self.user_id,
            "expected_worker_id": self.expected_worker_id,
            "actual_worker_id": self.actual_worker_id,
            "reason": self.reason,
            "expected_worker_ids": list(self.expected_worker_ids),
            "actual_worker_ids": list(self.actual_worker_ids),
            "expected_hours": self.expected_hours,
            "actual_hours": self.actual_hours,
            "holiday_name": self.holiday_name,
        }


class BalanceStatus(str, Enum):
    """Scheduled vs. contracted hours."""
    EXCESS = "excess"    # Over-scheduled
    DEFICIT = "deficit"  # Under-scheduled
    PERFECT = "perfect"  # Within tolerance


@dataclass(frozen=True)
class HoursBreakdown:
    """Hours split between holiday/weekend days and ordinary working days."""
    holiday_days: int = 0
    holiday_hours: float = 0.0
    working_days: int = 0
    working_hours: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "holiday_days": self.holiday_days,
            "holiday_hours": self.holiday_hours,
            "working_days": self.working_days,
            "working_hours": self.working_hours,
        }


@dataclass(frozen=True)
class MonthlyBalance:
    """Scheduled minus contracted hours for a worker/client pair in a month."""
    worker_id: Optional[str]
    user_id: str
    month: int
    year: int
    contracted_hours: float
    scheduled_hours: float
    balance: float
    status: BalanceStatus = BalanceStatus.PERFECT
    percentage: float = 0.0
    breakdown: HoursBreakdown = field(default_factory=HoursBreakdown)

    @property
    def is_over_scheduled(self) -> bool:
        return self.status == BalanceStatus.EXCESS

    @property
    def is_under_scheduled(self) -> bool:
        return self.status == BalanceStatus.DEFICIT

    def to_dict(self) -> Dict[str, Any]:
        return {
            "worker_id": self.worker_id,
            "user_id": self.user_id,
            "month": self.month,
            "year": self.year,
            "contracted_hours": self.contracted_hours,
            "scheduled_hours": self.scheduled_hours,
            "balance": self.balance,
            "status": self.status.value,
            "percentage": self.percentage,
            **self.breakdown.to_dict(),
        }
