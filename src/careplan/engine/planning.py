"""
Monthly Planning
================
Bridge between the engine components and report consumers: resolves every
assignment of a client once, aggregates service per calendar day, detects
holiday reassignments and computes balances.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

import pandas as pd

from careplan.engine.balance import compute_balance, used_hours
from careplan.engine.calendar import holiday_index, weekday_key
from careplan.engine.holidays import HolidayCalendarProvider, fetch_holidays
from careplan.engine.hours import month_hours, round_hours
from careplan.engine.reassignment import detect_reassignments
from careplan.engine.resolver import resolve_assignments
from careplan.models.anomaly import Anomaly
from careplan.models.assignment import Assignment, Client
from careplan.models.config import EngineConfig
from careplan.models.rules import DAY_LABELS
from careplan.models.results import MonthlyBalance, ReassignmentRecord, ResolvedDayEntry
from careplan.utils.logging_setup import get_logger, log_function_call
from careplan.utils.structured_logging import get_structured_logger

logger = get_logger("careplan.engine.planning")
log = get_structured_logger("careplan.engine.planning")

PLANNING_COLUMNS = ["date", "day", "hours", "is_holiday", "is_weekend", "workers", "holiday_name"]


@dataclass(frozen=True)
class PlanningDay:
    """Total service a client receives on one calendar day."""
    date: date
    hours: float
    is_holiday: bool
    is_weekend: bool
    worker_ids: Tuple[str, ...] = ()
    holiday_name: str = ""


@dataclass
class UserMonthPlan:
    """Everything computed for one client and one month."""
    user_id: str
    year: int
    month: int
    contracted_hours: Optional[float] = None
    days: List[PlanningDay] = field(default_factory=list)
    entries: List[ResolvedDayEntry] = field(default_factory=list)
    reassignments: List[ReassignmentRecord] = field(default_factory=list)
    balances: List[MonthlyBalance] = field(default_factory=list)  # One per worker
    total_balance: Optional[MonthlyBalance] = None                # All workers together
    anomalies: List[Anomaly] = field(default_factory=list)

    @property
    def scheduled_hours(self) -> float:
        return month_hours(self.entries)

    @property
    def worker_ids(self) -> List[str]:
        return sorted({e.worker_id for e in self.entries})

    def hours_until(self, as_of: date) -> float:
        """Hours delivered on or before a date."""
        return used_hours(self.entries, as_of)

    def balance_for(self, worker_id: str) -> Optional[MonthlyBalance]:
        for b in self.balances:
            if b.worker_id == str(worker_id):
                return b
        return None

    def to_dataframe(self) -> pd.DataFrame:
        """One row per served day."""
        if not self.days:
            return pd.DataFrame(columns=PLANNING_COLUMNS)
        rows = [
            {
                "date": d.date,
                "day": DAY_LABELS[weekday_key(d.date)],
                "hours": d.hours,
                "is_holiday": d.is_holiday,
                "is_weekend": d.is_weekend,
                "workers": ", ".join(d.worker_ids),
                "holiday_name": d.holiday_name,
            }
            for d in self.days
        ]
        return pd.DataFrame(rows, columns=PLANNING_COLUMNS)

    def summary(self) -> Dict[str, Any]:
        """Get summary dictionary for display."""
        total = self.total_balance
        return {
            "user_id": self.user_id,
            "year": self.year,
            "month": self.month,
            "days": len(self.days),
            "scheduled_hours": self.scheduled_hours,
            "contracted_hours": self.contracted_hours,
            "balance": total.balance if total else None,
            "status": total.status.value if total else None,
            "workers": self.worker_ids,
            "reassignments": len(self.reassignments),
            "anomalies": len(self.anomalies),
        }


def _planning_days(entries: Sequence[ResolvedDayEntry], holidays: Dict, decimals: int = 2) -> List[PlanningDay]:
    by_date: Dict[date, List[ResolvedDayEntry]] = {}
    for entry in entries:
        by_date.setdefault(entry.date, []).append(entry)

    days = []
    for day in sorted(by_date):
        day_entries = by_date[day]
        holiday = holidays.get(day)
        days.append(PlanningDay(
            date=day,
            hours=round_hours(sum(e.hours for e in day_entries), decimals),
            is_holiday=day_entries[0].is_holiday,
            is_weekend=day_entries[0].is_weekend,
            worker_ids=tuple(sorted({e.worker_id for e in day_entries})),
            holiday_name=holiday.name if holiday else "",
        ))
    return days


@log_function_call
def plan_user_month(
    user: Union[Client, str],
    assignments: Iterable[Assignment],
    year: int,
    month: int,
    holidays: Optional[Iterable[Any]] = None,
    contracted_hours: Optional[float] = None,
    config: Optional[EngineConfig] = None,
) -> UserMonthPlan:
    """
    Build the month plan of one client.

    Args:
        user: Client (its monthly_hours is the contract) or client id
        assignments: Assignments; other clients' are ignored
        year: Calendar year
        month: Month 1-12
        holidays: Holiday objects, dates or ISO strings
        contracted_hours: Overrides the client's monthly_hours
        config: Engine configuration

    Returns:
        UserMonthPlan. Balances are only computed when contracted hours are known.
    """
    config = config or EngineConfig()
    user_id = user.id if isinstance(user, Client) else str(user)
    if contracted_hours is None and isinstance(user, Client):
        contracted_hours = user.monthly_hours

    own = [a for a in assignments if a.user_id == user_id]
    index = holiday_index(holidays)

    resolutions = resolve_assignments(own, year, month, index, config)
    entries = sorted(
        (e for r in resolutions.values() for e in r.entries),
        key=lambda e: (e.date, e.worker_id, e.assignment_id),
    )
    anomalies = [a for r in resolutions.values() for a in r.anomalies]

    plan = UserMonthPlan(
        user_id=user_id,
        year=year,
        month=month,
        contracted_hours=contracted_hours,
        days=_planning_days(entries, index, config.rounding_decimals),
        entries=entries,
        reassignments=detect_reassignments(user_id, own, year, month, index, config),
        anomalies=anomalies,
    )

    if contracted_hours is not None:
        for worker_id in plan.worker_ids:
            plan.balances.append(compute_balance(
                user_id, worker_id, month, year, contracted_hours, entries, config, plan.anomalies,
            ))
        plan.total_balance = compute_balance(
            user_id, None, month, year, contracted_hours, entries, config, plan.anomalies,
        )

    log.bind(user_id=user_id, year=year, month=month).info(
        "month_planned",
        assignments=len(own),
        days=len(plan.days),
        scheduled_hours=plan.scheduled_hours,
        reassignments=len(plan.reassignments),
        anomalies=len(plan.anomalies),
    )
    return plan


def plan_month(
    clients: Iterable[Union[Client, str]],
    assignments: Iterable[Assignment],
    year: int,
    month: int,
    provider: HolidayCalendarProvider,
    config: Optional[EngineConfig] = None,
) -> List[UserMonthPlan]:
    """
    Plan a month for several clients, fetching holidays once.

    Raises:
        HolidayProviderError: if the holiday calendar is unavailable; no
            partial plans are returned in that case
    """
    holidays = fetch_holidays(provider, year)
    assignments = list(assignments)
    plans = [plan_user_month(c, assignments, year, month, holidays, config=config) for c in clients]
    logger.info(f"Planned {len(plans)} clients for {year}-{month:02d}")
    return plans
