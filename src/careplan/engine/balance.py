"""
Monthly Balance
===============
Scheduled hours of a worker/client pair against the client's contracted
monthly hours. Pure function of its inputs; nothing is persisted here.

    balance = scheduled_hours - contracted_hours
    > 0  over-scheduled (excess)
    < 0  under-scheduled (deficit)
"""
import math
from datetime import date
from typing import Any, Iterable, List, Optional

from careplan.engine.hours import month_hours, round_hours
from careplan.models.anomaly import Anomaly, AnomalyKind
from careplan.models.config import EngineConfig
from careplan.models.results import BalanceStatus, HoursBreakdown, MonthlyBalance, ResolvedDayEntry
from careplan.utils.logging_setup import get_logger

logger = get_logger("careplan.engine.balance")


def balance_status(balance: float, tolerance: float) -> BalanceStatus:
    """Classify a balance; |balance| below tolerance is PERFECT."""
    if abs(balance) < tolerance:
        return BalanceStatus.PERFECT
    if balance > 0:
        return BalanceStatus.EXCESS
    return BalanceStatus.DEFICIT


def hours_breakdown(entries: Iterable[ResolvedDayEntry], decimals: int = 2) -> HoursBreakdown:
    """Split entries into holiday/weekend days and ordinary working days."""
    holiday_days, working_days = set(), set()
    holiday_entries, working_entries = [], []
    for entry in entries:
        if entry.is_holiday or entry.is_weekend:
            holiday_days.add(entry.date)
            holiday_entries.append(entry)
        else:
            working_days.add(entry.date)
            working_entries.append(entry)
    return HoursBreakdown(
        holiday_days=len(holiday_days),
        holiday_hours=month_hours(holiday_entries, decimals=decimals),
        working_days=len(working_days),
        working_hours=month_hours(working_entries, decimals=decimals),
    )


def used_hours(entries: Iterable[ResolvedDayEntry], as_of: date, decimals: int = 2) -> float:
    """Hours of entries dated on or before `as_of` (service already delivered)."""
    return month_hours((e for e in entries if e.date <= as_of), decimals=decimals)


def _coerce_contracted(value: Any, anomalies: Optional[List[Anomaly]]) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        number = math.nan
    if math.isfinite(number):
        return number
    logger.warning(f"Non-numeric contracted hours {value!r}, counted as 0h")
    if anomalies is not None:
        anomalies.append(Anomaly(
            kind=AnomalyKind.NON_NUMERIC_HOURS,
            message=f"Non-numeric contracted hours {value!r} counted as 0",
        ))
    return 0.0


def compute_balance(
    user_id: str,
    worker_id: Optional[str],
    month: int,
    year: int,
    contracted_monthly_hours: Any,
    entries: Iterable[ResolvedDayEntry],
    config: Optional[EngineConfig] = None,
    anomalies: Optional[List[Anomaly]] = None,
) -> MonthlyBalance:
    """
    Compute the monthly balance of a worker/client pair.

    Entries are filtered to the pair and to the month, so the full list of
    a client's entries can be passed. worker_id=None balances the client
    across all of its workers.

    Args:
        user_id: Client id
        worker_id: Worker id, or None for all workers of the client
        month: Month 1-12
        year: Calendar year
        contracted_monthly_hours: Client's contracted hours for the month
        entries: Resolved entries
        config: Engine configuration
        anomalies: Optional list collecting non-numeric hours anomalies

    Returns:
        MonthlyBalance (no clamping; negative and positive are both valid)
    """
    config = config or EngineConfig()
    user_id = str(user_id)
    pair_entries = [
        e for e in entries
        if e.user_id == user_id
        and (worker_id is None or e.worker_id == str(worker_id))
        and e.date.year == year and e.date.month == month
    ]

    contracted = _coerce_contracted(contracted_monthly_hours, anomalies)
    scheduled = month_hours(pair_entries, anomalies, decimals=config.rounding_decimals)
    balance = round_hours(scheduled - contracted, config.rounding_decimals)
    percentage = round_hours(scheduled / contracted * 100, 1) if contracted > 0 else 0.0

    return MonthlyBalance(
        worker_id=str(worker_id) if worker_id is not None else None,
        user_id=user_id,
        month=month,
        year=year,
        contracted_hours=round_hours(contracted, config.rounding_decimals),
        scheduled_hours=scheduled,
        balance=balance,
        status=balance_status(balance, config.balance_tolerance),
        percentage=percentage,
        breakdown=hours_breakdown(pair_entries, config.rounding_decimals),
    )
