"""
Hours Aggregation
=================
Sums time-slot durations into day, week and month totals.

Rules:
    - Times are "HH:MM" same-day wall-clock values, no timezone handling.
    - A slot that fails to parse or has end <= start counts as 0 hours and
      is reported as a DROPPED_SLOT anomaly. Nothing here raises.
    - Intermediate sums keep full precision; each public function rounds
      its final result (2 decimals, half-up).
    - NaN / infinite / non-numeric hours are coerced to 0.
"""
import math
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable, List, Optional

from careplan.models.anomaly import Anomaly, AnomalyKind
from careplan.models.config import EngineConfig
from careplan.models.schedule import DaySchedule, TimeSlot, WeeklySchedule
from careplan.utils.logging_setup import get_logger

logger = get_logger("careplan.engine.hours")

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")

MINUTES_PER_DAY = 24 * 60


def parse_time(value: Any) -> Optional[float]:
    """
    Parse a wall-clock time into minutes since midnight.

    Accepts "HH:MM" and "HH:MM:SS" (SQL time columns). "24:00" is accepted
    as end of day.

    Returns:
        Minutes since midnight, or None if the value is not a valid time
    """
    if not isinstance(value, str):
        return None
    m = _TIME_RE.match(value.strip())
    if not m:
        return None
    hours, minutes = int(m.group(1)), int(m.group(2))
    seconds = int(m.group(3) or 0)
    if minutes > 59 or seconds > 59:
        return None
    if hours == 24 and minutes == 0 and seconds == 0:
        return float(MINUTES_PER_DAY)
    if hours > 23:
        return None
    return hours * 60 + minutes + seconds / 60


def round_hours(value: Any, decimals: int = 2) -> float:
    """Round half-up to `decimals`; non-finite or non-numeric values become 0."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    try:
        quantum = Decimal(1).scaleb(-decimals)
        return float(Decimal(str(number)).quantize(quantum, rounding=ROUND_HALF_UP))
    except InvalidOperation:
        return 0.0


def _slot_duration(slot: TimeSlot, anomalies: Optional[List[Anomaly]]) -> float:
    """Unrounded slot duration in hours; 0 (and an anomaly) when invalid."""
    start = parse_time(getattr(slot, "start", None))
    end = parse_time(getattr(slot, "end", None))

    if start is None or end is None:
        reason = f"unparseable time in slot {slot}"
    elif end <= start:
        reason = f"slot {slot} ends before it starts"
    else:
        return (end - start) / 60

    logger.warning(f"Dropped {reason}, counted as 0h")
    if anomalies is not None:
        anomalies.append(Anomaly(kind=AnomalyKind.DROPPED_SLOT, message=f"Dropped {reason}"))
    return 0.0


def _day_duration(day: DaySchedule, anomalies: Optional[List[Anomaly]]) -> float:
    if not day.enabled:
        return 0.0
    return sum(_slot_duration(slot, anomalies) for slot in day.time_slots)


def slot_hours(slot: Any, anomalies: Optional[List[Anomaly]] = None, decimals: int = 2) -> float:
    """
    Duration of one slot in hours, never negative.

    Args:
        slot: TimeSlot (or any value TimeSlot.from_value accepts)
        anomalies: Optional list collecting DROPPED_SLOT anomalies
        decimals: Rounding precision

    Returns:
        Hours >= 0
    """
    return round_hours(_slot_duration(TimeSlot.from_value(slot), anomalies), decimals)


def day_hours(day: Any, anomalies: Optional[List[Anomaly]] = None, decimals: Optional[int] = 2) -> float:
    """
    Total hours of an enabled day; 0 for a disabled or unreadable day.

    decimals=None keeps full precision, for values that are summed later.
    """
    parsed = DaySchedule.from_value(day)
    if parsed is None:
        return 0.0
    total = _day_duration(parsed, anomalies)
    if decimals is None:
        return total
    return round_hours(total, decimals)


def week_hours(schedule: Any, anomalies: Optional[List[Anomaly]] = None, decimals: int = 2) -> float:
    """
    Sum of all eight keys, holiday included.

    This is the default full-week estimate shown while editing an
    assignment, not the hours of any specific month.
    """
    parsed = WeeklySchedule.from_dict(schedule, anomalies)
    total = sum(_day_duration(day, anomalies) for _, day in parsed.items())
    return round_hours(total, decimals)


# Explicit replacement for recomputing weekly hours on every form change
compute_weekly_hours = week_hours


def _entry_hours(entry: Any) -> Any:
    if isinstance(entry, dict):
        return entry.get("hours")
    return getattr(entry, "hours", entry)


def month_hours(entries: Iterable[Any], anomalies: Optional[List[Anomaly]] = None, decimals: int = 2) -> float:
    """
    Sum of `.hours` over resolved entries.

    Entries whose hours are NaN, infinite or not numbers contribute 0 and
    are reported as NON_NUMERIC_HOURS anomalies.
    """
    total = 0.0
    for entry in entries:
        raw = _entry_hours(entry)
        try:
            value = float(raw)
        except (TypeError, ValueError):
            value = math.nan
        if not math.isfinite(value):
            entry_date = getattr(entry, "date", None)
            logger.warning(f"Non-numeric hours {raw!r} on {entry_date}, counted as 0h")
            if anomalies is not None:
                anomalies.append(Anomaly(
                    kind=AnomalyKind.NON_NUMERIC_HOURS,
                    message=f"Non-numeric hours {raw!r} counted as 0",
                    assignment_id=getattr(entry, "assignment_id", None),
                    date=entry_date,
                ))
            continue
        total += value
    return round_hours(total, decimals)


def approximate_monthly_hours(weekly_hours: float, config: Optional[EngineConfig] = None) -> float:
    """Quick monthly estimate: weekly hours times the average weeks per month."""
    config = config or EngineConfig()
    return round_hours(round_hours(weekly_hours, 6) * config.weeks_per_month, config.rounding_decimals)
