"""
Schedule Resolution
===================
Expands an assignment's weekly schedule into concrete service days for a
month. This is the single place where the holiday override is decided;
the balance engine, the reassignment detector and reports all go through
resolve_month.

Holiday override:
    A public holiday landing Monday-Friday uses the `holiday` schedule key
    when that key is enabled. Weekend holidays keep the saturday/sunday
    schedule. A disabled `holiday` key means no override: the plain
    weekday schedule applies.
"""
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Dict, Iterable, Iterator, List, Optional

import pandas as pd

from careplan.engine.calendar import DayInfo, day_info, holiday_index, month_days
from careplan.engine.hours import day_hours, month_hours, round_hours
from careplan.models.anomaly import Anomaly, AnomalyKind, count_anomalies
from careplan.models.assignment import Assignment
from careplan.models.config import EngineConfig
from careplan.models.results import ResolvedDayEntry
from careplan.models.rules import HOLIDAY_KEY
from careplan.models.schedule import WeeklySchedule
from careplan.utils.logging_setup import get_logger

logger = get_logger("careplan.engine.resolver")

ENTRY_COLUMNS = [
    "date", "assignment_id", "worker_id", "user_id",
    "is_holiday", "is_weekend", "hours", "slots", "schedule_key",
]


@dataclass
class Resolution:
    """Resolved service days of one assignment for one month."""
    assignment_id: str
    year: int
    month: int
    entries: List[ResolvedDayEntry] = field(default_factory=list)
    anomalies: List[Anomaly] = field(default_factory=list)
    decimals: int = 2  # Rounding of totals; entry hours stay unrounded

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[ResolvedDayEntry]:
        return iter(self.entries)

    def __getitem__(self, idx):
        return self.entries[idx]

    @property
    def dropped_slots(self) -> int:
        """Number of slot occurrences counted as 0h."""
        return count_anomalies(self.anomalies, AnomalyKind.DROPPED_SLOT)

    @property
    def repaired_schedules(self) -> int:
        """Number of schedule keys replaced by a disabled day on load."""
        return count_anomalies(self.anomalies, AnomalyKind.REPAIRED_SCHEDULE)

    @property
    def total_hours(self) -> float:
        return month_hours(self.entries, decimals=self.decimals)

    def entry_for(self, day: date) -> Optional[ResolvedDayEntry]:
        """Entry for a calendar day, if the assignment serves that day."""
        for entry in self.entries:
            if entry.date == day:
                return entry
        return None

    def dates(self) -> List[date]:
        return [e.date for e in self.entries]

    def to_dataframe(self) -> pd.DataFrame:
        """Convert entries to a DataFrame."""
        if not self.entries:
            return pd.DataFrame(columns=ENTRY_COLUMNS)
        df = pd.DataFrame([e.to_dict() for e in self.entries], columns=ENTRY_COLUMNS)
        df["hours"] = df["hours"].apply(lambda h: round_hours(h, self.decimals))
        return df


def effective_schedule_key(schedule: WeeklySchedule, info: DayInfo) -> str:
    """
    Schedule key that governs a calendar day.

    Args:
        schedule: The assignment's weekly schedule
        info: Classification of the day

    Returns:
        "holiday" for an enabled override on a weekday holiday, else the weekday key
    """
    if info.is_weekday_holiday and schedule.holiday.enabled:
        return HOLIDAY_KEY
    return info.weekday_key


def resolve_month(
    assignment: Assignment,
    year: int,
    month: int,
    holidays: Optional[Iterable[Any]] = None,
    config: Optional[EngineConfig] = None,
    ignore_holidays: bool = False,
) -> Resolution:
    """
    Resolve one assignment's service days for a month.

    Only days where the effective DaySchedule is enabled and the day lies
    inside [start_date, end_date] (inclusive, open end) produce an entry.
    Assignments whose status is not active resolve to nothing.

    Args:
        assignment: Assignment to resolve
        year: Calendar year
        month: Month 1-12
        holidays: Holiday objects, dates or ISO strings (any year)
        config: Engine configuration
        ignore_holidays: Treat every day as a non-holiday (plain weekly pattern)

    Returns:
        Resolution with entries in date order and the anomalies collected
    """
    if not 1 <= month <= 12:
        raise ValueError(f"month must be 1-12, got {month}")
    config = config or EngineConfig()

    resolution = Resolution(
        assignment_id=assignment.id, year=year, month=month, decimals=config.rounding_decimals,
    )
    resolution.anomalies.extend(assignment.anomalies)

    if not config.is_status_active(assignment.status):
        logger.debug(f"Assignment {assignment.id} skipped: status {assignment.status.value}")
        return resolution

    if assignment.has_inverted_range:
        logger.warning(
            f"Assignment {assignment.id} ends ({assignment.end_date}) before it starts "
            f"({assignment.start_date}), treated as never active"
        )
        resolution.anomalies.append(Anomaly(
            kind=AnomalyKind.INVERTED_DATE_RANGE,
            message=f"end_date {assignment.end_date} before start_date {assignment.start_date}",
            assignment_id=assignment.id,
        ))
        return resolution

    index = {} if ignore_holidays else holiday_index(holidays)
    schedule = assignment.schedule

    for day in month_days(year, month):
        if not assignment.is_active_on(day):
            continue

        info = day_info(day, index)
        key = effective_schedule_key(schedule, info)
        day_schedule = schedule.day(key)
        if not day_schedule.enabled:
            continue

        slot_anomalies: List[Anomaly] = []
        hours = day_hours(day_schedule, slot_anomalies, decimals=None)
        resolution.anomalies.extend(
            replace(a, assignment_id=assignment.id, date=day, schedule_key=key)
            for a in slot_anomalies
        )

        resolution.entries.append(ResolvedDayEntry(
            date=day,
            assignment_id=assignment.id,
            worker_id=assignment.worker_id,
            user_id=assignment.user_id,
            is_holiday=info.is_holiday,
            is_weekend=info.is_weekend,
            hours=hours,
            slots=tuple(day_schedule.time_slots),
            schedule_key=key,
        ))

    logger.debug(
        f"Resolved assignment {assignment.id} for {year}-{month:02d}: "
        f"{len(resolution.entries)} days, {resolution.total_hours}h, "
        f"{resolution.dropped_slots} dropped slots"
        + (" (no-holiday pattern)" if ignore_holidays else "")
    )
    return resolution


def resolve_assignments(
    assignments: Iterable[Assignment],
    year: int,
    month: int,
    holidays: Optional[Iterable[Any]] = None,
    config: Optional[EngineConfig] = None,
    ignore_holidays: bool = False,
) -> Dict[str, Resolution]:
    """Resolve several assignments, keyed by assignment id (input order kept)."""
    index = {} if ignore_holidays else holiday_index(holidays)
    return {
        a.id: resolve_month(a, year, month, index, config, ignore_holidays)
        for a in assignments
    }
