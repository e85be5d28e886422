"""
Month Calendar Helpers
======================
Day classification shared by the resolver, the detector and reports:
weekday keys, weekends, holidays, and which assignment types may serve a day.
"""
from calendar import monthrange
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Iterable, Iterator, List, Optional, Set

from careplan.models.assignment import AssignmentType, parse_date
from careplan.models.holiday import Holiday
from careplan.models.rules import WEEKDAY_KEYS, WEEKEND_KEYS


def days_in_month(year: int, month: int) -> int:
    """Number of days in the month (month 1-12)."""
    return monthrange(year, month)[1]


def month_days(year: int, month: int) -> Iterator[date]:
    """Iterate over every calendar day of the month."""
    for d in range(1, days_in_month(year, month) + 1):
        yield date(year, month, d)


def weekday_key(day: date) -> str:
    """Schedule key for the day of week (monday ... sunday)."""
    return WEEKDAY_KEYS[day.weekday()]


def is_weekend(day: date) -> bool:
    return weekday_key(day) in WEEKEND_KEYS


def holiday_index(holidays: Optional[Iterable[Any]]) -> Dict[date, Holiday]:
    """
    Normalize holidays into a {date: Holiday} lookup.

    Accepts Holiday objects, dates and ISO date strings, or an existing
    index. Inactive holidays are skipped; bare dates get an unnamed Holiday.
    """
    if isinstance(holidays, dict):
        holidays = holidays.values()
    index: Dict[date, Holiday] = {}
    for item in holidays or []:
        if isinstance(item, Holiday):
            if item.is_active:
                index.setdefault(item.date, item)
            continue
        day = parse_date(item)
        if day is None:
            raise ValueError(f"Not a holiday or date: {item!r}")
        index.setdefault(day, Holiday(date=day, name=""))
    return index


def holiday_dates(holidays: Optional[Iterable[Any]]) -> Set[date]:
    """Set of active holiday dates."""
    return set(holiday_index(holidays))


@dataclass(frozen=True)
class DayInfo:
    """Classification of one calendar day."""
    date: date
    weekday_key: str
    is_weekend: bool
    is_holiday: bool
    holiday: Optional[Holiday] = None

    @property
    def is_working_day(self) -> bool:
        """Monday-Friday and not a holiday."""
        return not self.is_weekend and not self.is_holiday

    @property
    def is_holiday_day(self) -> bool:
        """Weekend or holiday."""
        return self.is_weekend or self.is_holiday

    @property
    def is_weekday_holiday(self) -> bool:
        """A holiday landing Monday-Friday, the only case the holiday schedule applies."""
        return self.is_holiday and not self.is_weekend


def day_info(day: date, holidays: Dict[date, Holiday]) -> DayInfo:
    """Classify a day against a holiday index."""
    holiday = holidays.get(day)
    return DayInfo(
        date=day,
        weekday_key=weekday_key(day),
        is_weekend=is_weekend(day),
        is_holiday=holiday is not None,
        holiday=holiday,
    )


def month_calendar(year: int, month: int, holidays: Optional[Iterable[Any]] = None) -> List[DayInfo]:
    """Classify every day of a month."""
    index = holiday_index(holidays)
    return [day_info(d, index) for d in month_days(year, month)]


def can_type_work_on_day(assignment_type: AssignmentType, info: DayInfo) -> bool:
    """
    Whether an assignment type's intent covers a day.

    Informational only (calendar colouring, default forms). The resolver
    always follows the schedule's enabled flags.
    """
    if assignment_type == AssignmentType.LABORABLES:
        return info.is_working_day
    if assignment_type == AssignmentType.FESTIVOS:
        return info.is_holiday_day
    return True


def available_days(assignment_type: AssignmentType, calendar: List[DayInfo]) -> List[DayInfo]:
    """Days of a month calendar matching the type's intent."""
    return [info for info in calendar if can_type_work_on_day(assignment_type, info)]
