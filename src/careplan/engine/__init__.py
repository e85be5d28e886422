# careplan/engine - Schedule resolution, hours, reassignments and balances
from .balance import compute_balance, used_hours
from .calendar import DayInfo, holiday_dates, month_calendar
from .holidays import (
    BUILTIN_HOLIDAYS,
    CachingHolidayProvider,
    CsvHolidayProvider,
    HolidayCalendarProvider,
    StaticHolidayProvider,
    fetch_holidays,
)
from .hours import compute_weekly_hours, day_hours, month_hours, slot_hours, week_hours
from .planning import PlanningDay, UserMonthPlan, plan_month, plan_user_month
from .reassignment import detect_reassignments
from .resolver import Resolution, effective_schedule_key, resolve_month

__all__ = [
    "resolve_month",
    "effective_schedule_key",
    "Resolution",
    "slot_hours",
    "day_hours",
    "week_hours",
    "compute_weekly_hours",
    "month_hours",
    "detect_reassignments",
    "compute_balance",
    "used_hours",
    "plan_user_month",
    "plan_month",
    "UserMonthPlan",
    "PlanningDay",
    "DayInfo",
    "month_calendar",
    "holiday_dates",
    "HolidayCalendarProvider",
    "StaticHolidayProvider",
    "CsvHolidayProvider",
    "CachingHolidayProvider",
    "BUILTIN_HOLIDAYS",
    "fetch_holidays",
]
