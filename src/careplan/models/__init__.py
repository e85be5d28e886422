# careplan/models - Data models for schedules, assignments and computed views
from .anomaly import Anomaly, AnomalyKind
from .assignment import Assignment, AssignmentStatus, AssignmentType, Client
from .config import EngineConfig
from .holiday import Holiday, HolidayScope
from .results import (
    BalanceStatus,
    HoursBreakdown,
    MonthlyBalance,
    ReassignmentRecord,
    ResolvedDayEntry,
)
from .rules import HOLIDAY_KEY, SCHEDULE_KEYS, WEEKDAY_KEYS, WEEKEND_KEYS, WORKWEEK_KEYS
from .schedule import DaySchedule, TimeSlot, WeeklySchedule

__all__ = [
    "TimeSlot", "DaySchedule", "WeeklySchedule",
    "WEEKDAY_KEYS", "WORKWEEK_KEYS", "WEEKEND_KEYS", "HOLIDAY_KEY", "SCHEDULE_KEYS",
    "Assignment", "AssignmentType", "AssignmentStatus", "Client",
    "Holiday", "HolidayScope",
    "ResolvedDayEntry", "ReassignmentRecord", "MonthlyBalance", "BalanceStatus", "HoursBreakdown",
    "Anomaly", "AnomalyKind",
    "EngineConfig",
]
