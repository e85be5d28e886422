"""Pytest configuration and fixtures."""
import sys
from datetime import date
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from careplan.models.assignment import Assignment, Client
from careplan.models.holiday import Holiday
from careplan.models.schedule import DaySchedule, TimeSlot, WeeklySchedule

# 2024-10-07 is a Monday; used as a synthetic weekday holiday
SYNTHETIC_HOLIDAY = date(2024, 10, 7)
OCTOBER_MONDAYS = [date(2024, 10, d) for d in (7, 14, 21, 28)]


def day(*slots, enabled=True):
    """DaySchedule from ("HH:MM", "HH:MM") pairs."""
    return DaySchedule(enabled=enabled, time_slots=[TimeSlot(s, e) for s, e in slots])


def schedule(**days):
    """WeeklySchedule with the given keys set and every other key disabled."""
    return WeeklySchedule(**days)


@pytest.fixture
def october_holidays():
    """Synthetic Monday holiday plus the real (Saturday) national holiday."""
    return [
        Holiday(date=SYNTHETIC_HOLIDAY, name="Festivo sintético"),
        Holiday(date=date(2024, 10, 12), name="Fiesta Nacional de España"),
    ]


@pytest.fixture
def monday_assignment():
    """Monday 08:00-11:00, holiday key disabled."""
    return Assignment(
        id="a1",
        worker_id="w1",
        user_id="u1",
        start_date=date(2024, 1, 1),
        schedule=schedule(monday=day(("08:00", "11:00"))),
    )


@pytest.fixture
def monday_with_holiday_assignment():
    """Monday 08:00-11:00, holiday override 09:00-10:00."""
    return Assignment(
        id="a1",
        worker_id="w1",
        user_id="u1",
        start_date=date(2024, 1, 1),
        schedule=schedule(
            monday=day(("08:00", "11:00")),
            holiday=day(("09:00", "10:00")),
        ),
    )


@pytest.fixture
def two_worker_assignments():
    """Weekday worker w1 and holiday/weekend worker w2 serving the same client."""
    weekday = Assignment(
        id="A",
        worker_id="w1",
        user_id="u1",
        start_date=date(2024, 1, 1),
        assignment_type="laborables",
        schedule=schedule(monday=day(("08:00", "11:00"))),
    )
    holiday = Assignment(
        id="B",
        worker_id="w2",
        user_id="u1",
        start_date=date(2024, 1, 1),
        assignment_type="festivos",
        schedule=schedule(holiday=day(("09:00", "10:00"))),
    )
    return [weekday, holiday]


@pytest.fixture
def client_u1():
    return Client(id="u1", name="Ana", surname="García", monthly_hours=10)
