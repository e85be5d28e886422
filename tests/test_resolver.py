"""Tests for schedule resolution."""
from datetime import date

import pytest

from careplan.engine.calendar import day_info, holiday_index
from careplan.engine.resolver import effective_schedule_key, resolve_assignments, resolve_month
from careplan.models.anomaly import AnomalyKind
from careplan.models.assignment import Assignment, AssignmentStatus
from careplan.models.config import EngineConfig

from conftest import OCTOBER_MONDAYS, SYNTHETIC_HOLIDAY, day, schedule


class TestHolidayOverride:
    """Holiday key precedence on weekday holidays."""

    def test_disabled_holiday_keeps_weekday_schedule(self, monday_assignment, october_holidays):
        """Every Monday including the holiday gets 3h."""
        res = resolve_month(monday_assignment, 2024, 10, october_holidays)

        assert res.dates() == OCTOBER_MONDAYS
        assert all(e.hours == 3.0 for e in res)
        holiday_entry = res.entry_for(SYNTHETIC_HOLIDAY)
        assert holiday_entry.is_holiday is True
        assert holiday_entry.schedule_key == "monday"
        assert res.total_hours == 12.0

    def test_enabled_holiday_overrides(self, monday_with_holiday_assignment, october_holidays):
        """The holiday Monday takes the 1h holiday schedule, other Mondays keep 3h."""
        res = resolve_month(monday_with_holiday_assignment, 2024, 10, october_holidays)

        assert res.entry_for(SYNTHETIC_HOLIDAY).hours == 1.0
        assert res.entry_for(SYNTHETIC_HOLIDAY).schedule_key == "holiday"
        assert res.entry_for(SYNTHETIC_HOLIDAY).used_holiday_schedule
        for d in OCTOBER_MONDAYS[1:]:
            assert res.entry_for(d).hours == 3.0
        assert res.total_hours == 10.0

    def test_holiday_serves_disabled_weekday(self, october_holidays):
        """An enabled holiday key fires even when the plain weekday is disabled."""
        a = Assignment(id="h", worker_id="w2", user_id="u1", start_date=date(2024, 1, 1),
                       schedule=schedule(holiday=day(("09:00", "10:00"))))
        res = resolve_month(a, 2024, 10, october_holidays)
        assert res.dates() == [SYNTHETIC_HOLIDAY]

    def test_weekend_holiday_keeps_weekend_schedule(self, october_holidays):
        """2024-10-12 is a Saturday holiday: saturday schedule, no override."""
        a = Assignment(id="s", worker_id="w", user_id="u1", start_date=date(2024, 1, 1),
                       schedule=schedule(saturday=day(("10:00", "12:00")),
                                         holiday=day(("09:00", "10:00"))))
        res = resolve_month(a, 2024, 10, october_holidays)

        entry = res.entry_for(date(2024, 10, 12))
        assert entry.is_holiday and entry.is_weekend
        assert entry.schedule_key == "saturday"
        assert entry.hours == 2.0

    def test_weekend_holiday_with_disabled_weekend(self, october_holidays):
        """The holiday key never activates on a weekend."""
        a = Assignment(id="s", worker_id="w", user_id="u1", start_date=date(2024, 1, 1),
                       schedule=schedule(holiday=day(("09:00", "10:00"))))
        res = resolve_month(a, 2024, 10, october_holidays)
        assert res.entry_for(date(2024, 10, 12)) is None

    def test_effective_schedule_key(self, monday_with_holiday_assignment, october_holidays):
        index = holiday_index(october_holidays)
        s = monday_with_holiday_assignment.schedule
        assert effective_schedule_key(s, day_info(SYNTHETIC_HOLIDAY, index)) == "holiday"
        assert effective_schedule_key(s, day_info(date(2024, 10, 14), index)) == "monday"
        assert effective_schedule_key(s, day_info(date(2024, 10, 12), index)) == "saturday"

    def test_ignore_holidays(self, monday_with_holiday_assignment, october_holidays):
        """Counterfactual pass treats every day as a non-holiday."""
        res = resolve_month(monday_with_holiday_assignment, 2024, 10, october_holidays, ignore_holidays=True)
        assert all(e.hours == 3.0 for e in res)
        assert not any(e.is_holiday for e in res)


class TestDateRange:
    """Assignment bounds are inclusive."""

    def test_bounds_inclusive(self):
        a = Assignment(id="r", worker_id="w", user_id="u", start_date=date(2024, 10, 14),
                       end_date=date(2024, 10, 21), schedule=schedule(monday=day(("08:00", "09:00"))))
        res = resolve_month(a, 2024, 10, [])
        assert res.dates() == [date(2024, 10, 14), date(2024, 10, 21)]

    def test_single_day_range(self):
        a = Assignment(id="r", worker_id="w", user_id="u", start_date=date(2024, 10, 14),
                       end_date=date(2024, 10, 14), schedule=schedule(monday=day(("08:00", "09:00"))))
        assert len(resolve_month(a, 2024, 10, [])) == 1

    def test_starts_next_month(self, monday_assignment):
        monday_assignment.start_date = date(2024, 11, 1)
        assert len(resolve_month(monday_assignment, 2024, 10, [])) == 0

    def test_inverted_range(self):
        """Inverted range resolves to nothing and is reported."""
        a = Assignment(id="bad", worker_id="w", user_id="u", start_date=date(2024, 10, 20),
                       end_date=date(2024, 10, 1), schedule=schedule(monday=day(("08:00", "09:00"))))
        res = resolve_month(a, 2024, 10, [])
        assert len(res) == 0
        assert [x.kind for x in res.anomalies] == [AnomalyKind.INVERTED_DATE_RANGE]


class TestStatus:
    def test_paused_not_resolved(self, monday_assignment):
        monday_assignment.status = AssignmentStatus.PAUSED
        assert len(resolve_month(monday_assignment, 2024, 10, [])) == 0

    def test_configurable_statuses(self, monday_assignment):
        monday_assignment.status = AssignmentStatus.PAUSED
        cfg = EngineConfig(active_statuses=["active", "paused"])
        assert len(resolve_month(monday_assignment, 2024, 10, [], cfg)) == 4


class TestResolutionResult:
    """Structured result and anomalies."""

    def test_sequence_protocol(self, monday_assignment):
        res = resolve_month(monday_assignment, 2024, 10, [])
        assert len(res) == 4
        assert res[0].date == date(2024, 10, 7)
        assert [e.date for e in res] == OCTOBER_MONDAYS

    def test_dropped_slots_counted(self):
        """Inverted slot gives a 0h entry and one anomaly per occurrence."""
        a = Assignment(id="d", worker_id="w", user_id="u", start_date=date(2024, 1, 1),
                       schedule=schedule(monday=day(("10:00", "09:00"), ("11:00", "12:00"))))
        res = resolve_month(a, 2024, 10, [])
        assert all(e.hours == 1.0 for e in res)
        assert res.dropped_slots == 4
        first = res.anomalies[0]
        assert first.assignment_id == "d"
        assert first.date == date(2024, 10, 7)
        assert first.schedule_key == "monday"

    def test_repairs_carried(self):
        a = Assignment.from_dict({
            "id": "old", "worker_id": "w", "user_id": "u", "start_date": "2024-01-01",
            "schedule": {"monday": ["08:00", "10:00"]},
        })
        res = resolve_month(a, 2024, 10, [])
        assert res.repaired_schedules == 7
        assert res.total_hours == 8.0

    def test_entries_carry_ids_and_slots(self, monday_assignment):
        e = resolve_month(monday_assignment, 2024, 10, [])[0]
        assert (e.assignment_id, e.worker_id, e.user_id) == ("a1", "w1", "u1")
        assert [str(s) for s in e.slots] == ["08:00-11:00"]

    def test_to_dataframe(self, monday_assignment):
        df = resolve_month(monday_assignment, 2024, 10, []).to_dataframe()
        assert len(df) == 4
        assert df["hours"].sum() == 12.0

    def test_empty_dataframe_has_columns(self):
        a = Assignment(id="e", worker_id="w", user_id="u", start_date=date(2024, 1, 1))
        df = resolve_month(a, 2024, 10, []).to_dataframe()
        assert len(df) == 0
        assert "hours" in df.columns

    def test_idempotent(self, monday_with_holiday_assignment, october_holidays):
        first = resolve_month(monday_with_holiday_assignment, 2024, 10, october_holidays)
        second = resolve_month(monday_with_holiday_assignment, 2024, 10, october_holidays)
        assert first.entries == second.entries

    def test_bad_month(self, monday_assignment):
        with pytest.raises(ValueError):
            resolve_month(monday_assignment, 2024, 13, [])

    def test_resolve_assignments_keyed_by_id(self, two_worker_assignments, october_holidays):
        results = resolve_assignments(two_worker_assignments, 2024, 10, october_holidays)
        assert list(results) == ["A", "B"]
        assert results["B"].dates() == [SYNTHETIC_HOLIDAY]
