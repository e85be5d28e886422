"""Tests for the month planning façade."""
from datetime import date

import pytest

from careplan.engine.holidays import StaticHolidayProvider
from careplan.engine.planning import plan_month, plan_user_month
from careplan.errors import HolidayProviderError
from careplan.models.anomaly import AnomalyKind
from careplan.models.assignment import Assignment, Client
from careplan.models.holiday import Holiday
from careplan.models.results import BalanceStatus

from conftest import SYNTHETIC_HOLIDAY, day, schedule


class FailingProvider(StaticHolidayProvider):
    def get_holidays(self, year):
        raise ConnectionError("calendar service down")


class TestPlanUserMonth:
    """Tests for plan_user_month."""

    def test_two_worker_plan(self, two_worker_assignments, october_holidays, client_u1):
        plan = plan_user_month(client_u1, two_worker_assignments, 2024, 10, october_holidays)

        assert plan.user_id == "u1"
        assert plan.contracted_hours == 10
        # Four Mondays; the holiday Monday has both workers
        assert [d.date for d in plan.days] == [date(2024, 10, d) for d in (7, 14, 21, 28)]
        holiday_day = plan.days[0]
        assert holiday_day.hours == 4.0
        assert holiday_day.worker_ids == ("w1", "w2")
        assert holiday_day.is_holiday
        assert holiday_day.holiday_name == "Festivo sintético"
        assert plan.scheduled_hours == 13.0
        assert len(plan.reassignments) == 1

    def test_balances_per_worker_and_total(self, two_worker_assignments, october_holidays, client_u1):
        plan = plan_user_month(client_u1, two_worker_assignments, 2024, 10, october_holidays)

        assert [b.worker_id for b in plan.balances] == ["w1", "w2"]
        assert plan.balance_for("w1").scheduled_hours == 12.0
        assert plan.balance_for("w2").scheduled_hours == 1.0
        assert plan.balance_for("w2").status == BalanceStatus.DEFICIT
        assert plan.total_balance.worker_id is None
        assert plan.total_balance.balance == 3.0
        assert plan.balance_for("nobody") is None

    def test_no_contract_no_balances(self, two_worker_assignments, october_holidays):
        plan = plan_user_month("u1", two_worker_assignments, 2024, 10, october_holidays)
        assert plan.balances == []
        assert plan.total_balance is None
        assert plan.summary()["balance"] is None

    def test_contracted_override(self, two_worker_assignments, client_u1):
        plan = plan_user_month(client_u1, two_worker_assignments, 2024, 10, [], contracted_hours=12)
        assert plan.total_balance.balance == 0.0

    def test_anomalies_collected(self, october_holidays):
        a = Assignment(
            id="d", worker_id="w", user_id="u1", start_date=date(2024, 1, 1),
            schedule=schedule(monday=day(("10:00", "09:00"))),
        )
        plan = plan_user_month("u1", [a], 2024, 10, october_holidays, contracted_hours=0)
        assert sum(1 for x in plan.anomalies if x.kind == AnomalyKind.DROPPED_SLOT) == 4
        assert plan.scheduled_hours == 0.0

    def test_hours_until(self, two_worker_assignments, october_holidays):
        plan = plan_user_month("u1", two_worker_assignments, 2024, 10, october_holidays)
        assert plan.hours_until(SYNTHETIC_HOLIDAY) == 4.0

    def test_to_dataframe_and_summary(self, two_worker_assignments, october_holidays, client_u1):
        plan = plan_user_month(client_u1, two_worker_assignments, 2024, 10, october_holidays)
        df = plan.to_dataframe()
        assert len(df) == 4
        assert df.iloc[0]["workers"] == "w1, w2"
        assert df.iloc[0]["day"] == "Lunes"

        summary = plan.summary()
        assert summary["scheduled_hours"] == 13.0
        assert summary["status"] == "excess"
        assert summary["reassignments"] == 1
        assert summary["workers"] == ["w1", "w2"]

    def test_empty_plan(self):
        plan = plan_user_month("nobody", [], 2024, 10, [])
        assert plan.days == []
        assert len(plan.to_dataframe()) == 0


class TestPlanMonth:
    def test_fetches_holidays_once(self, two_worker_assignments, client_u1):
        provider = StaticHolidayProvider([Holiday(date=SYNTHETIC_HOLIDAY, name="Sintético")])
        plans = plan_month([client_u1, "u2"], two_worker_assignments, 2024, 10, provider)

        assert [p.user_id for p in plans] == ["u1", "u2"]
        assert len(plans[0].reassignments) == 1
        assert plans[1].days == []

    def test_provider_failure_propagates(self, two_worker_assignments, client_u1):
        """No plan is produced without the holiday calendar."""
        with pytest.raises(HolidayProviderError) as exc_info:
            plan_month([client_u1], two_worker_assignments, 2024, 10, FailingProvider())
        assert exc_info.value.year == 2024
        assert "calendar service down" in str(exc_info.value)
