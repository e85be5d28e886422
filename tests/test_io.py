"""Tests for I/O functionality."""
import io
import json
from datetime import date

import pandas as pd
import pytest
from openpyxl import load_workbook

from careplan.engine.planning import plan_user_month
from careplan.errors import RecordValidationError
from careplan.io.loaders import (
    load_assignments,
    load_clients,
    load_config,
    load_holidays,
    save_holidays,
)
from careplan.io.results_export import (
    balances_to_dataframe,
    entries_to_dataframe,
    export_plan_json,
    export_plan_to_excel,
    reassignments_to_dataframe,
)
from careplan.models.anomaly import AnomalyKind
from careplan.models.holiday import Holiday, HolidayScope


MONDAY_RECORD = {
    "id": "a1",
    "worker_id": "w1",
    "user_id": "u1",
    "assignment_type": "laborables",
    "start_date": "2024-01-01",
    "end_date": None,
    "status": "active",
    "schedule": {
        "monday": {"enabled": True, "timeSlots": [{"start": "08:00", "end": "11:00"}]},
        "tuesday": {"enabled": False, "timeSlots": []},
        "wednesday": {"enabled": False, "timeSlots": []},
        "thursday": {"enabled": False, "timeSlots": []},
        "friday": {"enabled": False, "timeSlots": []},
        "saturday": {"enabled": False, "timeSlots": []},
        "sunday": {"enabled": False, "timeSlots": []},
        "holiday": {"enabled": False, "timeSlots": []},
    },
}


class TestLoadAssignments:
    """Tests for assignment loading."""

    def test_from_records(self):
        assignments = load_assignments([MONDAY_RECORD])
        assert len(assignments) == 1
        assert assignments[0].schedule.monday.enabled is True
        assert assignments[0].anomalies == []

    def test_from_json_file(self, tmp_path):
        path = tmp_path / "assignments.json"
        path.write_text(json.dumps({"assignments": [MONDAY_RECORD]}), encoding="utf-8")
        assignments = load_assignments(path)
        assert assignments[0].id == "a1"

    def test_from_dataframe_with_json_schedule(self):
        record = dict(MONDAY_RECORD, schedule=json.dumps(MONDAY_RECORD["schedule"]), id=7, end_date="")
        df = pd.DataFrame([record])
        assignments = load_assignments(df)
        assert assignments[0].id == "7"
        assert assignments[0].end_date is None
        assert assignments[0].schedule.monday.time_slots[0].end == "11:00"

    def test_legacy_schedule_repaired(self):
        """Legacy slot lists are converted; missing keys are reported."""
        record = dict(MONDAY_RECORD, schedule={"monday": ["08:00", "10:00"]})
        anomalies = []
        assignments = load_assignments([record], anomalies)
        assert assignments[0].schedule.monday.enabled is True
        assert len(anomalies) == 7
        assert all(a.kind == AnomalyKind.REPAIRED_SCHEDULE for a in anomalies)

    def test_missing_worker_raises(self):
        record = dict(MONDAY_RECORD, worker_id="")
        with pytest.raises(RecordValidationError) as exc_info:
            load_assignments([record])
        assert exc_info.value.record_id == "a1"
        assert "worker_id" in str(exc_info.value)

    def test_bad_date_raises(self):
        with pytest.raises(RecordValidationError):
            load_assignments([dict(MONDAY_RECORD, start_date="someday")])

    def test_bad_status_raises(self):
        with pytest.raises(RecordValidationError):
            load_assignments([dict(MONDAY_RECORD, status="archived")])

    def test_json_not_a_list(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"something": "else"}), encoding="utf-8")
        assert load_assignments(path) == []
        path.write_text(json.dumps("text"), encoding="utf-8")
        with pytest.raises(ValueError):
            load_assignments(path)


class TestLoadClientsAndHolidays:
    def test_load_clients_csv(self, tmp_path):
        path = tmp_path / "clients.csv"
        path.write_text("id,name,surname,monthly_hours\nu1,Ana,García,10\nu2,Luis,,\n,,,\n", encoding="utf-8")
        clients = load_clients(path)
        assert [c.id for c in clients] == ["u1", "u2"]
        assert clients[0].monthly_hours == 10.0
        assert clients[1].monthly_hours == 0.0

    def test_load_clients_missing_id(self):
        with pytest.raises(ValueError, match="id"):
            load_clients(pd.DataFrame({"name": ["Ana"]}))

    def test_load_clients_negative_hours(self):
        with pytest.raises(RecordValidationError):
            load_clients([{"id": "u1", "monthly_hours": -5}])

    def test_load_holidays_dataframe(self):
        df = pd.DataFrame({
            "date": ["2024-12-25", "2024-10-07", None],
            "name": ["Navidad", "Sintético", None],
            "type": ["national", None, None],
        })
        holidays = load_holidays(df)
        assert [h.date for h in holidays] == [date(2024, 10, 7), date(2024, 12, 25)]
        assert holidays[0].scope == HolidayScope.NATIONAL

    def test_load_holidays_missing_date(self):
        with pytest.raises(ValueError, match="date"):
            load_holidays(pd.DataFrame({"name": ["x"]}))

    def test_save_and_reload(self, tmp_path):
        path = tmp_path / "h.csv"
        holidays = [
            Holiday(date=date(2024, 9, 11), name="Diada", scope=HolidayScope.REGIONAL, region="Cataluña"),
            Holiday(date=date(2024, 12, 25), name="Navidad", is_active=False),
        ]
        save_holidays(holidays, path)
        assert load_holidays(path) == holidays


class TestLoadConfig:
    def test_valid(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"balance_tolerance": 0.5, "active_statuses": ["active", "paused"]}))
        cfg = load_config(path)
        assert cfg.balance_tolerance == 0.5
        assert cfg.active_statuses == ["active", "paused"]
        assert cfg.rounding_decimals == 2

    def test_out_of_range(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"balance_tolerance": -1}))
        with pytest.raises(ValueError, match="balance_tolerance"):
            load_config(path)


class TestResultsExport:
    """Tests for plan exports."""

    @pytest.fixture
    def plan(self, two_worker_assignments, october_holidays, client_u1):
        return plan_user_month(client_u1, two_worker_assignments, 2024, 10, october_holidays)

    def test_dataframes(self, plan):
        entries = entries_to_dataframe(plan.entries)
        assert len(entries) == 5
        assert entries["hours"].sum() == 13.0

        reassignments = reassignments_to_dataframe(plan.reassignments)
        assert reassignments.iloc[0]["actual_workers"] == "w1, w2"

        balances = balances_to_dataframe(plan.balances + [plan.total_balance])
        assert list(balances["status"]) == ["excess", "deficit", "excess"]

    def test_empty_dataframes_keep_columns(self):
        assert "hours" in entries_to_dataframe([]).columns
        assert "reason" in reassignments_to_dataframe([]).columns
        assert "balance" in balances_to_dataframe([]).columns

    def test_excel_sheets(self, plan):
        buffer = io.BytesIO()
        export_plan_to_excel(plan, buffer)
        buffer.seek(0)
        wb = load_workbook(buffer)
        assert wb.sheetnames == ["Resumen", "Días", "Entradas", "Reasignaciones", "Balances", "Anomalías"]
        assert wb["Días"].max_row == 5  # Header + four days
        assert wb["Resumen"]["A2"].value == "u1"

    def test_excel_to_file(self, plan, tmp_path):
        path = tmp_path / "plan.xlsx"
        export_plan_to_excel([plan], path)
        assert path.exists()

    def test_json(self, plan, tmp_path):
        path = export_plan_json(plan, tmp_path / "out" / "plan.json")
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["meta"]["version"]
        exported = data["plans"][0]
        assert exported["summary"]["scheduled_hours"] == 13.0
        assert exported["reassignments"][0]["actual_worker_id"] == "w2"
        assert exported["days"][0]["date"] == "2024-10-07"
