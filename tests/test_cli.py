"""Tests for the command-line interface."""
import json
import logging

import pytest

from careplan.cli import EXIT_HOLIDAYS_UNAVAILABLE, EXIT_INVALID_INPUT, EXIT_OK, main


def _assignment(id_, worker, schedule):
    return {
        "id": id_, "worker_id": worker, "user_id": "u1",
        "start_date": "2024-01-01", "status": "active", "schedule": schedule,
    }


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers bound to the captured streams of a finished test."""
    yield
    logger = logging.getLogger("careplan")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()


@pytest.fixture
def files(tmp_path):
    """Assignments, holidays and clients for October 2024."""
    assignments = [
        _assignment("A", "w1", {"monday": {"enabled": True, "timeSlots": [{"start": "08:00", "end": "11:00"}]}}),
        _assignment("B", "w2", {"holiday": {"enabled": True, "timeSlots": [{"start": "09:00", "end": "10:00"}]}}),
    ]
    a_path = tmp_path / "assignments.json"
    a_path.write_text(json.dumps(assignments), encoding="utf-8")

    h_path = tmp_path / "holidays.csv"
    h_path.write_text("date,name,type,region,city,is_active\n2024-10-07,Sintético,national,,,1\n", encoding="utf-8")

    c_path = tmp_path / "clients.csv"
    c_path.write_text("id,name,surname,monthly_hours\nu1,Ana,García,10\n", encoding="utf-8")
    return {"assignments": a_path, "holidays": h_path, "clients": c_path, "dir": tmp_path}


class TestCli:
    """End-to-end runs of main()."""

    def test_json_output(self, files, capsys):
        code = main([
            "--assignments", str(files["assignments"]),
            "--holidays", str(files["holidays"]),
            "--clients", str(files["clients"]),
            "--year", "2024", "--month", "10", "--json",
        ])
        assert code == EXIT_OK
        data = json.loads(capsys.readouterr().out)
        plan = data["plans"][0]
        assert plan["summary"]["scheduled_hours"] == 13.0
        assert plan["total_balance"]["balance"] == 3.0
        assert plan["reassignments"][0]["date"] == "2024-10-07"

    def test_text_output_without_clients(self, files, capsys):
        code = main([
            "--assignments", str(files["assignments"]),
            "--holidays", str(files["holidays"]),
            "--year", "2024", "--month", "10",
        ])
        out = capsys.readouterr().out
        assert code == EXIT_OK
        assert "Usuario u1 (2024-10)" in out
        assert "w1 -> w2" in out

    def test_exports(self, files):
        excel = files["dir"] / "plan.xlsx"
        saved = files["dir"] / "plan.json"
        code = main([
            "--assignments", str(files["assignments"]),
            "--holidays", str(files["holidays"]),
            "--year", "2024", "--month", "10", "--user", "u1",
            "--excel", str(excel), "--save-json", str(saved),
        ])
        assert code == EXIT_OK
        assert excel.exists()
        assert json.loads(saved.read_text(encoding="utf-8"))["plans"][0]["summary"]["user_id"] == "u1"

    def test_missing_holiday_file_exit_2(self, files, capsys):
        """No results are printed when the holiday calendar is unavailable."""
        code = main([
            "--assignments", str(files["assignments"]),
            "--holidays", str(files["dir"] / "missing.csv"),
            "--year", "2024", "--month", "10", "--json",
        ])
        captured = capsys.readouterr()
        assert code == EXIT_HOLIDAYS_UNAVAILABLE
        assert captured.out == ""
        assert "Holiday" in captured.err or "holidays" in captured.err

    def test_invalid_assignment_exit_1(self, files, capsys):
        bad = files["dir"] / "bad.json"
        bad.write_text(json.dumps([{"id": "x", "worker_id": "", "user_id": "u1", "start_date": "2024-01-01"}]))
        code = main([
            "--assignments", str(bad),
            "--holidays", str(files["holidays"]),
            "--year", "2024", "--month", "10",
        ])
        assert code == EXIT_INVALID_INPUT
        assert "Record x" in capsys.readouterr().err

    def test_builtin_holidays(self, files, capsys):
        """Without --holidays the built-in calendar is used (no Monday holiday in Oct 2024)."""
        code = main([
            "--assignments", str(files["assignments"]),
            "--year", "2024", "--month", "10", "--json",
        ])
        data = json.loads(capsys.readouterr().out)
        assert code == EXIT_OK
        assert data["plans"][0]["reassignments"] == []

    def test_bad_month(self, files):
        with pytest.raises(SystemExit):
            main(["--assignments", str(files["assignments"]), "--year", "2024", "--month", "13"])
