"""
Results Export
==============
Tabular and file exports of month plans: pandas DataFrames for reports,
an Excel workbook (openpyxl) and JSON for scripts.
"""
import io
import json
import math
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from careplan import __version__
from careplan.engine.hours import round_hours
from careplan.engine.planning import UserMonthPlan
from careplan.engine.resolver import ENTRY_COLUMNS
from careplan.models.anomaly import Anomaly
from careplan.models.results import MonthlyBalance, ReassignmentRecord, ResolvedDayEntry
from careplan.utils.logging_setup import get_logger

logger = get_logger("careplan.io.results_export")

REASSIGNMENT_COLUMNS = [
    "date", "user_id", "expected_worker_id", "actual_worker_id", "reason",
    "holiday_name", "expected_workers", "actual_workers", "expected_hours", "actual_hours",
]
BALANCE_COLUMNS = [
    "user_id", "worker_id", "year", "month", "contracted_hours", "scheduled_hours",
    "balance", "status", "percentage", "holiday_days", "holiday_hours",
    "working_days", "working_hours",
]
ANOMALY_COLUMNS = ["kind", "message", "assignment_id", "date", "schedule_key"]

# Row colors
HOLIDAY_FILL = "FFE4CC"
WEEKEND_FILL = "EEEEEE"
STATUS_COLORS = {
    "excess": "FFC7CE",
    "deficit": "FFEB9C",
    "perfect": "C6EFCE",
}

THIN = Side(border_style="thin", color="CCCCCC")
BORDER_THIN = Border(top=THIN, bottom=THIN, left=THIN, right=THIN)

Plans = Union[UserMonthPlan, Iterable[UserMonthPlan]]


def _as_list(plans: Plans) -> List[UserMonthPlan]:
    if isinstance(plans, UserMonthPlan):
        return [plans]
    return list(plans)


def _entry_row(entry: ResolvedDayEntry) -> Dict[str, Any]:
    row = entry.to_dict()
    row["hours"] = round_hours(entry.hours)
    return row


def entries_to_dataframe(entries: Iterable[ResolvedDayEntry]) -> pd.DataFrame:
    """One row per resolved (assignment, day)."""
    rows = [_entry_row(e) for e in entries]
    if not rows:
        return pd.DataFrame(columns=ENTRY_COLUMNS)
    return pd.DataFrame(rows, columns=ENTRY_COLUMNS)


def reassignments_to_dataframe(records: Iterable[ReassignmentRecord]) -> pd.DataFrame:
    """One row per reassignment, worker sets joined into text."""
    rows = []
    for r in records:
        row = r.to_dict()
        row["expected_workers"] = ", ".join(row.pop("expected_worker_ids"))
        row["actual_workers"] = ", ".join(row.pop("actual_worker_ids"))
        rows.append(row)
    if not rows:
        return pd.DataFrame(columns=REASSIGNMENT_COLUMNS)
    return pd.DataFrame(rows, columns=REASSIGNMENT_COLUMNS)


def balances_to_dataframe(balances: Iterable[MonthlyBalance]) -> pd.DataFrame:
    """One row per balance; a client total has an empty worker_id."""
    rows = [b.to_dict() for b in balances]
    if not rows:
        return pd.DataFrame(columns=BALANCE_COLUMNS)
    return pd.DataFrame(rows, columns=BALANCE_COLUMNS)


def anomalies_to_dataframe(anomalies: Iterable[Anomaly]) -> pd.DataFrame:
    rows = [a.to_dict() for a in anomalies]
    if not rows:
        return pd.DataFrame(columns=ANOMALY_COLUMNS)
    return pd.DataFrame(rows, columns=ANOMALY_COLUMNS)


def _all_balances(plans: List[UserMonthPlan]) -> List[MonthlyBalance]:
    balances = []
    for plan in plans:
        balances.extend(plan.balances)
        if plan.total_balance is not None:
            balances.append(plan.total_balance)
    return balances


def _write_frame(ws, df: pd.DataFrame, width: int = 16) -> None:
    """Write a DataFrame with a bold header row."""
    for j, col in enumerate(df.columns, start=1):
        cell = ws.cell(row=1, column=j, value=col)
        cell.font = Font(bold=True)
        cell.alignment = Alignment(horizontal="center")
    for i in range(len(df)):
        for j in range(len(df.columns)):
            value = df.iat[i, j]
            if hasattr(value, "item"):
                value = value.item()
            if isinstance(value, float) and math.isnan(value):
                value = None
            cell = ws.cell(row=2 + i, column=1 + j, value=value)
            cell.border = BORDER_THIN
    for j in range(1, len(df.columns) + 1):
        ws.column_dimensions[get_column_letter(j)].width = width
    ws.freeze_panes = "A2"


def _fill_row(ws, row: int, n_cols: int, color: str) -> None:
    fill = PatternFill(start_color=color, end_color=color, fill_type="solid")
    for c in range(1, n_cols + 1):
        ws.cell(row=row, column=c).fill = fill


def export_plan_to_excel(plans: Plans, output: Union[str, Path, io.BytesIO]) -> None:
    """
    Export month plans to an Excel workbook.

    Sheets: Resumen (one line per client), Días (per-day service, holidays
    and weekends shaded), Entradas, Reasignaciones, Balances (colored by
    status) and Anomalías.

    Args:
        plans: A UserMonthPlan or several
        output: File path or BytesIO buffer
    """
    plans = _as_list(plans)
    wb = Workbook()

    # ========== Summary Sheet ==========
    ws_sum = wb.active
    ws_sum.title = "Resumen"
    summary = pd.DataFrame([p.summary() for p in plans])
    if not summary.empty:
        summary["workers"] = summary["workers"].apply(lambda ids: ", ".join(ids))
    _write_frame(ws_sum, summary, width=18)

    # ========== Days Sheet ==========
    ws_days = wb.create_sheet("Días")
    frames = []
    for plan in plans:
        df = plan.to_dataframe()
        df.insert(0, "user_id", plan.user_id)
        frames.append(df)
    days = pd.concat(frames, ignore_index=True) if frames else pd.DataFrame()
    _write_frame(ws_days, days)
    for i in range(len(days)):
        if bool(days.at[i, "is_holiday"]):
            _fill_row(ws_days, i + 2, len(days.columns), HOLIDAY_FILL)
        elif bool(days.at[i, "is_weekend"]):
            _fill_row(ws_days, i + 2, len(days.columns), WEEKEND_FILL)

    # ========== Detail Sheets ==========
    _write_frame(wb.create_sheet("Entradas"), entries_to_dataframe(e for p in plans for e in p.entries))
    _write_frame(
        wb.create_sheet("Reasignaciones"),
        reassignments_to_dataframe(r for p in plans for r in p.reassignments),
        width=20,
    )

    ws_bal = wb.create_sheet("Balances")
    balances = balances_to_dataframe(_all_balances(plans))
    _write_frame(ws_bal, balances)
    status_col = BALANCE_COLUMNS.index("status") + 1
    for i in range(len(balances)):
        color = STATUS_COLORS.get(str(balances.at[i, "status"]))
        if color:
            ws_bal.cell(row=i + 2, column=status_col).fill = PatternFill(
                start_color=color, end_color=color, fill_type="solid"
            )

    _write_frame(
        wb.create_sheet("Anomalías"),
        anomalies_to_dataframe(a for p in plans for a in p.anomalies),
        width=24,
    )

    if isinstance(output, io.BytesIO):
        wb.save(output)
    else:
        wb.save(str(output))
    logger.info(f"Exported {len(plans)} plans to Excel")


def plan_to_dict(plan: UserMonthPlan) -> Dict[str, Any]:
    """JSON-ready view of a month plan."""
    return {
        "summary": plan.summary(),
        "days": [
            {
                "date": d.date.isoformat(),
                "hours": d.hours,
                "is_holiday": d.is_holiday,
                "is_weekend": d.is_weekend,
                "worker_ids": list(d.worker_ids),
                "holiday_name": d.holiday_name,
            }
            for d in plan.days
        ],
        "entries": [_entry_row(e) for e in plan.entries],
        "reassignments": [r.to_dict() for r in plan.reassignments],
        "balances": [b.to_dict() for b in plan.balances],
        "total_balance": plan.total_balance.to_dict() if plan.total_balance else None,
        "anomalies": [a.to_dict() for a in plan.anomalies],
    }


def export_plan_json(plans: Plans, output_path: Union[str, Path]) -> Path:
    """
    Export month plans to JSON for analysis by scripts.

    Returns:
        Path to the written file
    """
    plans = _as_list(plans)
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    result = {
        "meta": {
            "timestamp": datetime.now().isoformat(),
            "version": __version__,
        },
        "plans": [plan_to_dict(p) for p in plans],
    }

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(result, f, indent=2, ensure_ascii=False)

    logger.info(f"Results exported to {output_path}")
    return output_path
