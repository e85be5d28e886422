"""Loading assignments, clients, holidays and engine config from files."""
import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import pandas as pd
from pydantic import ValidationError

from careplan.models.anomaly import Anomaly
from careplan.models.assignment import Assignment, Client
from careplan.models.config import EngineConfig
from careplan.models.holiday import Holiday
from careplan.models.validated import (
    ValidatedAssignment,
    ValidatedClient,
    ValidatedEngineConfig,
    ValidatedHoliday,
)
from careplan.utils.logging_setup import get_logger

logger = get_logger("careplan.io.loaders")

Source = Union[str, Path, pd.DataFrame, Iterable[Dict[str, Any]]]

HOLIDAY_COLUMNS = ["date", "name", "type", "region", "city", "is_active"]


def _read_json(path: Union[str, Path]) -> Any:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def _decode_schedule(value: Any) -> Any:
    """Schedules stored as JSON text in a CSV/DataFrame column."""
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            # Left as is; the schedule repair reports it
            return value
    return value


def _records(source: Source, json_key: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    Normalize a source into a list of plain dicts.

    Args:
        source: DataFrame, list of dicts, or path to a .json/.csv file
        json_key: Key holding the records when a JSON file wraps them in an object

    Returns:
        List of records with NaN replaced by ""
    """
    if isinstance(source, pd.DataFrame):
        df = source.copy()
    elif isinstance(source, (str, Path)):
        path = Path(source)
        if path.suffix.lower() == ".json":
            data = _read_json(path)
            if isinstance(data, dict) and json_key:
                data = data.get(json_key, [])
            if not isinstance(data, list):
                raise ValueError(f"{path} must contain a list of records")
            return [dict(r) for r in data]
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
    else:
        return [dict(r) for r in source]

    df = df.fillna("")
    return df.to_dict(orient="records")


def load_assignments(
    source: Source,
    anomalies: Optional[List[Anomaly]] = None,
) -> List[Assignment]:
    """
    Load assignments from a JSON file, a list of dicts or a DataFrame.

    Records are validated at the boundary (ids, dates, status); schedules
    are repaired rather than rejected, legacy slot formats included.

    Args:
        source: Assignment records
        anomalies: Optional list collecting schedule repairs

    Returns:
        List of Assignment objects

    Raises:
        RecordValidationError: if a record is missing ids or has invalid dates/status
    """
    assignments = []
    for raw in _records(source, json_key="assignments"):
        if "schedule" in raw:
            raw["schedule"] = _decode_schedule(raw["schedule"])
        if "specific_schedule" in raw:
            raw["specific_schedule"] = _decode_schedule(raw["specific_schedule"])
        validated = ValidatedAssignment.from_record(raw)
        assignment = validated.to_assignment(anomalies)
        if assignment.anomalies:
            logger.debug(f"Assignment {assignment.id}: {len(assignment.anomalies)} schedule repairs")
        assignments.append(assignment)

    logger.info(f"Loaded {len(assignments)} assignments")
    return assignments


def load_clients(source: Source) -> List[Client]:
    """
    Load clients (id, name, surname, monthly_hours) from CSV, JSON or a DataFrame.

    Raises:
        ValueError: if there is no 'id' column
        RecordValidationError: if a row fails validation
    """
    records = _records(source, json_key="clients")
    if records and "id" not in records[0]:
        raise ValueError("Clients must have an 'id' column")

    clients = []
    for raw in records:
        if not str(raw.get("id", "")).strip():
            continue
        clients.append(ValidatedClient.from_record(raw).to_client())

    logger.info(f"Loaded {len(clients)} clients")
    return clients


def load_holidays(source: Source) -> List[Holiday]:
    """
    Load holidays from CSV (date,name,type,region,city,is_active), JSON or a DataFrame.

    Rows with an empty date are skipped. Inactive holidays are kept; the
    resolver ignores them.

    Raises:
        ValueError: if there is no 'date' column
        RecordValidationError: if a row has an invalid date or scope
    """
    records = _records(source, json_key="holidays")
    if records and "date" not in records[0]:
        raise ValueError("Holidays must have a 'date' column")

    holidays = []
    for raw in records:
        if not str(raw.get("date", "")).strip():
            continue
        holidays.append(ValidatedHoliday.from_record(raw).to_holiday())

    holidays.sort(key=lambda h: h.date)
    logger.debug(f"Loaded {len(holidays)} holidays")
    return holidays


def load_config(path: Union[str, Path]) -> EngineConfig:
    """
    Load engine configuration from a JSON file.

    Unknown keys are ignored; known keys are validated.

    Raises:
        ValueError: if a value is out of range or the file is not a JSON object
    """
    data = _read_json(path)
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a JSON object")
    try:
        config = ValidatedEngineConfig(**data).to_dataclass()
    except ValidationError as e:
        raise ValueError(f"Invalid engine config in {path}: {e}") from e
    logger.info(f"Loaded engine config from {path}")
    return config


def holidays_to_dataframe(holidays: List[Holiday]) -> pd.DataFrame:
    """Convert holidays to a DataFrame (same columns as the CSV format)."""
    if not holidays:
        return pd.DataFrame(columns=HOLIDAY_COLUMNS)
    return pd.DataFrame([h.to_dict() for h in holidays], columns=HOLIDAY_COLUMNS)


def save_holidays(holidays: List[Holiday], path: Union[str, Path]) -> None:
    """Save holidays to CSV, is_active as 1/0."""
    df = holidays_to_dataframe(holidays)
    if "is_active" in df.columns and len(df):
        df["is_active"] = df["is_active"].astype(int)
    df.to_csv(path, index=False)


__all__ = [
    "load_assignments",
    "load_clients",
    "load_holidays",
    "load_config",
    "holidays_to_dataframe",
    "save_holidays",
]
