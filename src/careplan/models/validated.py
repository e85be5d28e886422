"""
Pydantic Validated Models
=========================
Strict validation for records and configuration entering from files or
the data store. The engine itself works on the plain dataclasses; these
models sit at the boundary and convert to them.

Usage:
    from careplan.models.validated import ValidatedEngineConfig

    config = ValidatedEngineConfig(balance_tolerance=0.25).to_dataclass()

Schedules are not validated here: a malformed schedule is repaired when
the Assignment is built and reported as an anomaly.
"""
from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from careplan.errors import RecordValidationError

from .assignment import Assignment, AssignmentStatus, AssignmentType, Client
from .anomaly import Anomaly
from .config import EngineConfig
from .holiday import Holiday, HolidayScope
from .rules import DEFAULT_BALANCE_TOLERANCE, DEFAULT_WEEKS_PER_MONTH


def _error_summary(error: ValidationError) -> str:
    """Compact 'field: message' list of a pydantic error."""
    parts = []
    for e in error.errors():
        loc = ".".join(str(p) for p in e.get("loc", ())) or "record"
        parts.append(f"{loc}: {e.get('msg')}")
    return "; ".join(parts)


def _stringify(v: Any) -> Any:
    """Ids arrive as ints from some sources; keep None/empty for the length check."""
    if v is None:
        return v
    return str(v).strip()


def _blank_to_none(v: Any) -> Any:
    if isinstance(v, str) and not v.strip():
        return None
    return v


class ValidatedEngineConfig(BaseModel):
    """
    Pydantic-validated engine configuration.

    Use this for config read from files. Can be converted to/from the
    dataclass EngineConfig.
    """
    model_config = ConfigDict(validate_assignment=True, extra="ignore")

    rounding_decimals: int = Field(default=2, ge=0, le=6)
    weeks_per_month: float = Field(default=DEFAULT_WEEKS_PER_MONTH, gt=0, le=5, allow_inf_nan=False)
    balance_tolerance: float = Field(default=DEFAULT_BALANCE_TOLERANCE, ge=0, le=24, allow_inf_nan=False)
    active_statuses: List[str] = Field(default_factory=lambda: [AssignmentStatus.ACTIVE.value])

    @field_validator("active_statuses")
    @classmethod
    def validate_statuses(cls, v: List[str]) -> List[str]:
        """Statuses must be known and at least one must be given."""
        if not v:
            raise ValueError("active_statuses cannot be empty")
        known = {s.value for s in AssignmentStatus}
        cleaned = [str(s).strip().lower() for s in v]
        unknown = [s for s in cleaned if s not in known]
        if unknown:
            raise ValueError(f"unknown statuses: {', '.join(unknown)}")
        return cleaned

    def to_dataclass(self) -> EngineConfig:
        """Convert to the dataclass EngineConfig used by the engine."""
        return EngineConfig(
            rounding_decimals=self.rounding_decimals,
            weeks_per_month=self.weeks_per_month,
            balance_tolerance=self.balance_tolerance,
            active_statuses=list(self.active_statuses),
        )

    @classmethod
    def from_dataclass(cls, config: EngineConfig) -> "ValidatedEngineConfig":
        """Create from dataclass EngineConfig."""
        return cls(
            rounding_decimals=config.rounding_decimals,
            weeks_per_month=config.weeks_per_month,
            balance_tolerance=config.balance_tolerance,
            active_statuses=list(config.active_statuses),
        )


class ValidatedAssignment(BaseModel):
    """Boundary check of a stored assignment record."""
    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1)
    worker_id: str = Field(min_length=1)
    user_id: str = Field(min_length=1)
    start_date: date
    end_date: Optional[date] = None
    assignment_type: Optional[str] = AssignmentType.FLEXIBLE.value
    status: AssignmentStatus = AssignmentStatus.ACTIVE
    schedule: Any = None
    notes: str = ""

    normalize_ids = field_validator("id", "worker_id", "user_id", mode="before")(_stringify)
    normalize_end = field_validator("end_date", mode="before")(_blank_to_none)

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return AssignmentStatus.ACTIVE
        return str(getattr(v, "value", v)).strip().lower()

    @field_validator("notes", mode="before")
    @classmethod
    def normalize_notes(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @classmethod
    def from_record(cls, raw: Dict[str, Any]) -> "ValidatedAssignment":
        """
        Validate a raw record.

        Raises:
            RecordValidationError: with the record id and the failing fields
        """
        data = dict(raw)
        if data.get("schedule") is None and "specific_schedule" in data:
            data["schedule"] = data["specific_schedule"]
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise RecordValidationError(_stringify(raw.get("id")), _error_summary(e)) from e

    def to_assignment(self, anomalies: Optional[List[Anomaly]] = None) -> Assignment:
        """Build the engine Assignment; schedule repairs go to `anomalies` too."""
        return Assignment.from_dict(self.model_dump(mode="json"), anomalies)


class ValidatedHoliday(BaseModel):
    """Boundary check of a holiday row (`type` is the scope column)."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    date: date
    name: str = ""
    scope: HolidayScope = Field(default=HolidayScope.NATIONAL, alias="type")
    region: Optional[str] = None
    city: Optional[str] = None
    is_active: bool = True

    normalize_optional = field_validator("region", "city", mode="before")(_blank_to_none)

    @field_validator("scope", mode="before")
    @classmethod
    def normalize_scope(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return HolidayScope.NATIONAL
        return str(getattr(v, "value", v)).strip().lower()

    @field_validator("is_active", mode="before")
    @classmethod
    def normalize_active(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return True
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return v != 0
        return v

    @field_validator("name", mode="before")
    @classmethod
    def normalize_name(cls, v: Any) -> str:
        return "" if v is None else str(v).strip()

    @classmethod
    def from_record(cls, raw: Dict[str, Any]) -> "ValidatedHoliday":
        """
        Validate a raw holiday row.

        Raises:
            RecordValidationError: identified by the row's date value
        """
        try:
            return cls.model_validate(raw)
        except ValidationError as e:
            raise RecordValidationError(_stringify(raw.get("date")), _error_summary(e)) from e

    def to_holiday(self) -> Holiday:
        return Holiday(
            date=self.date,
            name=self.name,
            scope=self.scope,
            region=self.region,
            city=self.city,
            is_active=self.is_active,
        )


class ValidatedClient(BaseModel):
    """Boundary check of a client row."""
    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1)
    name: str = ""
    surname: str = ""
    monthly_hours: float = Field(default=0.0, ge=0, allow_inf_nan=False)

    normalize_id = field_validator("id", mode="before")(_stringify)

    @field_validator("name", "surname", mode="before")
    @classmethod
    def normalize_text(cls, v: Any) -> str:
        return "" if v is None else str(v).strip()

    @field_validator("monthly_hours", mode="before")
    @classmethod
    def blank_hours(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return 0.0
        return v

    @classmethod
    def from_record(cls, raw: Dict[str, Any]) -> "ValidatedClient":
        """
        Validate a raw client row.

        Raises:
            RecordValidationError: with the client id and the failing fields
        """
        try:
            return cls.model_validate(raw)
        except ValidationError as e:
            raise RecordValidationError(_stringify(raw.get("id")), _error_summary(e)) from e

    def to_client(self) -> Client:
        return Client(id=self.id, name=self.name, surname=self.surname, monthly_hours=self.monthly_hours)
