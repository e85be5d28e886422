"""Assignment and client models."""
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from .anomaly import Anomaly
from .schedule import WeeklySchedule


class AssignmentType(str, Enum):
    """Declared intent of an assignment. Never overrides the schedule flags."""
    LABORABLES = "laborables"  # Weekdays
    FESTIVOS = "festivos"      # Weekends + holidays
    FLEXIBLE = "flexible"      # Any day

    @classmethod
    def from_string(cls, s: Any) -> "AssignmentType":
        """Parse a type label, falling back to FLEXIBLE."""
        key = str(s).strip().lower()
        aliases = {
            "laborable": cls.LABORABLES, "regular": cls.LABORABLES, "weekdays": cls.LABORABLES,
            "festivo": cls.FESTIVOS, "holidays": cls.FESTIVOS, "weekends": cls.FESTIVOS,
            "holiday_weekend": cls.FESTIVOS,
            "both": cls.FLEXIBLE,
        }
        if key in aliases:
            return aliases[key]
        for member in cls:
            if member.value == key:
                return member
        return cls.FLEXIBLE


class AssignmentStatus(str, Enum):
    """Lifecycle status. Only soft transitions, never deletion."""
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


def parse_date(value: Any) -> Optional[date]:
    """Parse an ISO date (or datetime/timestamp string) into a date."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


@dataclass
class Assignment:
    """A recurring care-service relationship between one worker and one client."""

    id: str
    worker_id: str
    user_id: str
    start_date: date
    end_date: Optional[date] = None  # None = open-ended
    schedule: WeeklySchedule = field(default_factory=WeeklySchedule)
    assignment_type: AssignmentType = AssignmentType.FLEXIBLE
    status: AssignmentStatus = AssignmentStatus.ACTIVE
    notes: str = ""

    # Repairs made while loading the schedule
    anomalies: List[Anomaly] = field(default_factory=list, compare=False, repr=False)

    def __post_init__(self):
        self.id = str(self.id)
        self.worker_id = str(self.worker_id)
        self.user_id = str(self.user_id)
        self.start_date = parse_date(self.start_date) or date.min
        self.end_date = parse_date(self.end_date)
        if isinstance(self.assignment_type, str) and not isinstance(self.assignment_type, AssignmentType):
            self.assignment_type = AssignmentType.from_string(self.assignment_type)
        if isinstance(self.status, str) and not isinstance(self.status, AssignmentStatus):
            self.status = AssignmentStatus(self.status.strip().lower())
        if not isinstance(self.schedule, WeeklySchedule):
            self.schedule = WeeklySchedule.from_dict(self.schedule, self.anomalies, assignment_id=self.id)

    @property
    def has_inverted_range(self) -> bool:
        """True if end_date precedes start_date."""
        return self.end_date is not None and self.end_date < self.start_date

    def is_active_on(self, day: date) -> bool:
        """Inclusive date-range check. Inverted ranges are never active."""
        if self.has_inverted_range:
            return False
        if day < self.start_date:
            return False
        return self.end_date is None or day <= self.end_date

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "worker_id": self.worker_id,
            "user_id": self.user_id,
            "assignment_type": self.assignment_type.value,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "schedule": self.schedule.to_dict(),
            "status": self.status.value,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any], anomalies: Optional[List[Anomaly]] = None) -> "Assignment":
        """
        Create from a stored record.

        The schedule is repaired rather than rejected; repairs are kept on
        the assignment and also appended to `anomalies` when given. Use
        models.validated for strict checks.
        """
        assignment_id = str(d.get("id", ""))
        raw_schedule = d.get("schedule")
        if raw_schedule is None:
            raw_schedule = d.get("specific_schedule")
        repairs: List[Anomaly] = []
        assignment = cls(
            id=assignment_id,
            worker_id=str(d.get("worker_id", "")),
            user_id=str(d.get("user_id", "")),
            start_date=parse_date(d.get("start_date")) or date.min,
            end_date=parse_date(d.get("end_date")),
            schedule=WeeklySchedule.from_dict(raw_schedule, repairs, assignment_id=assignment_id),
            assignment_type=AssignmentType.from_string(d.get("assignment_type", "flexible")),
            status=AssignmentStatus(str(d.get("status") or "active").strip().lower()),
            notes=str(d.get("notes") or ""),
            anomalies=repairs,
        )
        if anomalies is not None:
            anomalies.extend(repairs)
        return assignment


@dataclass
class Client:
    """A care recipient with contracted monthly hours."""

    id: str
    name: str = ""
    surname: str = ""
    monthly_hours: float = 0.0

    def __post_init__(self):
        self.id = str(self.id)
        self.name = str(self.name).strip()
        self.surname = str(self.surname).strip()

    @property
    def full_name(self) -> str:
        return f"{self.name} {self.surname}".strip()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "surname": self.surname,
            "monthly_hours": self.monthly_hours,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Client":
        try:
            monthly_hours = float(d.get("monthly_hours") or 0)
        except (TypeError, ValueError):
            monthly_hours = 0.0
        return cls(
            id=d.get("id", ""),
            name=d.get("name", ""),
            surname=d.get("surname", ""),
            monthly_hours=monthly_hours,
        )
