"""Non-fatal problems found while reading schedules or summing hours."""
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Dict, List, Optional


class AnomalyKind(str, Enum):
    """Categories of repaired or discarded input."""
    REPAIRED_SCHEDULE = "repaired_schedule"      # Missing/unreadable day replaced by a disabled day
    DROPPED_SLOT = "dropped_slot"                # Unparseable or non-positive slot counted as 0h
    NON_NUMERIC_HOURS = "non_numeric_hours"      # NaN/inf/non-numeric hours coerced to 0
    INVERTED_DATE_RANGE = "inverted_date_range"  # end_date before start_date, never active


@dataclass(frozen=True)
class Anomaly:
    """A single repaired or discarded input value."""
    kind: AnomalyKind
    message: str
    assignment_id: Optional[str] = None
    date: Optional[date] = None
    schedule_key: Optional[str] = None

    def to_dict(self) -> Dict:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "assignment_id": self.assignment_id,
            "date": self.date.isoformat() if self.date else None,
            "schedule_key": self.schedule_key,
        }


def count_anomalies(anomalies: List[Anomaly], kind: AnomalyKind) -> int:
    """Count anomalies of one kind."""
    return sum(1 for a in anomalies if a.kind == kind)
