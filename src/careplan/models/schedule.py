"""Weekly recurring schedule attached to an assignment."""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .anomaly import Anomaly, AnomalyKind
from .rules import (
    DEFAULT_SLOT_END,
    DEFAULT_SLOT_START,
    HOLIDAY_KEY,
    SCHEDULE_KEYS,
    WEEKDAY_KEYS,
    WEEKEND_KEYS,
    WORKWEEK_KEYS,
    normalize_day,
)


def _safe_bool(value, default: bool = False) -> bool:
    """Safely convert value to bool."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "si", "sí")
    return default


@dataclass(frozen=True)
class TimeSlot:
    """A same-day service window, times as "HH:MM" wall-clock strings."""
    start: str
    end: str

    @classmethod
    def from_value(cls, value: Any) -> "TimeSlot":
        """
        Build a slot from the shapes found in stored schedules.

        Accepts {"start": ..., "end": ...}, "08:00-10:00" and ("08:00", "10:00").
        Unusable input yields a slot with empty times, which the hours
        aggregator drops and reports.
        """
        if isinstance(value, TimeSlot):
            return value
        if isinstance(value, dict):
            return cls(str(value.get("start") or "").strip(), str(value.get("end") or "").strip())
        if isinstance(value, str) and "-" in value:
            start, _, end = value.partition("-")
            return cls(start.strip(), end.strip())
        if isinstance(value, (list, tuple)) and len(value) == 2:
            return cls(str(value[0]).strip(), str(value[1]).strip())
        return cls("", "")

    def to_dict(self) -> Dict[str, str]:
        return {"start": self.start, "end": self.end}

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"


@dataclass
class DaySchedule:
    """Enablement and time slots for one schedule key."""
    enabled: bool = False
    time_slots: List[TimeSlot] = field(default_factory=list)

    @classmethod
    def disabled(cls) -> "DaySchedule":
        return cls(enabled=False, time_slots=[])

    @classmethod
    def from_value(cls, value: Any) -> Optional["DaySchedule"]:
        """
        Parse a stored day value.

        Current format is {"enabled": bool, "timeSlots": [...]}. Older records
        store a bare list of slots (["08:00", "10:00"], ["08:00-10:00", ...] or
        [{"start", "end"}, ...]), enabled when non-empty.

        Returns:
            DaySchedule, or None if the value has no recognisable shape
        """
        if isinstance(value, DaySchedule):
            return value
        if isinstance(value, dict):
            raw_slots = value.get("timeSlots", value.get("time_slots")) or []
            if not isinstance(raw_slots, (list, tuple)):
                raw_slots = [raw_slots]
            return cls(
                enabled=_safe_bool(value.get("enabled")),
                time_slots=[TimeSlot.from_value(s) for s in raw_slots],
            )
        if isinstance(value, (list, tuple)):
            return cls(enabled=len(value) > 0, time_slots=_legacy_slots(list(value)))
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {"enabled": self.enabled, "timeSlots": [s.to_dict() for s in self.time_slots]}


def _legacy_slots(values: List[Any]) -> List[TimeSlot]:
    """Convert a legacy list of slots into TimeSlots."""
    if values and all(isinstance(v, str) and "-" not in v for v in values):
        # Flat list of times: ["08:00", "10:00", "13:00", "15:00"]
        if len(values) % 2 == 0:
            return [TimeSlot(values[i].strip(), values[i + 1].strip()) for i in range(0, len(values), 2)]
        return [TimeSlot.from_value(None)]
    return [TimeSlot.from_value(v) for v in values]


@dataclass
class WeeklySchedule:
    """
    Weekly recurring schedule with exactly eight keys.

    The seven weekdays plus `holiday`, the variant applied when a public
    holiday lands on Monday-Friday.
    """
    monday: DaySchedule = field(default_factory=DaySchedule.disabled)
    tuesday: DaySchedule = field(default_factory=DaySchedule.disabled)
    wednesday: DaySchedule = field(default_factory=DaySchedule.disabled)
    thursday: DaySchedule = field(default_factory=DaySchedule.disabled)
    friday: DaySchedule = field(default_factory=DaySchedule.disabled)
    saturday: DaySchedule = field(default_factory=DaySchedule.disabled)
    sunday: DaySchedule = field(default_factory=DaySchedule.disabled)
    holiday: DaySchedule = field(default_factory=DaySchedule.disabled)

    def day(self, key: str) -> DaySchedule:
        """Get the DaySchedule for a schedule key."""
        key = normalize_day(key)
        if key not in SCHEDULE_KEYS:
            raise KeyError(key)
        return getattr(self, key)

    __getitem__ = day

    def items(self) -> Iterator[Tuple[str, DaySchedule]]:
        """Iterate (key, DaySchedule) over all eight keys, Monday first."""
        for key in SCHEDULE_KEYS:
            yield key, getattr(self, key)

    def enabled_keys(self) -> List[str]:
        return [key for key, day in self.items() if day.enabled]

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        """Serialize to the stored {key: {enabled, timeSlots}} format."""
        return {key: day.to_dict() for key, day in self.items()}

    @classmethod
    def from_dict(
        cls,
        raw: Any,
        anomalies: Optional[List[Anomaly]] = None,
        assignment_id: Optional[str] = None,
    ) -> "WeeklySchedule":
        """
        Build a schedule from a stored mapping, repairing what is missing.

        Missing or unreadable keys become disabled days. Each repair is
        appended to `anomalies` when a list is given; nothing is raised.

        Args:
            raw: Mapping of day name -> day value (any supported format)
            anomalies: Optional list collecting repair anomalies
            assignment_id: Owner id, recorded on anomalies

        Returns:
            A complete WeeklySchedule
        """
        if isinstance(raw, WeeklySchedule):
            return raw

        collected: List[Anomaly] = anomalies if anomalies is not None else []
        days: Dict[str, DaySchedule] = {}

        if not isinstance(raw, dict):
            if raw is not None:
                collected.append(Anomaly(
                    kind=AnomalyKind.REPAIRED_SCHEDULE,
                    message=f"Unreadable schedule of type {type(raw).__name__}, all days disabled",
                    assignment_id=assignment_id,
                ))
            raw = {}

        normalized = {normalize_day(k): v for k, v in raw.items()}
        for key in SCHEDULE_KEYS:
            day = DaySchedule.from_value(normalized.get(key))
            if day is None:
                reason = "missing" if normalized.get(key) is None else "unreadable"
                collected.append(Anomaly(
                    kind=AnomalyKind.REPAIRED_SCHEDULE,
                    message=f"Schedule key '{key}' {reason}, treated as disabled",
                    assignment_id=assignment_id,
                    schedule_key=key,
                ))
                day = DaySchedule.disabled()
            days[key] = day

        return cls(**days)

    @classmethod
    def default_for(cls, assignment_type: Any) -> "WeeklySchedule":
        """
        Initial schedule for a new assignment of the given type.

        laborables enables Monday-Friday, festivos enables the weekend and
        the holiday key, flexible enables all eight. Every enabled day gets
        the default 08:00-09:00 slot.
        """
        kind = str(getattr(assignment_type, "value", assignment_type))
        if kind == "laborables":
            enabled = WORKWEEK_KEYS
        elif kind == "festivos":
            enabled = WEEKEND_KEYS + [HOLIDAY_KEY]
        else:
            enabled = SCHEDULE_KEYS

        days = {}
        for key in SCHEDULE_KEYS:
            days[key] = DaySchedule(
                enabled=key in enabled,
                time_slots=[TimeSlot(DEFAULT_SLOT_START, DEFAULT_SLOT_END)],
            )
        return cls(**days)


__all__ = [
    "TimeSlot", "DaySchedule", "WeeklySchedule",
    "WEEKDAY_KEYS", "SCHEDULE_KEYS", "HOLIDAY_KEY",
]
