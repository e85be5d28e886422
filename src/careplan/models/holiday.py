"""Public holiday model."""
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Dict, Optional

from .assignment import parse_date


class HolidayScope(str, Enum):
    """Administrative level that declares the holiday."""
    NATIONAL = "national"
    REGIONAL = "regional"
    LOCAL = "local"


@dataclass(frozen=True)
class Holiday:
    """A public holiday. Immutable once fetched."""
    date: date
    name: str
    scope: HolidayScope = HolidayScope.NATIONAL
    region: Optional[str] = None
    city: Optional[str] = None
    is_active: bool = True

    @property
    def is_weekend(self) -> bool:
        return self.date.weekday() >= 5

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "name": self.name,
            "type": self.scope.value,
            "region": self.region,
            "city": self.city,
            "is_active": self.is_active,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Holiday":
        """Create from a stored record. The scope column is called `type` upstream."""
        day = parse_date(d.get("date"))
        if day is None:
            raise ValueError(f"Invalid holiday date: {d.get('date')!r}")
        scope = d.get("type", d.get("scope")) or HolidayScope.NATIONAL.value
        active = d.get("is_active", True)
        if isinstance(active, str):
            active = active.strip().lower() in ("1", "true", "yes")
        return cls(
            date=day,
            name=str(d.get("name") or "").strip(),
            scope=HolidayScope(str(scope).strip().lower()),
            region=d.get("region") or None,
            city=d.get("city") or None,
            is_active=bool(active),
        )
