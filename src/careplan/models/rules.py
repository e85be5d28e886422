"""
Business Rules and Constants
============================
Central source of truth for schedule keys, day labels and defaults.
"""
from typing import Dict, List

# Weekly schedule keys (Monday first, matching date.weekday())
WEEKDAY_KEYS: List[str] = [
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
]
WORKWEEK_KEYS: List[str] = WEEKDAY_KEYS[:5]
WEEKEND_KEYS: List[str] = WEEKDAY_KEYS[5:]
HOLIDAY_KEY = "holiday"
SCHEDULE_KEYS: List[str] = WEEKDAY_KEYS + [HOLIDAY_KEY]

# Labels used by reports
DAY_LABELS: Dict[str, str] = {
    "monday": "Lunes",
    "tuesday": "Martes",
    "wednesday": "Miércoles",
    "thursday": "Jueves",
    "friday": "Viernes",
    "saturday": "Sábado",
    "sunday": "Domingo",
    "holiday": "Festivo",
}

# Day normalization map
DAY_ALIASES: Dict[str, str] = {
    "mon": "monday", "lun": "monday", "lunes": "monday",
    "tue": "tuesday", "mar": "tuesday", "martes": "tuesday",
    "wed": "wednesday", "mie": "wednesday", "miércoles": "wednesday", "miercoles": "wednesday",
    "thu": "thursday", "jue": "thursday", "jueves": "thursday",
    "fri": "friday", "vie": "friday", "viernes": "friday",
    "sat": "saturday", "sab": "saturday", "sábado": "saturday", "sabado": "saturday",
    "sun": "sunday", "dom": "sunday", "domingo": "sunday",
    "festivo": "holiday", "festivos": "holiday", "holidays": "holiday",
}

# Slot prefilled by the assignment forms
DEFAULT_SLOT_START = "08:00"
DEFAULT_SLOT_END = "09:00"

# Balance status threshold (hours)
DEFAULT_BALANCE_TOLERANCE = 0.1

# Average weeks per month used for quick monthly estimates
DEFAULT_WEEKS_PER_MONTH = 4.3


def normalize_day(s: str) -> str:
    """Normalize a day name to its schedule key (monday, ..., holiday)."""
    key = str(s).strip().lower()
    if key in SCHEDULE_KEYS:
        return key
    return DAY_ALIASES.get(key, key)
