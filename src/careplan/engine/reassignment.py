"""
Holiday Reassignment Detection
==============================
A client may be served on weekdays by one worker and on weekends/holidays
by another. When a holiday lands on a weekday, the holiday override can
change which assignments cover the client that day. This module compares,
per client, the holiday-aware resolution against the plain weekly pattern
(every day treated as a non-holiday) and records the dates where the
covering (assignment, worker) pairs differ.
"""
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from careplan.engine.calendar import holiday_index
from careplan.engine.hours import round_hours
from careplan.engine.resolver import Resolution, resolve_assignments
from careplan.models.assignment import Assignment
from careplan.models.config import EngineConfig
from careplan.models.holiday import Holiday
from careplan.models.results import ReassignmentRecord
from careplan.utils.logging_setup import get_logger

logger = get_logger("careplan.engine.reassignment")

Coverage = Set[Tuple[str, str]]  # {(assignment_id, worker_id)}


def _coverage_on(resolutions: Dict[str, Resolution], day: date) -> Tuple[Coverage, float]:
    """Covering pairs and total hours on a day."""
    pairs: Coverage = set()
    hours = 0.0
    for resolution in resolutions.values():
        entry = resolution.entry_for(day)
        if entry is not None:
            pairs.add((entry.assignment_id, entry.worker_id))
            hours += entry.hours
    return pairs, hours


def _workers(pairs: Coverage) -> Tuple[str, ...]:
    return tuple(sorted({worker for _, worker in pairs}))


def _pick(changed: Tuple[str, ...], side: Tuple[str, ...]) -> Optional[str]:
    """Worker that changed on this side, else the first covering worker, else None."""
    if changed:
        return changed[0]
    if side:
        return side[0]
    return None


def _reason(holiday: Holiday) -> str:
    if holiday.name:
        return f"Holiday on a weekday: {holiday.name}"
    return "Holiday on a weekday"


def detect_reassignments(
    user_id: str,
    assignments: Iterable[Assignment],
    year: int,
    month: int,
    holidays: Optional[Iterable[Any]] = None,
    config: Optional[EngineConfig] = None,
) -> List[ReassignmentRecord]:
    """
    Find weekday holidays where the holiday override changes a client's coverage.

    Args:
        user_id: Client whose assignments are compared
        assignments: Assignments (other clients' are ignored)
        year: Calendar year
        month: Month 1-12
        holidays: Holiday objects, dates or ISO strings
        config: Engine configuration

    Returns:
        ReassignmentRecords ordered by date
    """
    user_id = str(user_id)
    own = [a for a in assignments if a.user_id == user_id]
    index = holiday_index(holidays)
    weekday_holidays = sorted(
        (h for h in index.values()
         if h.date.year == year and h.date.month == month and not h.is_weekend),
        key=lambda h: h.date,
    )

    if not own or not weekday_holidays:
        return []

    actual = resolve_assignments(own, year, month, index, config)
    expected = resolve_assignments(own, year, month, None, config, ignore_holidays=True)

    records: List[ReassignmentRecord] = []
    for holiday in weekday_holidays:
        expected_pairs, expected_hours = _coverage_on(expected, holiday.date)
        actual_pairs, actual_hours = _coverage_on(actual, holiday.date)

        if expected_pairs == actual_pairs:
            continue

        expected_workers = _workers(expected_pairs)
        actual_workers = _workers(actual_pairs)
        left = tuple(w for w in expected_workers if w not in actual_workers)
        joined = tuple(w for w in actual_workers if w not in expected_workers)

        record = ReassignmentRecord(
            date=holiday.date,
            user_id=user_id,
            expected_worker_id=_pick(left, expected_workers),
            actual_worker_id=_pick(joined, actual_workers),
            reason=_reason(holiday),
            expected_worker_ids=expected_workers,
            actual_worker_ids=actual_workers,
            expected_hours=round_hours(expected_hours),
            actual_hours=round_hours(actual_hours),
            holiday_name=holiday.name,
        )
        logger.info(
            f"Reassignment for user {user_id} on {holiday.date}: "
            f"{list(expected_workers)} -> {list(actual_workers)}"
        )
        records.append(record)

    return records
