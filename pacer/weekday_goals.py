"""
Weekday goal map: how many problems to solve on each day of the week.

Days are numbered Sunday=0 through Saturday=6, which is how plans store
them. Python's date.weekday() numbers Monday=0, so always go through
day_of_week() instead of calling weekday() directly.
"""
import json
from datetime import date
from typing import Dict, Mapping, Optional

import structlog

from pacer.errors import InvalidInputError

logger = structlog.get_logger()

WEEKDAYS = range(7)
WEEKDAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


def day_of_week(day: date) -> int:
    """Day-of-week index with Sunday=0"""
    return (day.weekday() + 1) % 7


def _coerce_day(key) -> int:
    if isinstance(key, bool):
        raise ValueError(f"invalid weekday key {key!r}")
    day = int(key)
    if day not in WEEKDAYS:
        raise ValueError(f"weekday key {key!r} out of range 0-6")
    return day


def _coerce_goal(value) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"weekday goal {value!r} is not a non-negative integer")
    return value


def normalize_weekday_goals(goals: Mapping) -> Dict[int, int]:
    """
    Validate a caller-supplied weekday goal map and fill it out to all 7 days.

    Keys may be ints or numeric strings ("0".."6"); a day that is missing
    gets a goal of 0.

    Raises:
        InvalidInputError: on a non-mapping argument, out-of-range keys or
            negative/non-integer goals
    """
    if not isinstance(goals, Mapping):
        raise InvalidInputError(f"Invalid weekday goals: expected a day -> goal mapping, got {type(goals).__name__}")
    normalized = {day: 0 for day in WEEKDAYS}
    try:
        for key, value in goals.items():
            normalized[_coerce_day(key)] = _coerce_goal(value)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Invalid weekday goals: {e}") from e
    return normalized


def parse_weekday_goals(raw: Optional[str]) -> Optional[Dict[int, int]]:
    """
    Parse a persisted weekday goal map.

    Returns None ("no weekday override, use daily_goal") when the stored text
    is missing, unparsable, or contains anything other than day -> non-negative
    integer entries. Days stored as null are left out of the result.
    """
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None

    try:
        data = json.loads(raw) if isinstance(raw, str) else raw
        if not isinstance(data, dict):
            raise ValueError("weekday goals must be a JSON object")
        return {
            _coerce_day(key): _coerce_goal(value)
            for key, value in data.items()
            if value is not None
        }
    except (TypeError, ValueError) as e:
        logger.warning("weekday_goals_unparsable", raw=str(raw)[:80], error=str(e))
        return None


def serialize_weekday_goals(goals: Mapping[int, int]) -> str:
    """Serialize a weekday goal map for storage (keys "0".."6")"""
    return json.dumps({str(day): goals[day] for day in sorted(goals)})


def weekday_preset(weekday: int, weekend: int) -> Dict[int, int]:
    """Goal map with one value for Monday-Friday and another for Saturday/Sunday"""
    goals = {day: weekday for day in range(1, 6)}
    goals[0] = weekend
    goals[6] = weekend
    return normalize_weekday_goals(goals)


def format_weekday_goals(goals: Optional[Mapping[int, int]]) -> str:
    """Short human-readable form, e.g. 'Sun 5 Mon 10 ...'"""
    if not goals:
        return "-"
    return " ".join(f"{WEEKDAY_NAMES[day]} {goals[day]}" for day in sorted(goals))
