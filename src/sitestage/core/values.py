"""Value coercion and comparison rules shared by page queries.

Frontmatter values are loosely typed (strings, numbers, booleans, dates,
lists and maps). These helpers define one deterministic ordering and one
string form over all of them so that sorting, grouping and filtering never
fail on heterogeneous content.
"""

import re
from collections.abc import Mapping
from datetime import UTC, date, datetime, time
from typing import Any

_NUMERIC = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")

# Formats tried after ISO 8601 when coercing date strings
_DATE_FORMATS = (
    "%Y/%m/%d",
    "%Y/%m/%d %H:%M",
    "%Y/%m/%d %H:%M:%S",
    "%d.%m.%Y",
    "%d %B %Y",
    "%d %b %Y",
    "%B %d %Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%a, %d %b %Y %H:%M:%S %z",
)

_MISSING = object()


def get_path(data: Any, path: str, default: Any = None) -> Any:
    """Read a nested value using dot notation.

    Mapping keys and list indexes are both supported ("items.0.title").

    Args:
        data: Nested mapping/list structure
        path: Dotted path
        default: Value returned when any segment is missing

    Returns:
        Resolved value or default
    """
    value = _walk(data, path)
    return default if value is _MISSING else value


def has_path(data: Any, path: str) -> bool:
    """Check whether a dotted path exists in a nested structure."""
    return _walk(data, path) is not _MISSING


def _walk(data: Any, path: str) -> Any:
    current = data
    for segment in path.split("."):
        if isinstance(current, Mapping):
            if segment not in current:
                return _MISSING
            current = current[segment]
        elif isinstance(current, list | tuple) and segment.lstrip("-").isdigit():
            index = int(segment)
            if not -len(current) <= index < len(current):
                return _MISSING
            current = current[index]
        else:
            return _MISSING
    return current


def is_numeric(value: object) -> bool:
    """Return whether a value is a number or a numeric-looking string."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int | float):
        return True
    return isinstance(value, str) and _NUMERIC.match(value) is not None


def to_timestamp(value: object) -> int | None:
    """Convert a value to a unix timestamp when possible.

    Integers are taken as timestamps already; naive dates and datetimes
    are interpreted as UTC.

    Returns:
        Timestamp in seconds, or None when the value cannot be parsed
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, datetime):
        return _datetime_timestamp(value)
    if isinstance(value, date):
        return _datetime_timestamp(datetime.combine(value, time()))
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    parsed = _parse_date_string(text)
    if parsed is None:
        return None
    return _datetime_timestamp(parsed)


def _parse_date_string(text: str) -> datetime | None:
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def _datetime_timestamp(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return int(value.timestamp())


def strict_equals(left: object, right: object) -> bool:
    """Equality that also requires identical types (1 != 1.0 != True)."""
    return type(left) is type(right) and left == right


def compare_values(left: object, right: object) -> int:
    """Compare two values in a deterministic way.

    Rules, in order: identical values are equal; None sorts after any
    other value; numbers and numeric strings compare numerically; values
    that both parse as dates compare as timestamps; everything else
    compares by string form.

    Returns:
        Negative, zero or positive like a classic comparator
    """
    if strict_equals(left, right):
        return 0
    if left is None:
        return 1
    if right is None:
        return -1

    if is_numeric(left) and is_numeric(right):
        return _sign(float(left), float(right))  # type: ignore[arg-type]

    left_timestamp = to_timestamp(left)
    right_timestamp = to_timestamp(right)
    if left_timestamp is not None and right_timestamp is not None:
        return _sign(left_timestamp, right_timestamp)

    return _sign(stringify(left), stringify(right))


def _sign(left: Any, right: Any) -> int:
    return (left > right) - (left < right)


def stringify(value: object) -> str:
    """Convert any value to a comparable string; unsupported types become ""."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, str):
        return value
    if isinstance(value, int | float):
        return _number_string(value)
    if isinstance(value, datetime | date):
        return value.isoformat()
    if isinstance(value, Mapping):
        return ", ".join(stringify(item) for item in value.values())
    if isinstance(value, list | tuple):
        return ", ".join(stringify(item) for item in value)
    return ""


def _number_string(value: int | float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def group_key(value: object) -> str:
    """Normalize any value to a stable grouping key."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str | int | float | date):
        return stringify(value)
    if isinstance(value, list | tuple | Mapping):
        return stringify(value)
    return "unknown"


def sortable_value(value: object) -> object:
    """Normalize a value before comparison in field sorts.

    Numbers pass through, date-like values become timestamps, booleans
    become 1/0 and lists become their joined string form. None is kept so
    missing values sort last.
    """
    if isinstance(value, bool):
        return 1 if value else 0
    if isinstance(value, int | float):
        return value
    timestamp = to_timestamp(value)
    if timestamp is not None:
        return timestamp
    if value is None or isinstance(value, str):
        return value
    return stringify(value)
