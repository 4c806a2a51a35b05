import re
from typing import Any, Optional

_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")

# Largest value a signed 64-bit SQL INTEGER column or bind parameter can hold
MAX_SQL_INTEGER = 2**63 - 1


def to_str(value: Any) -> str:
    """Convert a value to a trimmed string. None becomes an empty string."""
    if value is None:
        return ""
    return str(value).strip()


def is_blank(value: Any) -> bool:
    """True for None and for values that are empty once trimmed."""
    return to_str(value) == ""


def to_int(value: Any) -> Optional[int]:
    """
    Convert a value to int without raising.

    Accepts ints, integral floats and strings of ASCII digits with an optional sign.
    Booleans are rejected even though they subclass int.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    text = to_str(value)
    if not _INTEGER_PATTERN.fullmatch(text):
        return None
    try:
        return int(text)
    except ValueError:
        # Past the interpreter's int string conversion limit
        return None
