import re
from decimal import ROUND_HALF_UP, Decimal

import pandas as pd

# Leading course code in a title: "CSE301-Machine Learning", "  com101 - Comm Skills".
LEADING_CODE = re.compile(r'^([A-Za-z]{2,4}\d{3})')
_PREFIX = re.compile(r'^[A-Za-z]+')
_DIGITS = re.compile(r'\d+')


def _text(val) -> str:
    if val is None:
        return ""
    try:
        if pd.isna(val):
            return ""
    except (TypeError, ValueError):
        pass
    return str(val)


def resolve_code(course: dict) -> str | None:
    """
    Returns the course code, upper-cased.

    Prefers the explicit `code` field; otherwise pulls a leading code out of
    the course name. Returns None when neither yields one.
    """
    code = _text(course.get("code")).strip()
    if code:
        return code.upper()

    name = _text(course.get("name")).strip()
    if name:
        m = LEADING_CODE.match(name)
        if m:
            return m.group(1).upper()
    return None


def code_prefix(code: str | None) -> str:
    """'CSE' from 'CSE301'. '' when there is no leading letter run."""
    if not code:
        return ""
    m = _PREFIX.match(code)
    return m.group(0).upper() if m else ""


def code_level(code: str | None) -> int:
    """301 from 'CSE301'. 0 when the code has no digits."""
    if not code:
        return 0
    m = _DIGITS.search(code)
    return int(m.group(0)) if m else 0


def normalize_type(course: dict) -> str:
    return _text(course.get("type")).strip().lower()


def normalize_name(course: dict) -> str:
    return _text(course.get("name")).strip().lower()


def safe_number(val, default: float = 0.0) -> float:
    """Numeric value of val, or default for None/NaN/garbage."""
    try:
        if pd.isna(val):
            return default
    except (TypeError, ValueError):
        return default
    if isinstance(val, bool):
        return float(val)
    try:
        out = float(val)
    except (TypeError, ValueError):
        return default
    return default if out != out else out


def safe_credits(course: dict) -> float:
    """Course credits, never negative."""
    return max(0.0, safe_number(course.get("credits")))


def safe_bool(val) -> bool:
    if val is None:
        return False
    if isinstance(val, bool):
        return val
    try:
        if pd.isna(val):
            return False
    except (TypeError, ValueError):
        return False
    if isinstance(val, (int, float)):
        return bool(val)
    return str(val).strip().lower() in {"true", "1", "yes", "y", "on"}


def round_half_up(value: float, places: int = 2) -> float:
    """Round the exact binary value half away from zero (8.125 -> 8.13)."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))
