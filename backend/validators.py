import re
from datetime import datetime

from backend.errors import ValidationError

DAY_CODES = ("MON", "TUE", "WED", "THUR", "FRI", "SAT", "SUN")

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_SLOT_RE = re.compile(r"^\d{1,2}-\d{1,2}$")


def normalize_uid(raw: str) -> str:
    """Trim, collapse inner whitespace and upper-case a scanned card UID."""
    return " ".join(raw.split()).upper()


def require_date(value: str | None, field_name: str = "date") -> str:
    candidate = (value or "").strip()
    if not candidate:
        raise ValidationError(f"Missing required field: {field_name}")
    if not _DATE_RE.match(candidate):
        raise ValidationError("Invalid date format. Use YYYY-MM-DD")
    try:
        datetime.strptime(candidate, "%Y-%m-%d")
    except ValueError:
        raise ValidationError(f"Invalid calendar date: {candidate}")
    return candidate


def require_time_slot(value: str | None) -> str:
    candidate = (value or "").strip()
    if not candidate:
        raise ValidationError("Missing required field: timeSlot")
    if not _TIME_SLOT_RE.match(candidate):
        raise ValidationError("Invalid time slot format. Use format like '9-10'")
    return candidate


def require_segment(value: str | None, field_name: str) -> str:
    # Values used as storage keys: non-empty and without the path separator.
    candidate = (value or "").strip()
    if not candidate:
        raise ValidationError(f"Missing required field: {field_name}")
    if "/" in candidate:
        raise ValidationError(f"{field_name} must not contain '/'")
    return candidate


def require_day_code(value: str | None) -> str:
    candidate = (value or "").strip().upper()
    if not candidate:
        raise ValidationError("Day parameter is required (e.g., MON, TUE, WED, THUR, FRI)")
    if candidate not in DAY_CODES:
        raise ValidationError("Invalid day format. Use MON, TUE, WED, THUR, FRI, SAT, or SUN")
    return candidate


def optional_str(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None
