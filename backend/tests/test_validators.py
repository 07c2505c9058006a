import pytest

from backend.errors import ValidationError
from backend.validators import (
    normalize_uid,
    require_date,
    require_day_code,
    require_segment,
    require_time_slot,
)


@pytest.mark.parametrize(
    "raw",
    ["2c cc d6 b0", "  2C  cc D6\tb0 ", "2C CC D6 B0"],
)
def test_normalize_uid_is_case_and_spacing_insensitive(raw):
    assert normalize_uid(raw) == "2C CC D6 B0"


def test_normalize_uid_is_idempotent():
    once = normalize_uid(" a1  b2 ")
    assert normalize_uid(once) == once


def test_require_date_accepts_calendar_dates():
    assert require_date("2024-01-05") == "2024-01-05"
    assert require_date(" 2024-02-29 ") == "2024-02-29"


@pytest.mark.parametrize("value", ["2024-13-01", "2023-02-29", "2024-1-5", "05-01-2024", "today"])
def test_require_date_rejects_malformed_or_impossible(value):
    with pytest.raises(ValidationError):
        require_date(value)


def test_require_date_reports_missing_field():
    with pytest.raises(ValidationError, match="Missing required field: date"):
        require_date("  ")


@pytest.mark.parametrize("value", ["9-10", "14-15", "1-2"])
def test_require_time_slot_accepts(value):
    assert require_time_slot(value) == value


@pytest.mark.parametrize("value", ["9:00-10:00", "9", "abc", "9-10-11"])
def test_require_time_slot_rejects(value):
    with pytest.raises(ValidationError):
        require_time_slot(value)


def test_require_segment_rejects_path_separator():
    with pytest.raises(ValidationError):
        require_segment("AI/Lab", "subject")
    assert require_segment(" AI ", "subject") == "AI"


def test_require_day_code_is_case_insensitive():
    assert require_day_code("thur") == "THUR"
    with pytest.raises(ValidationError):
        require_day_code("THU")
    with pytest.raises(ValidationError):
        require_day_code(None)
