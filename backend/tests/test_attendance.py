from datetime import datetime, timezone

import pytest

from backend import timeutil
from backend.errors import NoActiveSessionError, NotFoundError, ValidationError
from backend.services import attendance, sessions


def _set_clock(monkeypatch, hour: int, minute: int = 0) -> None:
    monkeypatch.setattr(
        timeutil,
        "utc_now",
        lambda: datetime(2024, 1, 5, hour, minute, tzinfo=timezone.utc),
    )


@pytest.fixture()
def ai_session(seed_teacher):
    seed_teacher("T1", email="t1@example.com", subjects=["AI"])
    return sessions.set_active_session(sessions.make_scope("T1", "2024-01-05"), subject="AI", time_slot="9-10")


def test_scan_is_recorded_with_student_details(ai_session):
    uid, record = attendance.ingest_scan(uid="2c cc d6 b0", teacher_id="T1", date="2024-01-05")

    assert uid == "2C CC D6 B0"
    assert record["name"] == "Aarav Kulkarni"
    assert record["rollNumber"] == "5023101"
    assert record["present"] is True
    assert record["subject"] == "AI"
    assert record["timeSlot"] == "9-10"
    assert record["teacherEmail"] == "t1@example.com"


def test_rescan_overwrites_with_later_timestamp(ai_session, monkeypatch):
    _set_clock(monkeypatch, 9, 1)
    attendance.ingest_scan(uid="03 B7 4B 06", teacher_id="T1", date="2024-01-05")
    _set_clock(monkeypatch, 9, 7)
    attendance.ingest_scan(uid="03 b7 4b 06", teacher_id="T1", date="2024-01-05")

    rows = attendance.list_attendance("2024-01-05", "AI")
    assert len(rows) == 1
    assert rows[0]["timestamp"] == "2024-01-05T09:07:00.000Z"


def test_listing_is_newest_first(ai_session, monkeypatch):
    _set_clock(monkeypatch, 9, 1)
    attendance.ingest_scan(uid="03 B7 4B 06", teacher_id="T1", date="2024-01-05")
    _set_clock(monkeypatch, 9, 2)
    attendance.ingest_scan(uid="6A A1 E4 80", teacher_id="T1", date="2024-01-05")

    rows = attendance.list_attendance("2024-01-05", "AI")
    assert [r["name"] for r in rows] == ["Sumit", "Ved"]


def test_unknown_card_is_recorded_as_unknown(ai_session):
    _, record = attendance.ingest_scan(uid="de ad be ef", teacher_id="T1", date="2024-01-05")
    assert record["name"] == "Unknown"
    assert record["rollNumber"] == "Unknown"


def test_scan_without_uid_is_rejected(ai_session):
    with pytest.raises(ValidationError):
        attendance.ingest_scan(uid="   ", teacher_id="T1", date="2024-01-05")


def test_scan_without_session_is_rejected(store):
    with pytest.raises(NoActiveSessionError):
        attendance.ingest_scan(uid="2C CC D6 B0", teacher_id="T1", date="2024-01-05")

    assert attendance.list_attendance_dates() == []


def test_session_subject_wins_over_device_subject(ai_session):
    _, record = attendance.ingest_scan(
        uid="2C CC D6 B0",
        teacher_id="T1",
        date="2024-01-05",
        subject="IoT",
    )
    assert record["subject"] == "AI"
    assert attendance.list_attendance("2024-01-05", "IoT") == []


def test_slot_only_session_files_under_time_slot(seed_teacher):
    seed_teacher("T2", email="t2@example.com")
    sessions.set_active_session(sessions.make_scope("T2", "2024-01-05"), time_slot="11-12")

    attendance.ingest_scan(uid="2C CC D6 B0", teacher_id="T2", date="2024-01-05")

    rows = attendance.list_attendance("2024-01-05", "11-12", by_time_slot=True)
    assert len(rows) == 1
    assert rows[0]["subject"] == ""
    assert attendance.list_attendance_scopes("2024-01-05") == ["11-12"]


def test_teacher_email_falls_back_to_roster(seed_teacher):
    seed_teacher("T3", email="iot@example.com", subjects=["IoT"])
    context = attendance.ScanContext(date="2024-01-05", subject="IoT")

    _, record = attendance.record_attendance("2C CC D6 B0", context)
    assert record["teacherEmail"] == "iot@example.com"


def test_no_teacher_for_subject(store):
    context = attendance.ScanContext(date="2024-01-05", subject="Mini Project")
    with pytest.raises(NotFoundError, match="No teacher for subject"):
        attendance.record_attendance("2C CC D6 B0", context)


def test_empty_scope_lists_nothing(store):
    assert attendance.list_attendance("2024-01-05", "AI") == []


def test_listing_validates_inputs(store):
    with pytest.raises(ValidationError):
        attendance.list_attendance("2024-13-01", "AI")
    with pytest.raises(ValidationError):
        attendance.list_attendance("2024-01-05", "9:00", by_time_slot=True)
    with pytest.raises(ValidationError):
        attendance.list_attendance("2024-01-05", None)


def test_attendance_dates_and_scopes(ai_session):
    attendance.ingest_scan(uid="2C CC D6 B0", teacher_id="T1", date="2024-01-05")
    attendance.record_attendance(
        "03 B7 4B 06",
        attendance.ScanContext(date="2024-01-06", subject="AI", teacher_email="t1@example.com"),
    )

    assert attendance.list_attendance_dates() == ["2024-01-05", "2024-01-06"]
    assert attendance.list_attendance_scopes("2024-01-05") == ["AI"]


def test_scan_for_teacher_without_account_is_recorded(store):
    sessions.set_active_session(sessions.make_scope("T7", "2024-01-05"), subject="AI")

    _, record = attendance.ingest_scan(uid="2C CC D6 B0", teacher_id="T7", date="2024-01-05", subject="AI")
    assert record["teacherEmail"] == "teacher-T7@example.com"
    assert len(attendance.list_attendance("2024-01-05", "AI")) == 1


def test_scan_prefers_device_teacher_email(store):
    sessions.set_active_session(sessions.make_scope("T7", "2024-01-05"), subject="AI")

    _, record = attendance.ingest_scan(
        uid="2C CC D6 B0",
        teacher_id="T7",
        date="2024-01-05",
        teacher_email="t7@example.com",
    )
    assert record["teacherEmail"] == "t7@example.com"


def test_slot_listing_filters_by_teacher(seed_teacher):
    seed_teacher("T2", email="t2@example.com")
    sessions.set_active_session(sessions.make_scope("T2", "2024-01-05"), time_slot="11-12")
    attendance.ingest_scan(uid="2C CC D6 B0", teacher_id="T2", date="2024-01-05")

    assert len(attendance.list_attendance("2024-01-05", "11-12", by_time_slot=True, teacher_email="T2@example.com")) == 1
    assert attendance.list_attendance("2024-01-05", "11-12", by_time_slot=True, teacher_email="t1@example.com") == []
