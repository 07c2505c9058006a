import pytest

import database.db as db
from database.directory import load_directory, lookup_student


def test_default_admin_is_created_once(store):
    db.create_tables()
    users = db.list_documents("users")
    assert [user_id for user_id, _ in users] == [db.DEFAULT_ADMIN_ID]
    assert users[0][1]["role"] == "admin"


def test_password_hash_round_trip():
    hashed = db.hash_password("secret-pass")
    assert db.verify_password("secret-pass", hashed)
    assert not db.verify_password("wrong", hashed)
    assert not db.verify_password("secret-pass", "garbage")


def test_set_document_replaces_unless_merging(store):
    db.set_document("sessions/T1_2024-01-05", {"subject": "AI", "isActive": True})

    db.set_document("sessions/T1_2024-01-05", {"isActive": False}, merge=True)
    assert db.get_document("sessions/T1_2024-01-05") == {"subject": "AI", "isActive": False}

    db.set_document("sessions/T1_2024-01-05", {"isActive": True})
    assert db.get_document("sessions/T1_2024-01-05") == {"isActive": True}


def test_get_missing_document_returns_none(store):
    assert db.get_document("timetables/MON") is None


def test_list_documents_orders_by_field(store):
    db.set_document("attendance/2024-01-05/AI/A", {"timestamp": "2024-01-05T09:00:00.000Z"})
    db.set_document("attendance/2024-01-05/AI/B", {"timestamp": "2024-01-05T09:05:00.000Z"})
    db.set_document("attendance/2024-01-05/IoT/C", {"timestamp": "2024-01-05T10:00:00.000Z"})

    rows = db.list_documents("attendance/2024-01-05/AI", order_by="timestamp", descending=True)
    assert [doc_id for doc_id, _ in rows] == ["B", "A"]


def test_implicit_parents_are_listed(store):
    db.set_document("attendance/2024-01-05/AI/A", {"uid": "A"})
    db.set_document("attendance/2024-01-06/9-10/B", {"uid": "B"})
    db.set_document("attendance/2024-01-06/IoT/C", {"uid": "C"})

    assert db.list_document_ids("attendance") == ["2024-01-05", "2024-01-06"]
    assert db.list_collection_ids("attendance/2024-01-06") == ["9-10", "IoT"]
    assert db.list_document_ids("timetables") == []


def test_invalid_paths_are_rejected(store):
    with pytest.raises(ValueError):
        db.get_document("users")
    with pytest.raises(ValueError):
        db.set_document("users//x", {})
    with pytest.raises(ValueError):
        db.list_documents("users/admin")


def test_directory_normalizes_keys(tmp_path):
    path = tmp_path / "students.json"
    path.write_text('{" ab  cd ": {"name": "Nia", "rollNo": 7}}', encoding="utf-8")

    directory = load_directory(path)
    assert directory == {"AB CD": {"uid": "AB CD", "name": "Nia", "rollNumber": "7"}}


def test_seeded_directory_lookup(store):
    student = lookup_student("2c cc d6 b0")
    assert student is not None
    assert student["name"] == "Aarav Kulkarni"
    assert student["rollNumber"] == "5023101"
    assert lookup_student("FF FF FF FF") is None
