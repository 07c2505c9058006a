import pytest
from fastapi.testclient import TestClient

import backend.config as config
import backend.main as main
import backend.routers.core as core
import backend.security as security
import database.db as db
from database.directory import reload_directory

DEVICE_KEY = "test-device-key"


@pytest.fixture()
def store(tmp_path, monkeypatch):
    test_db = tmp_path / "attendance_test.db"

    # Point the document store to a temp file for isolation.
    monkeypatch.setattr(config, "DB_PATH", test_db)
    monkeypatch.setattr(db, "DB_PATH", test_db)
    monkeypatch.setattr(core, "DB_PATH", test_db)

    db.create_tables()
    reload_directory(config.STUDENTS_FILE)
    return test_db


@pytest.fixture()
def client(store, monkeypatch):
    monkeypatch.setattr(security, "DEVICE_API_KEY", DEVICE_KEY)

    with TestClient(main.app) as c:
        yield c


@pytest.fixture()
def device_headers():
    return {"x-api-key": DEVICE_KEY}


def _login(client, email: str, password: str) -> dict:
    res = client.post("/auth/login", json={"email": email, "password": password})
    assert res.status_code == 200
    return {"Authorization": f"Bearer {res.json()['access_token']}"}


@pytest.fixture()
def auth_headers(client):
    return _login(client, config.ADMIN_EMAIL, config.ADMIN_PASSWORD)


def _seed_teacher(
    teacher_id: str,
    *,
    email: str,
    name: str = "Test Teacher",
    subjects: list[str] | None = None,
    password: str = "teacher-pass",
) -> None:
    db.set_document(
        f"users/{teacher_id}",
        {
            "email": email,
            "name": name,
            "role": "teacher",
            "subjects": subjects or [],
            "passwordHash": db.hash_password(password),
            "createdAt": "2024-01-01T00:00:00.000Z",
        },
    )


@pytest.fixture()
def seed_teacher(store):
    return _seed_teacher


@pytest.fixture()
def teacher_headers(client):
    _seed_teacher("T1", email="t1@example.com", name="Asha Patil", subjects=["AI", "IoT"])
    return _login(client, "t1@example.com", "teacher-pass")
