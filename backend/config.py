import os
import secrets
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parents[1]

DB_PATH = Path(os.getenv("RFID_DB_PATH", BASE_DIR / "database" / "attendance.db"))
STUDENTS_FILE = Path(os.getenv("RFID_STUDENTS_FILE", BASE_DIR / "database" / "seed" / "students.json"))
DEVICE_API_KEY = os.getenv("RFID_DEVICE_API_KEY", "rfid-device-key-change-me").strip()
ADMIN_EMAIL = os.getenv("RFID_ADMIN_EMAIL", "admin@example.com").strip().lower() or "admin@example.com"
ADMIN_PASSWORD = os.getenv("RFID_ADMIN_PASSWORD", "admin123").strip() or "admin123"
ADMIN_NAME = os.getenv("RFID_ADMIN_NAME", "Administrator").strip() or "Administrator"
SIGNING_KEY = (
    os.getenv("RFID_SIGNING_KEY", "").strip()
    or DEVICE_API_KEY
    or secrets.token_urlsafe(32)
)
AUTH_TOKEN_TTL_SECONDS = int(os.getenv("RFID_AUTH_TOKEN_TTL_SECONDS", "43200"))


def _parse_bool(value: str | None, fallback: bool) -> bool:
    if value is None:
        return fallback
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return fallback


def _parse_csv(value: str | None, fallback: list[str]) -> list[str]:
    if not value:
        return fallback
    parsed = [item.strip() for item in value.split(",") if item.strip()]
    return parsed or fallback


def _parse_log_level(value: str | None) -> str:
    normalized = (value or "").strip().upper()
    if normalized in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        return normalized
    return "INFO"


CORS_ALLOW_ORIGINS = _parse_csv(
    os.getenv("RFID_CORS_ALLOW_ORIGINS"),
    ["http://localhost:3000", "http://127.0.0.1:3000"],
)
CORS_ALLOW_METHODS = _parse_csv(
    os.getenv("RFID_CORS_ALLOW_METHODS"),
    ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
)
CORS_ALLOW_HEADERS = _parse_csv(
    os.getenv("RFID_CORS_ALLOW_HEADERS"),
    ["Authorization", "Content-Type", "Accept", "X-Api-Key"],
)
CORS_ALLOW_CREDENTIALS = _parse_bool(os.getenv("RFID_CORS_ALLOW_CREDENTIALS"), True)
ENABLE_DEBUG_ENDPOINTS = _parse_bool(os.getenv("RFID_ENABLE_DEBUG_ENDPOINTS"), False)

LOG_LEVEL = _parse_log_level(os.getenv("RFID_LOG_LEVEL"))

# Served when the roster has no subjects or cannot be read.
FALLBACK_SUBJECTS = _parse_csv(
    os.getenv("RFID_FALLBACK_SUBJECTS"),
    [
        "AT",
        "AI",
        "Cloud Computing",
        "PCE Lab",
        "Cloud Lab",
        "MAD Lab",
        "PCE",
        "IoT",
        "IoT Lab",
        "Cyber Security",
        "Mini Project",
    ],
)

DASHBOARD_POLL_SECONDS = max(
    1,
    int(os.getenv("RFID_DASHBOARD_POLL_SECONDS", "3")),
)
