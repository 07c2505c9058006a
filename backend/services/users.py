import logging
import secrets

from backend import timeutil
from backend.config import FALLBACK_SUBJECTS
from backend.errors import AuthError, ConflictError, StorageError, ValidationError
from backend.records import UserAccount, user_from_document
from backend.validators import require_segment
from database.db import (
    get_document,
    hash_password,
    list_documents,
    set_document,
    verify_password,
)

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def _clean_email(email: str | None) -> str:
    candidate = (email or "").strip().lower()
    if not candidate or "@" not in candidate:
        raise ValidationError("A valid email is required.")
    return candidate


def get_user(user_id: str) -> UserAccount | None:
    clean_id = (user_id or "").strip()
    if not clean_id or "/" in clean_id:
        return None
    data = get_document(f"users/{clean_id}")
    if data is None:
        return None
    return user_from_document(clean_id, data)


def list_users() -> list[UserAccount]:
    return [user_from_document(user_id, data) for user_id, data in list_documents("users")]


def _find_user_document(email: str) -> tuple[str, dict] | None:
    for user_id, data in list_documents("users"):
        if str(data.get("email", "")).lower() == email:
            return user_id, data
    return None


def find_user_by_email(email: str) -> UserAccount | None:
    found = _find_user_document((email or "").strip().lower())
    if not found:
        return None
    return user_from_document(*found)


def register_user(
    *,
    email: str,
    password: str,
    name: str,
    role: str = "teacher",
    subjects: list[str] | None = None,
) -> UserAccount:
    clean_email = _clean_email(email)
    clean_name = (name or "").strip()
    if not clean_name:
        raise ValidationError("Name is required.")
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
    if role not in {"admin", "teacher"}:
        raise ValidationError("Role must be 'admin' or 'teacher'.")

    clean_subjects: list[str] = []
    for subject in subjects or []:
        value = require_segment(subject, "subject")
        if value not in clean_subjects:
            clean_subjects.append(value)

    if _find_user_document(clean_email):
        raise ConflictError("Email already registered.")

    user_id = secrets.token_hex(14)
    stored = set_document(
        f"users/{user_id}",
        {
            "email": clean_email,
            "name": clean_name,
            "role": role,
            "subjects": clean_subjects,
            "passwordHash": hash_password(password),
            "createdAt": timeutil.utc_now_iso(),
        },
    )
    logger.info("Registered %s account %s (%s)", role, user_id, clean_email)
    return user_from_document(user_id, stored)


def authenticate(email: str, password: str) -> UserAccount:
    clean_email = (email or "").strip().lower()
    if not clean_email or not password:
        raise ValidationError("Email and password are required.")

    found = _find_user_document(clean_email)
    if not found or not verify_password(password, str(found[1].get("passwordHash") or "")):
        raise AuthError("Invalid email or password")

    return user_from_document(*found)


# -----------------------------
# Roster (accounts and the subjects they teach)
# -----------------------------
def teacher_email_for_subject(subject: str, users: list[UserAccount] | None = None) -> str | None:
    for user in users if users is not None else list_users():
        if subject in user["subjects"] and user["email"]:
            return user["email"]
    return None


def subjects_for_email(email: str) -> list[str]:
    user = find_user_by_email(email)
    return list(user["subjects"]) if user else []


def all_subjects() -> list[str]:
    try:
        users = list_users()
    except StorageError:
        logger.warning("Roster unavailable; serving fallback subject list")
        return list(FALLBACK_SUBJECTS)

    found = sorted({subject for user in users for subject in user["subjects"]})
    return found or list(FALLBACK_SUBJECTS)
