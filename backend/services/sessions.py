"""
Active-session state.

One session document per (teacher, date) scope at sessions/{teacherId}_{date}.
Setting a session overwrites the scope's document; deactivating flips
isActive and keeps the rest as a trace. system/currentActiveTeacher points at
the teacher whose session the scanner should write into.
"""
import logging
from dataclasses import dataclass

from backend import timeutil
from backend.errors import NoActiveSessionError, NotFoundError, ValidationError
from backend.records import (
    ActiveSession,
    CurrentTeacher,
    empty_session,
    session_from_document,
)
from backend.services.users import get_user
from backend.validators import optional_str, require_date, require_segment, require_time_slot
from database.db import get_document, set_document

logger = logging.getLogger(__name__)

POINTER_PATH = "system/currentActiveTeacher"


@dataclass(frozen=True)
class SessionScope:
    teacher_id: str
    date: str

    @property
    def document_path(self) -> str:
        return f"sessions/{self.teacher_id}_{self.date}"


def make_scope(teacher_id: str | None, date: str | None) -> SessionScope:
    return SessionScope(
        teacher_id=require_segment(teacher_id, "teacherId"),
        date=require_date(date),
    )


def set_active_session(
    scope: SessionScope,
    *,
    subject: str | None = None,
    time_slot: str | None = None,
    teacher_email: str | None = None,
    teacher_name: str | None = None,
) -> ActiveSession:
    clean_subject = optional_str(subject)
    if clean_subject is not None:
        clean_subject = require_segment(clean_subject, "subject")
    clean_slot = optional_str(time_slot)
    if clean_slot is not None:
        clean_slot = require_time_slot(clean_slot)
    if not clean_subject and not clean_slot:
        raise ValidationError("Missing required field: subject or timeSlot")

    email = optional_str(teacher_email)
    name = optional_str(teacher_name)
    if not email or not name:
        account = get_user(scope.teacher_id)
        if account:
            email = email or account["email"] or None
            name = name or account["name"] or None

    now = timeutil.utc_now_iso()
    existing = get_document(scope.document_path)
    created_at = (existing or {}).get("createdAt") or now

    data = {
        "teacherId": scope.teacher_id,
        "teacherEmail": email,
        "teacherName": name,
        "date": scope.date,
        "subject": clean_subject or "",
        "timeSlot": clean_slot or "",
        "isActive": True,
        "createdAt": created_at,
        "updatedAt": now,
    }
    set_document(scope.document_path, data)
    set_document(
        POINTER_PATH,
        {
            "teacherId": scope.teacher_id,
            "teacherEmail": email,
            "teacherName": name,
            "date": scope.date,
            "updatedAt": now,
        },
    )
    logger.info(
        "Active session set: %s (%s) %s subject=%r slot=%r",
        name or scope.teacher_id,
        email or "no email",
        scope.date,
        clean_subject,
        clean_slot,
    )
    return session_from_document(data)


def get_active_session(scope: SessionScope) -> ActiveSession:
    data = get_document(scope.document_path)
    if not data or not data.get("isActive"):
        return empty_session()
    return session_from_document(data)


def deactivate_session(scope: SessionScope) -> bool:
    """Returns False when the scope never had a session."""
    now = timeutil.utc_now_iso()
    existing = get_document(scope.document_path)
    if existing is not None:
        set_document(scope.document_path, {"isActive": False, "updatedAt": now}, merge=True)

    pointer = get_document(POINTER_PATH)
    if pointer and pointer.get("teacherId") == scope.teacher_id and pointer.get("date") == scope.date:
        set_document(
            POINTER_PATH,
            {
                "teacherId": "",
                "teacherEmail": "",
                "teacherName": "",
                "date": "",
                "updatedAt": now,
            },
        )

    logger.info("Session deactivated for %s on %s", scope.teacher_id, scope.date)
    return existing is not None


def get_current_teacher() -> CurrentTeacher | None:
    data = get_document(POINTER_PATH)
    if not data or not data.get("teacherId"):
        return None
    return {
        "teacherId": str(data["teacherId"]),
        "teacherEmail": data.get("teacherEmail") or None,
        "teacherName": data.get("teacherName") or None,
        "date": data.get("date") or None,
        "updatedAt": data.get("updatedAt") or None,
    }


def current_scope() -> SessionScope | None:
    pointer = get_current_teacher()
    if pointer is None:
        return None
    return SessionScope(
        teacher_id=pointer["teacherId"],
        date=pointer["date"] or timeutil.today_iso(),
    )


def get_active_class(date: str | None, teacher_id: str | None = None) -> ActiveSession:
    clean_date = require_date(date)
    clean_teacher = optional_str(teacher_id)
    if not clean_teacher:
        pointer = get_current_teacher()
        if pointer is None:
            raise NotFoundError("No active teacher found")
        clean_teacher = pointer["teacherId"]

    session = get_active_session(make_scope(clean_teacher, clean_date))
    if not session["isActive"]:
        raise NotFoundError("No active session")
    return session


def resolve_session_for_scan(teacher_id: str | None, date: str | None) -> ActiveSession:
    """
    Scope for a device scan: explicit teacherId/date from the payload, else
    the current active teacher and that pointer's date.
    """
    clean_teacher = optional_str(teacher_id)
    clean_date = optional_str(date)

    pointer = None
    if not clean_teacher or not clean_date:
        pointer = get_current_teacher()

    if not clean_teacher:
        if pointer is None:
            raise NoActiveSessionError("No active session: no teacher is currently active")
        clean_teacher = pointer["teacherId"]
    if not clean_date:
        if pointer and pointer["teacherId"] == clean_teacher and pointer["date"]:
            clean_date = pointer["date"]
        else:
            clean_date = timeutil.today_iso()

    session = get_active_session(make_scope(clean_teacher, clean_date))
    if not session["isActive"]:
        raise NoActiveSessionError(
            f"No active session for teacher {clean_teacher} on {clean_date}"
        )
    return session
