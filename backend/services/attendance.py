import logging
from dataclasses import dataclass

from backend import timeutil
from backend.errors import NotFoundError, ValidationError
from backend.records import ActiveSession, AttendanceRecord, attendance_from_document
from backend.services.sessions import resolve_session_for_scan
from backend.services.users import get_user, teacher_email_for_subject
from backend.validators import (
    normalize_uid,
    optional_str,
    require_date,
    require_segment,
    require_time_slot,
)
from database.db import list_collection_ids, list_document_ids, list_documents, set_document
from database.directory import UNKNOWN_NAME, UNKNOWN_ROLL, lookup_student

logger = logging.getLogger(__name__)

UNREGISTERED_TEACHER_EMAIL = "teacher-{teacher_id}@example.com"


@dataclass(frozen=True)
class ScanContext:
    """
    Where a scan is filed: date plus subject or time slot, and who teaches it.
    Records go under the subject, or the slot for slot-only sessions.
    """

    date: str
    subject: str = ""
    time_slot: str = ""
    teacher_id: str | None = None
    teacher_email: str | None = None

    @property
    def key(self) -> str:
        return self.subject or self.time_slot


def context_from_session(session: ActiveSession, *, teacher_email: str | None = None) -> ScanContext:
    return ScanContext(
        date=session["date"],
        subject=session["subject"],
        time_slot=session["timeSlot"],
        teacher_id=session["teacherId"],
        teacher_email=session["teacherEmail"] or optional_str(teacher_email),
    )


def _resolve_teacher_email(context: ScanContext) -> str:
    if context.teacher_email:
        return context.teacher_email

    if context.teacher_id:
        account = get_user(context.teacher_id)
        if account and account["email"]:
            return account["email"]

    if context.subject:
        email = teacher_email_for_subject(context.subject)
        if email:
            return email

    if context.teacher_id:
        # Session opened for a teacher id with no account behind it.
        placeholder = UNREGISTERED_TEACHER_EMAIL.format(teacher_id=context.teacher_id)
        logger.warning("No account for teacher %s; filing scans under %s", context.teacher_id, placeholder)
        return placeholder

    raise NotFoundError("No teacher for subject")


def record_attendance(
    uid: str | None,
    context: ScanContext,
    *,
    present: bool = True,
) -> tuple[str, AttendanceRecord]:
    """
    Write one record at attendance/{date}/{subject or slot}/{uid}.
    A second scan of the same card in the same scope replaces the first.
    """
    normalized = normalize_uid(uid or "")
    if not normalized:
        raise ValidationError("Missing required field: uid")
    if "/" in normalized:
        raise ValidationError("uid must not contain '/'")

    date = require_date(context.date)
    if not context.key:
        raise ValidationError("Missing required field: subject")
    key = require_segment(context.key, "subject")
    if context.time_slot:
        require_time_slot(context.time_slot)

    student = lookup_student(normalized)
    if student is None:
        logger.warning("Unrecognized card %s recorded as Unknown", normalized)

    teacher_email = _resolve_teacher_email(context)

    record: AttendanceRecord = {
        "uid": normalized,
        "name": student["name"] if student else UNKNOWN_NAME,
        "rollNumber": student["rollNumber"] if student else UNKNOWN_ROLL,
        "present": bool(present),
        "timestamp": timeutil.utc_now_iso(),
        "date": date,
        "subject": context.subject,
        "timeSlot": context.time_slot,
        "teacherEmail": teacher_email,
    }
    set_document(f"attendance/{date}/{key}/{normalized}", dict(record))
    logger.info(
        "Attendance recorded: %s (%s) %s %s present=%s by %s",
        normalized,
        record["name"],
        date,
        key,
        record["present"],
        teacher_email,
    )
    return normalized, record


def ingest_scan(
    *,
    uid: str | None,
    teacher_id: str | None = None,
    date: str | None = None,
    subject: str | None = None,
    teacher_email: str | None = None,
) -> tuple[str, AttendanceRecord]:
    """Device path: the scan is filed under whatever session is active for its scope."""
    if not optional_str(uid):
        raise ValidationError("Missing required field: uid")

    session = resolve_session_for_scan(teacher_id, date)

    requested = optional_str(subject)
    if requested and session["subject"] and requested != session["subject"]:
        logger.warning(
            "Scanner sent subject %r but active session is %r; using the session",
            requested,
            session["subject"],
        )

    return record_attendance(uid, context_from_session(session, teacher_email=teacher_email))


def list_attendance(
    date: str | None,
    key: str | None,
    *,
    by_time_slot: bool = False,
    teacher_email: str | None = None,
) -> list[AttendanceRecord]:
    """Newest first. With teacher_email, only records filed under that teacher."""
    clean_date = require_date(date)
    if by_time_slot:
        clean_key = require_time_slot(key)
    else:
        clean_key = require_segment(key, "subject")

    documents = list_documents(
        f"attendance/{clean_date}/{clean_key}",
        order_by="timestamp",
        descending=True,
    )
    records = [attendance_from_document(data) for _, data in documents]
    if teacher_email is not None:
        wanted = teacher_email.strip().lower()
        records = [r for r in records if r["teacherEmail"].lower() == wanted]
    return records


def list_attendance_dates() -> list[str]:
    return list_document_ids("attendance")


def list_attendance_scopes(date: str | None) -> list[str]:
    return list_collection_ids(f"attendance/{require_date(date)}")
