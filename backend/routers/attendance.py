from fastapi import APIRouter, Depends
from pydantic import BaseModel

from backend import timeutil
from backend.errors import PermissionDeniedError
from backend.security import require_device_key, require_session
from backend.services.attendance import (
    ScanContext,
    ingest_scan,
    list_attendance,
    list_attendance_dates,
    list_attendance_scopes,
    record_attendance,
)
from backend.services.users import get_user
from backend.validators import optional_str

router = APIRouter()


class DeviceScan(BaseModel):
    uid: str | None = None
    cardId: str | None = None
    teacherId: str | None = None
    subject: str | None = None
    timeSlot: str | None = None
    date: str | None = None
    timestamp: str | None = None
    teacherEmail: str | None = None


class ManualMark(BaseModel):
    uid: str
    subject: str | None = None
    timeSlot: str | None = None
    date: str | None = None
    present: bool = True


def _check_subject_access(session: dict, subject: str | None) -> None:
    if session.get("role") == "admin" or not subject:
        return
    account = get_user(str(session.get("sub")))
    if account is None or subject not in account["subjects"]:
        raise PermissionDeniedError(f"Subject {subject} is not assigned to you.")


@router.post("/attendance/mark", dependencies=[Depends(require_device_key)])
def mark_from_device(payload: DeviceScan):
    uid, item = ingest_scan(
        uid=payload.uid or payload.cardId,
        teacher_id=payload.teacherId,
        date=payload.date,
        subject=payload.subject,
        teacher_email=payload.teacherEmail,
    )
    return {"success": True, "id": uid, "item": item}


@router.post("/attendance")
def mark_manually(payload: ManualMark, session: dict = Depends(require_session)):
    subject = optional_str(payload.subject)
    _check_subject_access(session, subject)

    is_teacher = session.get("role") != "admin"
    context = ScanContext(
        date=optional_str(payload.date) or timeutil.today_iso(),
        subject=subject or "",
        time_slot=optional_str(payload.timeSlot) or "",
        teacher_id=str(session["sub"]) if is_teacher else None,
        teacher_email=session.get("email") if is_teacher else None,
    )
    uid, item = record_attendance(payload.uid, context, present=payload.present)
    return {"success": True, "id": uid, "item": item}


@router.get("/attendance")
def attendance_by_subject(
    date: str | None = None,
    subject: str | None = None,
    session: dict = Depends(require_session),
):
    _check_subject_access(session, optional_str(subject))
    return list_attendance(date, subject)


@router.get("/attendance/view")
def attendance_by_time_slot(
    date: str | None = None,
    timeSlot: str | None = None,
    session: dict = Depends(require_session),
):
    # Slot keys are shared across teachers; a teacher sees only their own scans.
    teacher_email = None if session.get("role") == "admin" else str(session.get("email") or "")
    return list_attendance(date, timeSlot, by_time_slot=True, teacher_email=teacher_email)


@router.get("/attendance/dates")
def attendance_dates(_session: dict = Depends(require_session)):
    return list_attendance_dates()


@router.get("/attendance/dates/{date}")
def attendance_scopes_for_date(date: str, _session: dict = Depends(require_session)):
    return list_attendance_scopes(date)
