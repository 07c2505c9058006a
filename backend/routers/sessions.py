from fastapi import APIRouter, Depends
from pydantic import BaseModel

from backend import timeutil
from backend.errors import NotFoundError, PermissionDeniedError
from backend.records import empty_session
from backend.security import require_device_or_session, require_session
from backend.services.sessions import (
    current_scope,
    deactivate_session,
    get_active_class,
    get_active_session,
    get_current_teacher,
    make_scope,
    set_active_session,
)
from backend.services.users import get_user
from backend.validators import optional_str

router = APIRouter()


class SessionRequest(BaseModel):
    date: str
    subject: str | None = None
    timeSlot: str | None = None
    teacherId: str | None = None
    teacherEmail: str | None = None
    teacherName: str | None = None


def _check_teacher_target(session: dict, teacher_id: str) -> None:
    if session.get("role") != "admin" and teacher_id != session.get("sub"):
        raise PermissionDeniedError("Teachers can only manage their own sessions.")


@router.get("/session")
def read_session(
    teacherId: str | None = None,
    date: str | None = None,
    _session: dict = Depends(require_session),
):
    teacher_id = optional_str(teacherId)
    if teacher_id:
        scope = make_scope(teacher_id, optional_str(date) or timeutil.today_iso())
    else:
        scope = current_scope()
        if scope is None:
            return empty_session()
    return get_active_session(scope)


@router.post("/session")
def start_session(payload: SessionRequest, session: dict = Depends(require_session)):
    teacher_id = optional_str(payload.teacherId) or str(session["sub"])
    _check_teacher_target(session, teacher_id)

    subject = optional_str(payload.subject)
    if session.get("role") != "admin" and subject:
        account = get_user(teacher_id)
        if account is None or subject not in account["subjects"]:
            raise PermissionDeniedError(f"Subject {subject} is not assigned to you.")

    active = set_active_session(
        make_scope(teacher_id, payload.date),
        subject=subject,
        time_slot=payload.timeSlot,
        teacher_email=payload.teacherEmail,
        teacher_name=payload.teacherName,
    )
    return {"message": "Active session set successfully", "session": active}


@router.delete("/session")
def stop_session(
    teacherId: str | None = None,
    date: str | None = None,
    session: dict = Depends(require_session),
):
    teacher_id = optional_str(teacherId)
    if teacher_id:
        scope = make_scope(teacher_id, optional_str(date) or timeutil.today_iso())
    else:
        scope = current_scope()
        if scope is None:
            return {"message": "No active session", "deactivated": False}

    _check_teacher_target(session, scope.teacher_id)
    deactivated = deactivate_session(scope)
    return {"message": "Session deactivated successfully", "deactivated": deactivated}


@router.get("/activeClass")
def active_class(
    date: str | None = None,
    teacherId: str | None = None,
    _caller: dict | None = Depends(require_device_or_session),
):
    return get_active_class(date, teacherId)


@router.get("/currentTeacher")
def current_teacher(_caller: dict | None = Depends(require_device_or_session)):
    pointer = get_current_teacher()
    if pointer is None:
        raise NotFoundError("No active teacher")
    return pointer
