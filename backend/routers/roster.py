from fastapi import APIRouter, Depends

from backend.errors import ValidationError
from backend.security import require_admin, require_session
from backend.services.users import all_subjects, subjects_for_email
from database.directory import get_directory

router = APIRouter()


@router.get("/subjects")
def subjects():
    return all_subjects()


@router.get("/teacher/subjects")
def teacher_subjects(email: str | None = None, _session: dict = Depends(require_session)):
    if not email or not email.strip():
        raise ValidationError("Email parameter is required")
    return subjects_for_email(email)


@router.get("/students")
def students(_session: dict = Depends(require_admin)):
    directory = get_directory()
    return {
        "total": len(directory),
        "students": sorted(directory.values(), key=lambda s: s["rollNumber"]),
    }
