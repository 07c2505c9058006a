from fastapi import APIRouter, Depends

from backend.config import (
    DASHBOARD_POLL_SECONDS,
    DB_PATH,
    ENABLE_DEBUG_ENDPOINTS,
    FALLBACK_SUBJECTS,
)
from backend.errors import NotFoundError
from backend.security import require_session
from backend.validators import DAY_CODES

router = APIRouter()


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/debug/dbpath")
def dbpath(_session: dict = Depends(require_session)):
    if not ENABLE_DEBUG_ENDPOINTS:
        raise NotFoundError("Not found.")
    return {"db_path": str(DB_PATH)}


@router.get("/config/attendance")
def attendance_config():
    return {
        "dashboard_poll_seconds": DASHBOARD_POLL_SECONDS,
        "day_codes": list(DAY_CODES),
        "time_slot_pattern": r"^\d{1,2}-\d{1,2}$",
        "date_format": "YYYY-MM-DD",
        "fallback_subjects": list(FALLBACK_SUBJECTS),
    }
