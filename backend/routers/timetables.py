from fastapi import APIRouter, Depends
from pydantic import BaseModel

from backend.security import require_admin, require_session
from backend.services.timetable import get_day_timetable, put_day_timetable

router = APIRouter()


class TimetableSlot(BaseModel):
    subjectName: str
    timeSlot: str


class TimetableUpdate(BaseModel):
    subjects: list[TimetableSlot]


@router.get("/timetables")
def day_timetable(day: str | None = None, _session: dict = Depends(require_session)):
    return {"subjects": get_day_timetable(day)}


@router.put("/timetables/{day}")
def replace_day_timetable(day: str, payload: TimetableUpdate, _session: dict = Depends(require_admin)):
    entries = put_day_timetable(day, [slot.model_dump() for slot in payload.subjects])
    return {"day": day.strip().upper(), "subjects": entries}
