import logging

from backend import timeutil
from backend.errors import NotFoundError, ValidationError
from backend.records import TimetableEntry
from backend.services.users import list_users, teacher_email_for_subject
from backend.validators import require_day_code, require_segment, require_time_slot
from database.db import get_document, set_document

logger = logging.getLogger(__name__)

NOT_ASSIGNED = "Not assigned"


def get_day_timetable(day: str | None) -> list[TimetableEntry]:
    """
    Entries for a day, each tagged with the email of the account whose subject
    list contains it. Linear scan of the roster per entry; classroom-sized data.
    """
    day_code = require_day_code(day)
    data = get_document(f"timetables/{day_code}")
    if data is None:
        raise NotFoundError(f"No timetable found for {day_code}")

    raw_entries = data.get("subjects")
    if not isinstance(raw_entries, list):
        raw_entries = []

    users = list_users()
    enriched: list[TimetableEntry] = []
    for index, entry in enumerate(raw_entries):
        if not isinstance(entry, dict):
            entry = {}
        subject_name = str(entry.get("subjectName") or f"Subject {index}")
        enriched.append(
            {
                "subjectName": subject_name,
                "timeSlot": str(entry.get("timeSlot") or "Unknown"),
                "teacherEmail": teacher_email_for_subject(subject_name, users) or NOT_ASSIGNED,
            }
        )

    logger.debug("Timetable for %s: %d entries", day_code, len(enriched))
    return enriched


def put_day_timetable(day: str | None, entries: list[dict]) -> list[dict]:
    day_code = require_day_code(day)
    clean: list[dict] = []
    for entry in entries:
        clean.append(
            {
                "subjectName": require_segment(entry.get("subjectName"), "subjectName"),
                "timeSlot": require_time_slot(entry.get("timeSlot")),
            }
        )
    if not clean:
        raise ValidationError("A timetable needs at least one entry.")

    set_document(
        f"timetables/{day_code}",
        {"subjects": clean, "updatedAt": timeutil.utc_now_iso()},
    )
    logger.info("Timetable for %s replaced (%d entries)", day_code, len(clean))
    return clean
