import json
import logging
from pathlib import Path

from backend.config import STUDENTS_FILE
from backend.records import StudentRecord
from backend.validators import normalize_uid

logger = logging.getLogger(__name__)

UNKNOWN_NAME = "Unknown"
UNKNOWN_ROLL = "Unknown"

_DIRECTORY: dict[str, StudentRecord] | None = None


def load_directory(path: Path) -> dict[str, StudentRecord]:
    """
    Read the seeded student list: {"<card uid>": {"name": ..., "rollNumber": ...}}.
    Keys are normalized so the file may use any spacing or case.
    """
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError(f"Student directory must be a JSON object: {path}")

    directory: dict[str, StudentRecord] = {}
    for uid, info in raw.items():
        key = normalize_uid(str(uid))
        if not key or not isinstance(info, dict):
            continue
        directory[key] = {
            "uid": key,
            "name": str(info.get("name") or UNKNOWN_NAME),
            "rollNumber": str(info.get("rollNumber") or info.get("rollNo") or UNKNOWN_ROLL),
        }
    return directory


def reload_directory(path: Path | None = None) -> int:
    global _DIRECTORY
    _DIRECTORY = load_directory(path or STUDENTS_FILE)
    logger.info("Student directory loaded (%d cards)", len(_DIRECTORY))
    return len(_DIRECTORY)


def get_directory() -> dict[str, StudentRecord]:
    if _DIRECTORY is None:
        reload_directory()
    return dict(_DIRECTORY or {})


def lookup_student(uid: str) -> StudentRecord | None:
    return get_directory().get(normalize_uid(uid))
