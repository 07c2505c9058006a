from typing import Literal, TypedDict

Role = Literal["admin", "teacher"]


class StudentRecord(TypedDict):
    uid: str
    name: str
    rollNumber: str


class UserAccount(TypedDict):
    id: str
    email: str
    name: str
    role: Role
    subjects: list[str]
    createdAt: str | None


class TimetableEntry(TypedDict):
    subjectName: str
    timeSlot: str
    teacherEmail: str


class ActiveSession(TypedDict):
    teacherId: str | None
    teacherEmail: str | None
    teacherName: str | None
    date: str
    subject: str
    timeSlot: str
    isActive: bool
    createdAt: str | None
    updatedAt: str | None


class CurrentTeacher(TypedDict):
    teacherId: str
    teacherEmail: str | None
    teacherName: str | None
    date: str | None
    updatedAt: str | None


class AttendanceRecord(TypedDict):
    uid: str
    name: str
    rollNumber: str
    present: bool
    timestamp: str
    date: str
    subject: str
    timeSlot: str
    teacherEmail: str


def empty_session() -> ActiveSession:
    return {
        "teacherId": None,
        "teacherEmail": None,
        "teacherName": None,
        "date": "",
        "subject": "",
        "timeSlot": "",
        "isActive": False,
        "createdAt": None,
        "updatedAt": None,
    }


def session_from_document(data: dict) -> ActiveSession:
    return {
        "teacherId": data.get("teacherId") or None,
        "teacherEmail": data.get("teacherEmail") or None,
        "teacherName": data.get("teacherName") or None,
        "date": str(data.get("date") or ""),
        "subject": str(data.get("subject") or ""),
        "timeSlot": str(data.get("timeSlot") or ""),
        "isActive": bool(data.get("isActive")),
        "createdAt": data.get("createdAt") or None,
        "updatedAt": data.get("updatedAt") or None,
    }


def attendance_from_document(data: dict) -> AttendanceRecord:
    return {
        "uid": str(data.get("uid") or ""),
        "name": str(data.get("name") or "Unknown"),
        "rollNumber": str(data.get("rollNumber") or "Unknown"),
        "present": bool(data.get("present", True)),
        "timestamp": str(data.get("timestamp") or ""),
        "date": str(data.get("date") or ""),
        "subject": str(data.get("subject") or ""),
        "timeSlot": str(data.get("timeSlot") or ""),
        "teacherEmail": str(data.get("teacherEmail") or ""),
    }


def user_from_document(user_id: str, data: dict) -> UserAccount:
    role = data.get("role")
    subjects = data.get("subjects")
    return {
        "id": user_id,
        "email": str(data.get("email") or ""),
        "name": str(data.get("name") or ""),
        "role": "admin" if role == "admin" else "teacher",
        "subjects": [str(s) for s in subjects] if isinstance(subjects, list) else [],
        "createdAt": data.get("createdAt") or None,
    }
