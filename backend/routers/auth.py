import time

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from backend.errors import PermissionDeniedError
from backend.records import UserAccount
from backend.security import issue_session_token, optional_session, require_session
from backend.services.users import authenticate, get_user, register_user

router = APIRouter()


class LoginRequest(BaseModel):
    email: str
    password: str


class RegisterRequest(BaseModel):
    email: str
    password: str
    name: str
    role: str = "teacher"
    subjects: list[str] = Field(default_factory=list)


def _token_response(account: UserAccount) -> dict:
    token, claims = issue_session_token(account["id"], role=account["role"], email=account["email"])
    now = int(time.time())
    return {
        "access_token": token,
        "token_type": "bearer",
        "user": account,
        "expires_at": claims["exp"],
        "expires_in": max(0, int(claims["exp"]) - now),
    }


@router.post("/auth/login")
def login(payload: LoginRequest):
    return _token_response(authenticate(payload.email, payload.password))


@router.post("/auth/register")
def register(payload: RegisterRequest, session: dict | None = Depends(optional_session)):
    if payload.role == "admin" and (session is None or session.get("role") != "admin"):
        raise PermissionDeniedError("Only an admin can create admin accounts.")

    account = register_user(
        email=payload.email,
        password=payload.password,
        name=payload.name,
        role=payload.role,
        subjects=payload.subjects,
    )
    return _token_response(account)


@router.get("/auth/me")
def auth_me(session: dict = Depends(require_session)):
    return {
        "id": session.get("sub"),
        "email": session.get("email"),
        "role": session.get("role"),
        "user": get_user(str(session.get("sub"))),
        "expires_at": session.get("exp"),
        "issued_at": session.get("iat"),
    }
