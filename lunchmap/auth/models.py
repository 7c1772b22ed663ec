from __future__ import annotations

from pydantic import BaseModel

from ..store.models import Record, Timestamp, User


class LoginRequest(BaseModel):
    username: str
    password: str


class RegisterRequest(Record):
    username: str | None = None
    password: str | None = None
    display_name: str | None = None
    department_code: str | None = None
    team_code: str | None = None


class UserOut(Record):
    """Public view of a user; credential material never leaves the server."""

    id: str
    username: str
    display_name: str
    department: str
    department_code: str
    team_id: str
    created_at: Timestamp

    @classmethod
    def from_user(cls, user: User) -> "UserOut":
        return cls.model_validate(user.model_dump(exclude={"password_hash"}))


class SessionResponse(Record):
    status: str = "ok"
    user: UserOut
