from __future__ import annotations

import logging
import uuid

import bcrypt

from ..errors import Conflict, ValidationError
from ..store.json_store import Store
from ..store.models import Department, Team, User, utc_now
from .models import RegisterRequest

logger = logging.getLogger(__name__)


def _hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def _verify_password(plain: str, hashed: str) -> bool:
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(plain.encode(), hashed.encode())
    except ValueError:
        # Not a bcrypt hash.
        return False


def normalize_username(username: str) -> str:
    return username.strip().lower()


def find_department_by_code(
    teams: list[Team],
    code: str,
    team_code: str | None = None,
) -> tuple[Team, Department] | None:
    """Resolve a department code to its team and department.

    Codes are assumed unique across the directory; if several teams reuse one,
    the first team in directory order wins unless ``team_code`` narrows it.
    """
    wanted = code.strip().upper()
    for team in teams:
        if team_code is not None and team.code != team_code:
            continue
        for department in team.departments:
            if department.code and department.code.upper() == wanted:
                return team, department
    return None


def register(store: Store, payload: RegisterRequest) -> User:
    """Create a user under the department identified by ``department_code``."""
    username = normalize_username(payload.username or "")
    invalid = []
    if not username:
        invalid.append("username")
    if not payload.password:
        invalid.append("password")
    if not (payload.department_code or "").strip():
        invalid.append("departmentCode")
    if invalid:
        raise ValidationError("Username, password and department code are required", fields=invalid)

    db = store.load()
    team_code = payload.team_code.strip() if payload.team_code else None
    if team_code is not None and not any(t.code == team_code for t in db.teams):
        raise ValidationError("Unknown team code", fields=["teamCode"])

    match = find_department_by_code(db.teams, payload.department_code, team_code)
    if match is None:
        raise ValidationError("Unknown department code", fields=["departmentCode"])
    team, department = match

    if any(u.username == username for u in db.users):
        raise Conflict("Username is already taken")

    display_name = (payload.display_name or "").strip() or username
    user = User(
        id=str(uuid.uuid4()),
        username=username,
        display_name=display_name,
        department=department.name,
        department_code=department.code,
        team_id=team.id,
        created_at=utc_now(),
        password_hash=_hash_password(payload.password),
    )
    db.users.append(user)
    store.save(db)
    logger.info("Registered user %s in team %s (%s)", user.id, team.id, department.name)
    return user


def authenticate(store: Store, username: str, password: str) -> User | None:
    """Verify credentials. Returns the user or ``None``."""
    normalized = normalize_username(username)
    db = store.load()
    user = next((u for u in db.users if u.username == normalized), None)
    if user and _verify_password(password, user.password_hash):
        return user
    logger.warning("Failed login for username %r", normalized)
    return None
