from __future__ import annotations

from fastapi import Depends, HTTPException, Request

from ..store import get_store
from ..store.json_store import Store
from ..store.models import User

SESSION_USER_KEY = "user_id"


def get_current_user(request: Request, store: Store = Depends(get_store)) -> User | None:
    """Return the logged-in user, or ``None``."""
    user_id = request.session.get(SESSION_USER_KEY)
    if not user_id:
        return None
    return store.load().find_user(user_id)


def require_user(user: User | None = Depends(get_current_user)) -> User:
    """Raise 401 if no user is logged in or the session's user no longer exists."""
    if user is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user
