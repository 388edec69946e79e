from functools import wraps
from typing import Callable, TypeVar, cast

from flask import session

from app.utils.http import error_response

F = TypeVar("F", bound=Callable[..., object])

SESSION_USER_KEY = "user"


def api_login_required(view_func: F) -> F:
    """Ensure an administrator is logged in for API endpoints (returns JSON 401)."""

    @wraps(view_func)
    def wrapped(*args, **kwargs):
        if SESSION_USER_KEY not in session:
            return error_response(
                "Authentication required",
                status=401,
                details={"code": "UNAUTHORIZED"},
            )
        return view_func(*args, **kwargs)

    return cast(F, wrapped)


def current_username() -> str | None:
    return session.get(SESSION_USER_KEY)


def start_admin_session(username: str) -> None:
    """Replace the session with a fresh, permanent (rolling) admin session."""
    session.clear()
    session[SESSION_USER_KEY] = username
    session.permanent = True


def end_admin_session() -> str | None:
    """Clear the session and return the username that was logged in, if any."""
    username = session.get(SESSION_USER_KEY)
    session.clear()
    return username
