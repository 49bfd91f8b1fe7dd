from datetime import datetime

from fastapi import Response

from ..config import COOKIE_SECURE
from .clock import utcnow


def set_session_cookie(response: Response, *, name: str, token: str, expires_at: datetime) -> None:
    max_age = max(int((expires_at - utcnow()).total_seconds()), 0)
    response.set_cookie(
        key=name,
        value=token,
        max_age=max_age,
        httponly=True,
        secure=COOKIE_SECURE,
        samesite="lax",
        path="/",
    )


def clear_session_cookie(response: Response, *, name: str) -> None:
    response.delete_cookie(key=name, path="/", httponly=True, secure=COOKIE_SECURE, samesite="lax")
