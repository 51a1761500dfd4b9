from fastapi import Response
from datetime import datetime, timedelta, timezone
from letteros.config import settings

def set_session_cookie(response: Response, session_token: str):
    """Set the HTTP-only session cookie"""
    max_age = settings.session_expire_days * 24 * 60 * 60
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session_token,
        max_age=max_age,
        expires=datetime.now(timezone.utc) + timedelta(seconds=max_age),
        path="/",
        domain=settings.cookie_domain,
        secure=settings.cookie_secure,
        httponly=settings.cookie_httponly,
        samesite=settings.cookie_samesite
    )

def clear_session_cookie(response: Response):
    response.delete_cookie(
        key=settings.session_cookie_name,
        path="/",
        domain=settings.cookie_domain
    )
