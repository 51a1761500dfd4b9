# letteros/auth/dependencies.py
from fastapi import HTTPException, Request, status
from typing import Optional
from letteros.config import settings
from letteros.auth.models import SessionUser
from letteros.auth.session import verify_session_token

async def get_current_user(request: Request) -> SessionUser:
    """Get current user from the session cookie - REQUIRED authentication"""
    session_token = request.cookies.get(settings.session_cookie_name)
    if not session_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized"
        )

    try:
        return verify_session_token(session_token)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized"
        )

async def get_optional_user(request: Request) -> Optional[SessionUser]:
    """Get current user if authenticated, otherwise None"""
    session_token = request.cookies.get(settings.session_cookie_name)
    if not session_token:
        return None

    try:
        return verify_session_token(session_token)
    except ValueError:
        return None
