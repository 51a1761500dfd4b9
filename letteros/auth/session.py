# letteros/auth/session.py
from datetime import datetime, timedelta, timezone
from jose import jwt, JWTError
from letteros.config import settings
from letteros.auth.models import SessionUser

def create_session_token(user: SessionUser) -> str:
    """Signed session cookie value, valid for session_expire_days"""
    now = datetime.now(timezone.utc)
    claims = {
        "sub": user.id,
        "email": user.email,
        "name": user.name,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(days=settings.session_expire_days)).timestamp()),
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)

def verify_session_token(token: str) -> SessionUser:
    try:
        claims = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        raise ValueError(f"Invalid session: {e}")

    if not claims.get("sub"):
        raise ValueError("Invalid session: missing subject")
    return SessionUser(id=claims["sub"], email=claims.get("email", ""), name=claims.get("name"))
