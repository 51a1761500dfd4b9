# letteros/auth/routes.py
from fastapi import APIRouter, Response, Request, HTTPException, status
from letteros.auth.models import SessionRequest, SessionStatus
from letteros.auth.cognito import cognito_client
from letteros.auth.dependencies import get_optional_user
from letteros.auth.session import create_session_token
from letteros.config import settings
from letteros.database.connection import get_db_connection, release_db_connection
from letteros.database.user_repository import UserRepository
from letteros.utils.cookies import set_session_cookie, clear_session_cookie
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/auth", tags=["Authentication"])

@router.post("/session", response_model=SessionStatus)
async def create_session(body: SessionRequest, response: Response):
    """Exchange an identity provider token for a session cookie"""
    try:
        user = cognito_client.get_user_info(body.id_token)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid ID token"
        )

    connection = None
    try:
        connection = await get_db_connection()
        await UserRepository(connection).upsert_user(user.id, user.email, user.name)
    finally:
        if connection:
            await release_db_connection(connection)

    set_session_cookie(response, create_session_token(user))
    logger.info(f"Session created for {user.email}")
    return SessionStatus(authenticated=True, uid=user.id)

@router.get("/session", response_model=SessionStatus, response_model_exclude_none=True)
async def get_session(request: Request, response: Response):
    """Report whether the session cookie is valid; an invalid one is cleared"""
    user = await get_optional_user(request)
    if user is None:
        if request.cookies.get(settings.session_cookie_name) is not None:
            clear_session_cookie(response)
        return SessionStatus(authenticated=False)
    return SessionStatus(authenticated=True, uid=user.id)

@router.delete("/session")
async def delete_session(response: Response):
    clear_session_cookie(response)
    return {"success": True}
