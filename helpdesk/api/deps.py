# helpdesk/api/deps.py

from typing import AsyncGenerator

from fastapi import Depends, Request
from loguru import logger
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.core.config import settings
from helpdesk.core.constants import LOGIN_URL, MSG_UNAUTHORIZED
from helpdesk.core.database import get_session
from helpdesk.core.responses import AuthRedirect
from helpdesk.core.sessions import SessionContext, SessionStore
from helpdesk.models.enums import UserStatus
from helpdesk.schemas.auth import SessionSnapshot
from helpdesk.services.user_service import find_by_id


# ------------------------------------------------------------
# DB Session
# ------------------------------------------------------------
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    async for session in get_session():
        yield session


# ------------------------------------------------------------
# Session store (owned by the app, injected per request)
# ------------------------------------------------------------
def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


# ------------------------------------------------------------
# Read the caller's session without validating it
# ------------------------------------------------------------
async def get_session_context(
    request: Request,
    store: SessionStore = Depends(get_session_store),
) -> SessionContext:
    sid = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not sid:
        return SessionContext(sid=None, user=None)

    try:
        record = await store.get(sid)
    except Exception:
        # An unreadable store never yields a session
        logger.exception("Session store lookup failed")
        return SessionContext(sid=None, user=None)

    if not record or "user" not in record:
        return SessionContext(sid=None, user=None)

    try:
        user = SessionSnapshot(**record["user"])
    except (TypeError, ValidationError):
        logger.warning("Discarding malformed session record")
        return SessionContext(sid=sid, user=None)

    return SessionContext(sid=sid, user=user)


# ------------------------------------------------------------
# Session gate
# The credential store, not the session payload, decides whether
# the session is still valid. Re-checked on every request.
# ------------------------------------------------------------
async def require_auth(
    request: Request,
    context: SessionContext = Depends(get_session_context),
    store: SessionStore = Depends(get_session_store),
    session: AsyncSession = Depends(get_db_session),
) -> SessionContext:

    has_cookie = settings.SESSION_COOKIE_NAME in request.cookies

    if context.user is None:
        raise AuthRedirect(LOGIN_URL, MSG_UNAUTHORIZED, clear_session=has_cookie)

    try:
        user = await find_by_id(session, context.user.id)
    except Exception:
        # Fail closed: a broken trust check never grants access
        logger.exception(f"Session re-validation failed for user {context.user.id}")
        raise AuthRedirect(LOGIN_URL)

    if not user or user.status != UserStatus.Active:
        logger.info(f"Destroying stale session for user {context.user.id}")
        try:
            await store.destroy(context.sid)
        except Exception:
            logger.exception("Session destruction error")
        raise AuthRedirect(LOGIN_URL, clear_session=True)

    request.state.user = context.user
    return context
