# helpdesk/api/endpoints/auth.py

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse
from loguru import logger
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.api.deps import get_db_session, get_session_context, get_session_store
from helpdesk.core.config import settings
from helpdesk.core.constants import (
    DASHBOARD_URL,
    LOGIN_FIELD_MESSAGES,
    LOGIN_URL,
    MSG_LOGIN_ERROR,
    MSG_LOGIN_FAILED,
    MSG_LOGIN_SUCCESS,
    MSG_LOGOUT_SUCCESS,
)
from helpdesk.core.rate_limiter import get_real_ip, limiter
from helpdesk.core.responses import (
    clear_session_cookie,
    error_redirect,
    redirect,
    success_redirect,
    validation_message,
)
from helpdesk.core.sessions import SessionContext, SessionStore
from helpdesk.core.templating import render
from helpdesk.schemas.auth import LoginRequest
from helpdesk.services.auth_service import authenticate, create_session_data

router = APIRouter(prefix="/auth", tags=["Auth"])


# -------------------------------------------------------------------
# LOGIN PAGE
# -------------------------------------------------------------------
@router.get("/login", response_class=HTMLResponse)
async def login_page(
    request: Request,
    context: SessionContext = Depends(get_session_context),
):
    if context.is_authenticated:
        return redirect(DASHBOARD_URL)

    return render(request, "auth/login.html", {"title": "Staff Login"})


# -------------------------------------------------------------------
# LOGIN
# Every failure goes back to the login page with the same notice.
# -------------------------------------------------------------------
@router.post("/login")
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    session: AsyncSession = Depends(get_db_session),
    store: SessionStore = Depends(get_session_store),
    context: SessionContext = Depends(get_session_context),
):
    try:
        credentials = LoginRequest(username=username, password=password)
    except ValidationError as e:
        return error_redirect(request, validation_message(e, LOGIN_FIELD_MESSAGES), LOGIN_URL)

    try:
        user = await authenticate(session, credentials.username, credentials.password)
    except (SQLAlchemyError, OSError):
        logger.exception(f"Login error for '{credentials.username}' from {get_real_ip(request)}")
        return error_redirect(request, MSG_LOGIN_ERROR, LOGIN_URL)

    if not user:
        return error_redirect(request, MSG_LOGIN_FAILED, LOGIN_URL)

    # A fresh id on every login; any previous session is dropped
    if context.sid:
        try:
            await store.destroy(context.sid)
        except Exception:
            logger.exception("Failed to drop previous session on login")

    sid = await store.create({"user": create_session_data(user)})

    response = success_redirect(request, MSG_LOGIN_SUCCESS, DASHBOARD_URL)
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        sid,
        max_age=settings.SESSION_MAX_AGE_SECONDS,
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
    )
    return response


# -------------------------------------------------------------------
# LOGOUT
# Destroy is attempted; the redirect happens either way.
# -------------------------------------------------------------------
@router.post("/logout")
async def logout(
    request: Request,
    context: SessionContext = Depends(get_session_context),
    store: SessionStore = Depends(get_session_store),
):
    if context.sid:
        try:
            await store.destroy(context.sid)
        except Exception:
            logger.exception("Session destruction error during logout")

    response = success_redirect(request, MSG_LOGOUT_SUCCESS, LOGIN_URL)
    return clear_session_cookie(response)
