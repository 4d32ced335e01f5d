# helpdesk/api/endpoints/users.py

from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.api.deps import get_db_session
from helpdesk.core.rate_limiter import get_real_ip
from helpdesk.core.rbac import require_super_admin
from helpdesk.core.responses import error_redirect, success_redirect, validation_message
from helpdesk.core.templating import render
from helpdesk.schemas.auth import SessionSnapshot
from helpdesk.schemas.user import UserCreate, UserStatusUpdate
from helpdesk.services import department_service, user_service

USERS_URL = "/admin/users"

router = APIRouter(
    prefix="/admin/users",
    tags=["Users"],
)


# -------------------------------------------------------------------
# List users (Super admin only)
# -------------------------------------------------------------------
@router.get("", response_class=HTMLResponse)
async def list_users(
    request: Request,
    session: AsyncSession = Depends(get_db_session),
    _: SessionSnapshot = Depends(require_super_admin),
):
    users = await user_service.list_users(session)
    departments = await department_service.list_departments(session)
    return render(
        request,
        "admin/users.html",
        {"title": "Users", "users": users, "departments": departments},
    )


# -------------------------------------------------------------------
# Create a user (Super admin only)
# -------------------------------------------------------------------
@router.post("")
async def create_user(
    request: Request,
    username: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    role: str = Form(""),
    department_id: Optional[int] = Form(None),
    session: AsyncSession = Depends(get_db_session),
    current_user: SessionSnapshot = Depends(require_super_admin),
):
    try:
        data = UserCreate(
            username=username,
            email=email,
            password=password,
            role=role,
            department_id=department_id,
        )
        user = await user_service.create_user(session, current_user.id, data, get_real_ip(request))
    except ValidationError as e:
        return error_redirect(request, validation_message(e), USERS_URL)
    except ValueError as e:
        return error_redirect(request, str(e), USERS_URL)

    return success_redirect(request, f"User '{user.username}' created", USERS_URL)


# -------------------------------------------------------------------
# Change status (activate, deactivate, soft delete)
# -------------------------------------------------------------------
@router.post("/{user_id}/status")
async def change_status(
    request: Request,
    user_id: int,
    status: str = Form(""),
    session: AsyncSession = Depends(get_db_session),
    current_user: SessionSnapshot = Depends(require_super_admin),
):
    try:
        data = UserStatusUpdate(status=status)
        user = await user_service.set_status(
            session, current_user.id, user_id, data.status, get_real_ip(request)
        )
    except ValidationError as e:
        return error_redirect(request, validation_message(e), USERS_URL)
    except ValueError as e:
        return error_redirect(request, str(e), USERS_URL)

    return success_redirect(
        request, f"User '{user.username}' is now {user.status.value}", USERS_URL
    )
