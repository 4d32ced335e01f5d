# helpdesk/api/endpoints/departments.py

from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.api.deps import get_db_session
from helpdesk.core.rate_limiter import get_real_ip
from helpdesk.core.rbac import require_admin, require_super_admin
from helpdesk.core.responses import error_redirect, success_redirect, validation_message
from helpdesk.core.templating import render
from helpdesk.schemas.auth import SessionSnapshot
from helpdesk.schemas.department import DepartmentCreate
from helpdesk.services import department_service, floor_service

DEPARTMENTS_URL = "/admin/departments"

router = APIRouter(
    prefix="/admin/departments",
    tags=["Departments"],
)


@router.get("", response_class=HTMLResponse)
async def list_departments(
    request: Request,
    session: AsyncSession = Depends(get_db_session),
    _: SessionSnapshot = Depends(require_admin),
):
    departments = await department_service.list_departments(session)
    floors = await floor_service.get_active_floors(session)
    return render(
        request,
        "admin/departments.html",
        {"title": "Departments", "departments": departments, "floors": floors},
    )


@router.post("")
async def create_department(
    request: Request,
    name: str = Form(""),
    floor_id: Optional[int] = Form(None),
    session: AsyncSession = Depends(get_db_session),
    current_user: SessionSnapshot = Depends(require_super_admin),
):
    try:
        data = DepartmentCreate(name=name, floor_id=floor_id)
        department = await department_service.create_department(
            session, current_user.id, data, get_real_ip(request)
        )
    except ValidationError as e:
        return error_redirect(request, validation_message(e), DEPARTMENTS_URL)
    except ValueError as e:
        return error_redirect(request, str(e), DEPARTMENTS_URL)

    return success_redirect(request, f"Department '{department.name}' created", DEPARTMENTS_URL)
