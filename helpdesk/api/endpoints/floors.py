# helpdesk/api/endpoints/floors.py

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
from helpdesk.schemas.floor import FloorCreate, FloorUpdate
from helpdesk.services import floor_service

FLOORS_URL = "/admin/floors"

router = APIRouter(
    prefix="/admin/floors",
    tags=["Floors"],
)


# -------------------------------------------------------------------
# LIST (management page)
# -------------------------------------------------------------------
@router.get("", response_class=HTMLResponse)
async def list_floors(
    request: Request,
    session: AsyncSession = Depends(get_db_session),
    _: SessionSnapshot = Depends(require_super_admin),
):
    floors = await floor_service.get_all_floors(session)
    return render(request, "admin/floors.html", {"title": "Floors", "floors": floors})


# -------------------------------------------------------------------
# CREATE
# -------------------------------------------------------------------
@router.post("")
async def create_floor(
    request: Request,
    name: str = Form(""),
    sort_order: int = Form(0),
    session: AsyncSession = Depends(get_db_session),
    current_user: SessionSnapshot = Depends(require_super_admin),
):
    try:
        data = FloorCreate(name=name, sort_order=sort_order)
        floor = await floor_service.create_floor(session, current_user.id, data, get_real_ip(request))
    except ValidationError as e:
        return error_redirect(request, validation_message(e), FLOORS_URL)
    except ValueError as e:
        return error_redirect(request, str(e), FLOORS_URL)

    return success_redirect(request, f"Floor '{floor.name}' created", FLOORS_URL)


# -------------------------------------------------------------------
# UPDATE
# -------------------------------------------------------------------
@router.post("/{floor_id}/update")
async def update_floor(
    request: Request,
    floor_id: int,
    name: Optional[str] = Form(None),
    sort_order: Optional[int] = Form(None),
    session: AsyncSession = Depends(get_db_session),
    current_user: SessionSnapshot = Depends(require_super_admin),
):
    try:
        data = FloorUpdate(name=name, sort_order=sort_order)
        floor = await floor_service.update_floor(
            session, current_user.id, floor_id, data, get_real_ip(request)
        )
    except ValidationError as e:
        return error_redirect(request, validation_message(e), FLOORS_URL)
    except ValueError as e:
        return error_redirect(request, str(e), FLOORS_URL)

    return success_redirect(request, f"Floor '{floor.name}' updated", FLOORS_URL)


# -------------------------------------------------------------------
# DEACTIVATE / REACTIVATE
# -------------------------------------------------------------------
@router.post("/{floor_id}/deactivate")
async def deactivate_floor(
    request: Request,
    floor_id: int,
    session: AsyncSession = Depends(get_db_session),
    current_user: SessionSnapshot = Depends(require_super_admin),
):
    try:
        floor = await floor_service.deactivate_floor(
            session, current_user.id, floor_id, get_real_ip(request)
        )
    except ValueError as e:
        return error_redirect(request, str(e), FLOORS_URL)

    return success_redirect(request, f"Floor '{floor.name}' deactivated", FLOORS_URL)


@router.post("/{floor_id}/reactivate")
async def reactivate_floor(
    request: Request,
    floor_id: int,
    session: AsyncSession = Depends(get_db_session),
    current_user: SessionSnapshot = Depends(require_super_admin),
):
    try:
        floor = await floor_service.reactivate_floor(
            session, current_user.id, floor_id, get_real_ip(request)
        )
    except ValueError as e:
        return error_redirect(request, str(e), FLOORS_URL)

    return success_redirect(request, f"Floor '{floor.name}' reactivated", FLOORS_URL)
