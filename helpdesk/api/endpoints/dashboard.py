# helpdesk/api/endpoints/dashboard.py

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from helpdesk.api.deps import require_auth
from helpdesk.core.rbac import ADMIN_ROLES, SUPER_ADMIN_ROLES, has_role
from helpdesk.core.sessions import SessionContext
from helpdesk.core.templating import render

router = APIRouter(
    prefix="/admin",
    tags=["Dashboard"],
)


@router.get("/dashboard", response_class=HTMLResponse)
async def dashboard(
    request: Request,
    context: SessionContext = Depends(require_auth),
):
    return render(
        request,
        "admin/dashboard.html",
        {
            "title": "Dashboard",
            "is_admin": has_role(context.user, ADMIN_ROLES),
            "is_super_admin": has_role(context.user, SUPER_ADMIN_ROLES),
        },
    )
