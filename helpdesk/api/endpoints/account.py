# helpdesk/api/endpoints/account.py

from fastapi import APIRouter, Depends, Form, Request
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.api.deps import get_db_session, require_auth
from helpdesk.core.constants import DASHBOARD_URL
from helpdesk.core.rate_limiter import get_real_ip
from helpdesk.core.responses import error_redirect, success_redirect, validation_message
from helpdesk.core.sessions import SessionContext
from helpdesk.schemas.user import PasswordChange
from helpdesk.services.user_service import change_password

router = APIRouter(prefix="/account", tags=["Account"])


@router.post("/password")
async def change_own_password(
    request: Request,
    current_password: str = Form(""),
    new_password: str = Form(""),
    confirm_password: str = Form(""),
    session: AsyncSession = Depends(get_db_session),
    context: SessionContext = Depends(require_auth),
):
    try:
        data = PasswordChange(
            current_password=current_password,
            new_password=new_password,
            confirm_password=confirm_password,
        )
        await change_password(
            session,
            context.user.id,
            data.current_password,
            data.new_password,
            get_real_ip(request),
        )
    except ValidationError as e:
        return error_redirect(request, validation_message(e), DASHBOARD_URL)
    except ValueError as e:
        return error_redirect(request, str(e), DASHBOARD_URL)

    return success_redirect(request, "Password changed successfully", DASHBOARD_URL)
