# helpdesk/api/endpoints/logs.py

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.api.deps import get_db_session
from helpdesk.core.constants import AUDIT_DEFAULT_LIMIT
from helpdesk.core.rbac import require_admin
from helpdesk.schemas.audit import AuditLogRead
from helpdesk.schemas.auth import SessionSnapshot
from helpdesk.services import audit_service

router = APIRouter(
    prefix="/admin",
    tags=["Audit Logs"],
)


# -------------------------------------------------------------------
# VIEW AUDIT TRAIL
# target_type + target_id -> history of one entity
# actor_id                -> everything one user did
# neither                 -> most recent entries
# -------------------------------------------------------------------
@router.get("/audit-logs", response_model=List[AuditLogRead])
async def get_audit_logs(
    target_type: Optional[str] = Query(None),
    target_id: Optional[int] = Query(None),
    actor_id: Optional[int] = Query(None),
    action: Optional[str] = Query(None),
    limit: int = Query(AUDIT_DEFAULT_LIMIT, ge=1, le=500),
    session: AsyncSession = Depends(get_db_session),
    _: SessionSnapshot = Depends(require_admin),
):
    if target_type and target_id is not None:
        return await audit_service.find_by_target(session, target_type, target_id, limit)

    if actor_id is not None:
        return await audit_service.find_by_actor(session, actor_id, limit)

    return await audit_service.find_recent(session, action=action, limit=limit)
