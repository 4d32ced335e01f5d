# helpdesk/services/audit_service.py

from typing import Any, Dict, Optional

from loguru import logger
from sqlmodel import select
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.core.constants import AUDIT_DEFAULT_LIMIT
from helpdesk.core.database import AsyncSessionLocal
from helpdesk.models.audit import AuditLog


# ============================================================================
# RECORD (append-only write)
# ============================================================================
async def record(
    session: AsyncSession,
    actor_id: Optional[int],
    action: str,
    target_type: str,
    target_id: Optional[int],
    details: Optional[Dict[str, Any]] = None,
    ip_address: Optional[str] = None,
    commit: bool = True,
) -> AuditLog:
    """
    Append an audit entry using the caller's session.

    With commit=False the entry joins the caller's transaction, so the audit row
    and the mutation it documents are committed (or rolled back) together.
    The details payload is stored in a JSON column; anything the JSON encoder
    rejects fails at flush. Errors propagate to the caller.
    """
    entry = AuditLog(
        actor_id=actor_id,
        action=action,
        target_type=target_type,
        target_id=target_id,
        details=details if details is not None else {},
        ip_address=ip_address,
    )
    session.add(entry)

    if commit:
        await session.commit()
        await session.refresh(entry)
    else:
        await session.flush()

    return entry


# ============================================================================
# BEST-EFFORT RECORD
# ============================================================================
async def log_activity(
    actor_id: Optional[int],
    action: str,
    target_type: str,
    target_id: Optional[int],
    details: Optional[Dict[str, Any]] = None,
    ip_address: Optional[str] = None,
) -> Optional[AuditLog]:
    """
    Records an audit entry in its own DB session.
    A failure is logged as a warning and never reaches the caller.
    """
    async with AsyncSessionLocal() as session:
        try:
            return await record(
                session,
                actor_id=actor_id,
                action=action,
                target_type=target_type,
                target_id=target_id,
                details=details,
                ip_address=ip_address,
            )
        except Exception as e:
            logger.warning(f"Audit log write failed for {action} on {target_type}:{target_id}: {e}")
            await session.rollback()
            return None


# ============================================================================
# READ PATHS (most recent first, always bounded)
# ============================================================================
async def find_by_target(
    session: AsyncSession,
    target_type: str,
    target_id: int,
    limit: int = AUDIT_DEFAULT_LIMIT,
) -> list[AuditLog]:
    result = await session.execute(
        select(AuditLog)
        .where((AuditLog.target_type == target_type) & (AuditLog.target_id == target_id))
        .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def find_by_actor(
    session: AsyncSession,
    actor_id: int,
    limit: int = AUDIT_DEFAULT_LIMIT,
) -> list[AuditLog]:
    result = await session.execute(
        select(AuditLog)
        .where(AuditLog.actor_id == actor_id)
        .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def find_recent(
    session: AsyncSession,
    action: Optional[str] = None,
    limit: int = AUDIT_DEFAULT_LIMIT,
) -> list[AuditLog]:
    query = select(AuditLog).order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).limit(limit)
    if action:
        query = query.where(AuditLog.action == action)

    result = await session.execute(query)
    return list(result.scalars().all())
