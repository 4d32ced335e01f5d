# helpdesk/services/floor_service.py

from typing import Optional

from sqlmodel import select
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.core.constants import (
    ACTION_FLOOR_CREATED,
    ACTION_FLOOR_DEACTIVATED,
    ACTION_FLOOR_REACTIVATED,
    ACTION_FLOOR_UPDATED,
    TARGET_FLOOR,
)
from helpdesk.models.department import Department
from helpdesk.models.floor import Floor
from helpdesk.schemas.floor import FloorCreate, FloorUpdate
from helpdesk.services import audit_service


def _snapshot(floor: Floor) -> dict:
    return {"name": floor.name, "sort_order": floor.sort_order, "active": floor.active}


# ============================================================================
# LOOKUPS
# ============================================================================
async def get_active_floors(session: AsyncSession) -> list[Floor]:
    """Active, non-system floors for dropdowns."""
    result = await session.execute(
        select(Floor)
        .where((Floor.active == True) & (Floor.is_system == False))  # noqa: E712
        .order_by(Floor.sort_order, Floor.name)
    )
    return list(result.scalars().all())


async def get_all_floors(session: AsyncSession) -> list[Floor]:
    """Every floor, including inactive ones, for the management page."""
    result = await session.execute(
        select(Floor).order_by(
            Floor.is_system.desc(), Floor.active.desc(), Floor.sort_order, Floor.name
        )
    )
    return list(result.scalars().all())


async def get_floor_by_id(session: AsyncSession, floor_id: int) -> Floor:
    floor = await session.get(Floor, floor_id)
    if not floor:
        raise ValueError("Floor not found")
    return floor


async def find_by_name(session: AsyncSession, name: str) -> Floor | None:
    result = await session.execute(
        select(Floor).where(func.lower(Floor.name) == name.strip().lower())
    )
    return result.scalars().first()


async def count_departments(session: AsyncSession, floor_id: int) -> int:
    result = await session.execute(
        select(func.count()).select_from(Department).where(Department.floor_id == floor_id)
    )
    return result.scalar_one()


# ============================================================================
# CREATE
# ============================================================================
async def create_floor(
    session: AsyncSession,
    actor_id: int,
    data: FloorCreate,
    ip_address: Optional[str] = None,
) -> Floor:
    if await find_by_name(session, data.name):
        raise ValueError("Floor name already exists")

    floor = Floor(name=data.name, sort_order=data.sort_order)
    session.add(floor)
    await session.flush()

    await audit_service.record(
        session,
        actor_id=actor_id,
        action=ACTION_FLOOR_CREATED,
        target_type=TARGET_FLOOR,
        target_id=floor.id,
        details={"name": floor.name, "sort_order": floor.sort_order},
        ip_address=ip_address,
        commit=False,
    )
    await session.commit()
    await session.refresh(floor)
    return floor


# ============================================================================
# UPDATE
# ============================================================================
async def update_floor(
    session: AsyncSession,
    actor_id: int,
    floor_id: int,
    data: FloorUpdate,
    ip_address: Optional[str] = None,
) -> Floor:
    floor = await get_floor_by_id(session, floor_id)

    if floor.is_system:
        raise ValueError("Cannot edit system floor")

    if data.name and data.name != floor.name:
        existing = await find_by_name(session, data.name)
        if existing and existing.id != floor.id:
            raise ValueError("Floor name already exists")

    old = _snapshot(floor)

    if data.name is not None:
        floor.name = data.name
    if data.sort_order is not None:
        floor.sort_order = data.sort_order

    session.add(floor)
    await audit_service.record(
        session,
        actor_id=actor_id,
        action=ACTION_FLOOR_UPDATED,
        target_type=TARGET_FLOOR,
        target_id=floor.id,
        details={"old": old, "new": _snapshot(floor)},
        ip_address=ip_address,
        commit=False,
    )
    await session.commit()
    await session.refresh(floor)
    return floor


# ============================================================================
# DEACTIVATE / REACTIVATE (soft delete)
# ============================================================================
async def deactivate_floor(
    session: AsyncSession,
    actor_id: int,
    floor_id: int,
    ip_address: Optional[str] = None,
) -> Floor:
    floor = await get_floor_by_id(session, floor_id)

    if floor.is_system:
        raise ValueError("Cannot deactivate system floor")

    department_count = await count_departments(session, floor.id)
    if department_count > 0:
        raise ValueError(
            f"Cannot deactivate floor: {department_count} department(s) still assigned. "
            "Please reassign departments first."
        )

    floor.active = False
    session.add(floor)
    await audit_service.record(
        session,
        actor_id=actor_id,
        action=ACTION_FLOOR_DEACTIVATED,
        target_type=TARGET_FLOOR,
        target_id=floor.id,
        details={"name": floor.name},
        ip_address=ip_address,
        commit=False,
    )
    await session.commit()
    await session.refresh(floor)
    return floor


async def reactivate_floor(
    session: AsyncSession,
    actor_id: int,
    floor_id: int,
    ip_address: Optional[str] = None,
) -> Floor:
    floor = await get_floor_by_id(session, floor_id)

    if floor.is_system:
        raise ValueError("Cannot reactivate system floor")

    floor.active = True
    session.add(floor)
    await audit_service.record(
        session,
        actor_id=actor_id,
        action=ACTION_FLOOR_REACTIVATED,
        target_type=TARGET_FLOOR,
        target_id=floor.id,
        details={"name": floor.name},
        ip_address=ip_address,
        commit=False,
    )
    await session.commit()
    await session.refresh(floor)
    return floor
