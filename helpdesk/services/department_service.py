# helpdesk/services/department_service.py

from typing import Optional

from sqlmodel import select
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.core.constants import ACTION_DEPARTMENT_CREATED, TARGET_DEPARTMENT
from helpdesk.models.department import Department
from helpdesk.models.floor import Floor
from helpdesk.schemas.department import DepartmentCreate
from helpdesk.services import audit_service


async def list_departments(session: AsyncSession, include_inactive: bool = False) -> list[Department]:
    query = select(Department).order_by(Department.name)
    if not include_inactive:
        query = query.where(Department.active == True)  # noqa: E712

    result = await session.execute(query)
    return list(result.scalars().all())


async def create_department(
    session: AsyncSession,
    actor_id: int,
    data: DepartmentCreate,
    ip_address: Optional[str] = None,
) -> Department:
    if data.floor_id is not None:
        floor = await session.get(Floor, data.floor_id)
        if not floor or not floor.active:
            raise ValueError("Floor not found")

    existing = await session.execute(
        select(Department).where(func.lower(Department.name) == data.name.lower())
    )
    if existing.scalars().first():
        raise ValueError("Department name already exists")

    department = Department(name=data.name, floor_id=data.floor_id)
    session.add(department)
    await session.flush()

    await audit_service.record(
        session,
        actor_id=actor_id,
        action=ACTION_DEPARTMENT_CREATED,
        target_type=TARGET_DEPARTMENT,
        target_id=department.id,
        details={"name": department.name, "floor_id": department.floor_id},
        ip_address=ip_address,
        commit=False,
    )
    await session.commit()
    await session.refresh(department)
    return department
