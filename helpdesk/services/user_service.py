# helpdesk/services/user_service.py

from datetime import datetime, timezone
from typing import Optional

from loguru import logger
from sqlmodel import select
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from helpdesk.core.constants import (
    ACTION_PASSWORD_CHANGED,
    ACTION_USER_CREATED,
    ACTION_USER_STATUS_CHANGED,
    TARGET_USER,
)
from helpdesk.core.security import hash_password, verify_password
from helpdesk.models.department import Department
from helpdesk.models.enums import UserRole, UserStatus
from helpdesk.models.user import User
from helpdesk.schemas.user import UserCreate
from helpdesk.services import audit_service


# ============================================================================
# CREDENTIAL STORE LOOKUPS
# ============================================================================
async def find_by_username_with_password(session: AsyncSession, username: str) -> User | None:
    result = await session.execute(
        select(User)
        .where(User.username == username)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def find_by_id(session: AsyncSession, user_id: int) -> User | None:
    result = await session.execute(
        select(User)
        .where(User.id == user_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def find_by_email(session: AsyncSession, email: str) -> User | None:
    result = await session.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


# ============================================================================
# LOGIN BOOKKEEPING
# ============================================================================
async def increment_login_attempts(session: AsyncSession, username: str) -> None:
    # single-row increment; concurrent failures may race, last writer wins
    await session.execute(
        update(User)
        .where(User.username == username)
        .values(login_attempts=User.login_attempts + 1)
    )
    await session.commit()


async def update_last_login(session: AsyncSession, user_id: int) -> None:
    await session.execute(
        update(User)
        .where(User.id == user_id)
        .values(login_attempts=0, last_login_at=datetime.now(timezone.utc))
    )
    await session.commit()


# ============================================================================
# LIST USERS
# ============================================================================
async def list_users(session: AsyncSession, include_deleted: bool = False) -> list[User]:
    query = select(User).order_by(User.username)
    if not include_deleted:
        query = query.where(User.status != UserStatus.Deleted)

    result = await session.execute(query)
    return list(result.scalars().all())


# ============================================================================
# CREATE USER
# ============================================================================
async def create_user(
    session: AsyncSession,
    actor_id: Optional[int],
    data: UserCreate,
    ip_address: Optional[str] = None,
) -> User:

    # ---- VALIDATION RULES ----
    # 1) Department accounts MUST have a department
    if data.role == UserRole.Department and data.department_id is None:
        raise ValueError("Department accounts must be assigned to a department")

    # 2) Admin accounts cannot have a department
    if data.role != UserRole.Department and data.department_id is not None:
        raise ValueError(f"{data.role.value} accounts cannot have a department")

    if data.department_id is not None:
        department = await session.get(Department, data.department_id)
        if not department or not department.active:
            raise ValueError("Department not found")

    if await find_by_username_with_password(session, data.username):
        raise ValueError("Username already exists")

    if await find_by_email(session, data.email):
        raise ValueError("Email already registered")

    user = User(
        username=data.username,
        email=data.email,
        password_hash=await run_in_threadpool(hash_password, data.password),
        role=data.role,
        department_id=data.department_id,
    )
    session.add(user)

    try:
        await session.flush()
        await audit_service.record(
            session,
            actor_id=actor_id,
            action=ACTION_USER_CREATED,
            target_type=TARGET_USER,
            target_id=user.id,
            details={"username": user.username, "email": user.email, "role": user.role.value},
            ip_address=ip_address,
            commit=False,
        )
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise ValueError("User with this username or email already exists")

    await session.refresh(user)
    logger.info(f"User '{user.username}' created by actor {actor_id}")
    return user


# ============================================================================
# CHANGE STATUS (activate / deactivate / soft delete)
# ============================================================================
async def set_status(
    session: AsyncSession,
    actor_id: int,
    user_id: int,
    new_status: UserStatus,
    ip_address: Optional[str] = None,
) -> User:
    if actor_id == user_id:
        raise ValueError("You cannot change the status of your own account")

    user = await find_by_id(session, user_id)
    if not user:
        raise ValueError("User not found")

    old_status = user.status
    user.status = new_status

    # Reactivation is the administrative unlock
    if new_status == UserStatus.Active:
        user.login_attempts = 0

    session.add(user)
    await audit_service.record(
        session,
        actor_id=actor_id,
        action=ACTION_USER_STATUS_CHANGED,
        target_type=TARGET_USER,
        target_id=user.id,
        details={
            "username": user.username,
            "old_status": old_status.value,
            "new_status": new_status.value,
        },
        ip_address=ip_address,
        commit=False,
    )
    await session.commit()
    await session.refresh(user)

    logger.info(f"User {user.id} status {old_status.value} -> {new_status.value} by actor {actor_id}")
    return user


# ============================================================================
# CHANGE OWN PASSWORD
# ============================================================================
async def change_password(
    session: AsyncSession,
    user_id: int,
    current_password: str,
    new_password: str,
    ip_address: Optional[str] = None,
) -> None:
    user = await find_by_id(session, user_id)
    if not user:
        raise ValueError("User not found")

    if not await run_in_threadpool(verify_password, current_password, user.password_hash):
        raise ValueError("Current password is incorrect")

    user.password_hash = await run_in_threadpool(hash_password, new_password)
    session.add(user)

    await audit_service.record(
        session,
        actor_id=user.id,
        action=ACTION_PASSWORD_CHANGED,
        target_type=TARGET_USER,
        target_id=user.id,
        details={"username": user.username},
        ip_address=ip_address,
        commit=False,
    )
    await session.commit()
