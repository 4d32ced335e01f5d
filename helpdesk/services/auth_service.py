# helpdesk/services/auth_service.py

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from helpdesk.core.config import settings
from helpdesk.core.security import DUMMY_HASH, verify_password
from helpdesk.models.enums import UserStatus
from helpdesk.models.user import User
from helpdesk.schemas.auth import SessionSnapshot
from helpdesk.services.user_service import (
    find_by_username_with_password,
    increment_login_attempts,
    update_last_login,
)


# ============================================================================
# AUTHENTICATE
# ============================================================================
async def authenticate(session: AsyncSession, username: str, password: str) -> User | None:
    """
    Check credentials against the credential store.

    Every failure returns None: unknown username, wrong password, locked
    account and inactive/deleted account are indistinguishable to the caller.
    A password comparison runs on every path so response timing does not
    reveal whether the username exists. Database errors propagate.
    """
    user = await find_by_username_with_password(session, username)

    if not user:
        await run_in_threadpool(verify_password, password, DUMMY_HASH)
        logger.info(f"Login failed: unknown username '{username}'")
        return None

    password_ok = await run_in_threadpool(verify_password, password, user.password_hash)
    if not password_ok:
        await increment_login_attempts(session, username)
        logger.warning(f"Login failed: wrong password for user {user.id}")
        return None

    # Locked until a successful login or an administrative reset
    if user.login_attempts >= settings.MAX_LOGIN_ATTEMPTS:
        logger.warning(f"Login refused: user {user.id} is locked ({user.login_attempts} failed attempts)")
        return None

    if user.status != UserStatus.Active:
        logger.warning(f"Login refused: user {user.id} has status '{user.status.value}'")
        return None

    await update_last_login(session, user.id)
    logger.info(f"User {user.id} logged in")
    return user


# ============================================================================
# SESSION DATA
# ============================================================================
def create_session_data(user: User) -> dict:
    """Project the user onto the session payload: id, username, email and role only."""
    snapshot = SessionSnapshot(
        id=user.id,
        username=user.username,
        email=user.email,
        role=user.role,
    )
    return snapshot.model_dump(mode="json")
