from loguru import logger
from sqlmodel import select

from helpdesk.core.config import settings
from helpdesk.core.constants import ACTION_USER_CREATED, TARGET_USER
from helpdesk.core.database import AsyncSessionLocal
from helpdesk.core.security import hash_password
from helpdesk.models.enums import UserRole
from helpdesk.models.user import User
from helpdesk.services.audit_service import log_activity


# ----------------------------------------------------------------
# SUPER ADMIN BOOTSTRAP
# ----------------------------------------------------------------
async def seed_super_admin():
    """Create the bootstrap super admin from settings if it does not exist yet."""
    if not (
        settings.SUPER_ADMIN_USERNAME
        and settings.SUPER_ADMIN_EMAIL
        and settings.SUPER_ADMIN_PASSWORD
    ):
        logger.warning("Missing Super Admin credentials in settings. Skipping seed.")
        return None

    async with AsyncSessionLocal() as session:
        result = await session.execute(
            select(User).where(User.username == settings.SUPER_ADMIN_USERNAME)
        )
        if result.scalar_one_or_none():
            logger.info("Super Admin already exists. Skipping.")
            return None

        logger.info(f"Seeding Super Admin: {settings.SUPER_ADMIN_USERNAME}")
        user = User(
            username=settings.SUPER_ADMIN_USERNAME,
            email=settings.SUPER_ADMIN_EMAIL,
            password_hash=hash_password(settings.SUPER_ADMIN_PASSWORD),
            role=UserRole.SuperAdmin,
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)

    # System action: no actor
    await log_activity(
        None,
        ACTION_USER_CREATED,
        TARGET_USER,
        user.id,
        details={"username": user.username, "role": user.role.value, "seeded": True},
    )
    logger.success("Super Admin created successfully.")
    return user
