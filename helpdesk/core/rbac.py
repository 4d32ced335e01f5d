# helpdesk/core/rbac.py

from fastapi import Depends

from helpdesk.api.deps import require_auth
from helpdesk.core.constants import (
    DASHBOARD_URL,
    LOGIN_URL,
    MSG_FORBIDDEN,
    MSG_SUPER_ADMIN_REQUIRED,
    MSG_UNAUTHORIZED,
)
from helpdesk.core.responses import AuthRedirect
from helpdesk.core.sessions import SessionContext
from helpdesk.models.enums import UserRole
from helpdesk.schemas.auth import SessionSnapshot

# Explicit membership per gate. super_admin is in every admin set;
# plain admin is never in the super admin set.
ADMIN_ROLES = frozenset({UserRole.Admin, UserRole.SuperAdmin})
SUPER_ADMIN_ROLES = frozenset({UserRole.SuperAdmin})


def has_role(user: SessionSnapshot | None, allowed_roles: frozenset) -> bool:
    return user is not None and user.role in allowed_roles


def AllowRoles(*allowed_roles: UserRole, message: str = MSG_FORBIDDEN):
    """
    Role gate over the session snapshot. Runs on top of require_auth, so the
    account has already been re-validated against the credential store.

    - No session      -> login page
    - Wrong role      -> dashboard (the user is authenticated, just not allowed)
    """
    allowed = frozenset(UserRole(role) for role in allowed_roles)

    async def role_checker(
        context: SessionContext = Depends(require_auth),
    ) -> SessionSnapshot:
        if context.user is None:
            raise AuthRedirect(LOGIN_URL, MSG_UNAUTHORIZED)

        if not has_role(context.user, allowed):
            raise AuthRedirect(DASHBOARD_URL, message)

        return context.user

    return role_checker


# ------------------------------------------------------------
# Exposed dependencies for routers
# ------------------------------------------------------------
require_admin = AllowRoles(*ADMIN_ROLES)
require_super_admin = AllowRoles(*SUPER_ADMIN_ROLES, message=MSG_SUPER_ADMIN_REQUIRED)
