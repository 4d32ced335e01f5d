import pytest

from helpdesk.core.constants import MSG_FORBIDDEN, MSG_SUPER_ADMIN_REQUIRED, MSG_UNAUTHORIZED
from helpdesk.core.rbac import AllowRoles, require_admin, require_super_admin
from helpdesk.core.responses import AuthRedirect
from helpdesk.core.sessions import SessionContext
from helpdesk.models.enums import UserRole
from helpdesk.schemas.auth import SessionSnapshot


def context_for(role: UserRole | None) -> SessionContext:
    if role is None:
        return SessionContext(sid=None, user=None)
    user = SessionSnapshot(id=1, username="alice", email="alice@hospital.org", role=role)
    return SessionContext(sid="sid", user=user)


@pytest.mark.asyncio
@pytest.mark.parametrize("role", [UserRole.Admin, UserRole.SuperAdmin])
async def test_require_admin_allows_admin_roles(role):
    user = await require_admin(context_for(role))
    assert user.role == role


@pytest.mark.asyncio
async def test_require_admin_rejects_department_accounts():
    with pytest.raises(AuthRedirect) as exc:
        await require_admin(context_for(UserRole.Department))

    assert exc.value.url == "/admin/dashboard"
    assert exc.value.message == MSG_FORBIDDEN


@pytest.mark.asyncio
async def test_require_super_admin_allows_only_super_admin():
    user = await require_super_admin(context_for(UserRole.SuperAdmin))
    assert user.role == UserRole.SuperAdmin

    for role in (UserRole.Admin, UserRole.Department):
        with pytest.raises(AuthRedirect) as exc:
            await require_super_admin(context_for(role))
        assert exc.value.url == "/admin/dashboard"
        assert exc.value.message == MSG_SUPER_ADMIN_REQUIRED


@pytest.mark.asyncio
@pytest.mark.parametrize("gate", [require_admin, require_super_admin])
async def test_no_session_goes_to_login(gate):
    with pytest.raises(AuthRedirect) as exc:
        await gate(context_for(None))

    assert exc.value.url == "/auth/login"
    assert exc.value.message == MSG_UNAUTHORIZED


@pytest.mark.asyncio
async def test_custom_gate_accepts_role_values():
    gate = AllowRoles("department")
    user = await gate(context_for(UserRole.Department))
    assert user.role == UserRole.Department


# ------------------------------------------------------------------
# Through the HTTP layer
# ------------------------------------------------------------------
@pytest.mark.asyncio
async def test_admin_cannot_open_super_admin_pages(client, login, make_user):
    await make_user("alice", role=UserRole.Admin)
    await login("alice")

    res = await client.get("/admin/users")

    assert res.status_code == 303
    assert res.headers["location"] == "/admin/dashboard"


@pytest.mark.asyncio
async def test_department_account_cannot_open_admin_pages(client, login, make_user):
    await make_user("dept", role=UserRole.Department)
    await login("dept")

    res = await client.get("/admin/departments")

    assert res.status_code == 303
    assert res.headers["location"] == "/admin/dashboard"

