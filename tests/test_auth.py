from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from conftest import DEFAULT_PASSWORD, flashes, session_cookie
from helpdesk.core.constants import (
    MSG_LOGIN_ERROR,
    MSG_LOGIN_FAILED,
    MSG_LOGIN_SUCCESS,
    MSG_LOGOUT_SUCCESS,
    MSG_UNAUTHORIZED,
)
from helpdesk.models.enums import UserRole, UserStatus
from helpdesk.schemas.user import check_password_rules


# ------------------------------------------------------------------
# LOGIN
# ------------------------------------------------------------------
@pytest.mark.asyncio
async def test_login_page_renders(client):
    res = await client.get("/auth/login")
    assert res.status_code == 200
    assert 'name="username"' in res.text


@pytest.mark.asyncio
async def test_login_success_creates_session(client, login, make_user, store):
    user = await make_user("alice", password="P@ssw0rd1")

    res = await login("alice", "P@ssw0rd1")

    assert res.status_code == 303
    assert res.headers["location"] == "/admin/dashboard"
    assert MSG_LOGIN_SUCCESS in flashes(res)

    sid = session_cookie(client)
    assert sid
    record = await store.get(sid)
    assert record == {
        "user": {
            "id": user.id,
            "username": "alice",
            "email": "alice@hospital.org",
            "role": "admin",
        }
    }

    set_cookie = res.headers["set-cookie"].lower()
    assert "httponly" in set_cookie
    assert "samesite=lax" in set_cookie


@pytest.mark.asyncio
async def test_login_trims_username_but_not_password(client, login, make_user):
    await make_user("alice", password="P@ssw0rd1")

    res = await login("  alice  ", "P@ssw0rd1")
    assert res.headers["location"] == "/admin/dashboard"

    res = await login("alice", " P@ssw0rd1 ")
    assert res.headers["location"] == "/auth/login"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "username, password, status, attempts",
    [
        ("ghost", DEFAULT_PASSWORD, UserStatus.Active, 0),     # unknown user
        ("alice", "wrong-password", UserStatus.Active, 0),     # bad password
        ("alice", DEFAULT_PASSWORD, UserStatus.Active, 5),     # locked
        ("alice", DEFAULT_PASSWORD, UserStatus.Inactive, 0),   # inactive
        ("alice", DEFAULT_PASSWORD, UserStatus.Deleted, 0),    # deleted
    ],
)
async def test_login_failures_share_one_message(
    client, login, make_user, username, password, status, attempts
):
    await make_user("alice", status=status, login_attempts=attempts)

    res = await login(username, password)

    assert res.status_code == 303
    assert res.headers["location"] == "/auth/login"
    assert flashes(res) == [MSG_LOGIN_FAILED]
    assert session_cookie(client) is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "data, message",
    [
        ({"password": "x"}, "Username is required"),
        ({"username": "   ", "password": "x"}, "Username is required"),
        ({"username": "alice"}, "Password is required"),
    ],
)
async def test_login_input_errors(client, data, message):
    with patch("helpdesk.api.endpoints.auth.authenticate", new_callable=AsyncMock) as auth:
        res = await client.post("/auth/login", data=data)

    assert res.status_code == 303
    assert res.headers["location"] == "/auth/login"
    assert flashes(res) == [message]
    auth.assert_not_called()


@pytest.mark.asyncio
async def test_login_overlong_username_is_not_reported_as_missing(client):
    with patch("helpdesk.api.endpoints.auth.authenticate", new_callable=AsyncMock) as auth:
        res = await client.post("/auth/login", data={"username": "a" * 51, "password": "x"})

    assert res.headers["location"] == "/auth/login"
    [message] = flashes(res)
    assert message != "Username is required"
    assert message.startswith("username:")
    auth.assert_not_called()


@pytest.mark.asyncio
async def test_login_accepts_long_password(client, login, make_user):
    # any password accepted when it is set must also work at login
    long_password = "Aa1!" + "x" * 130
    check_password_rules(long_password)
    await make_user("alice", password=long_password)

    res = await login("alice", long_password)

    assert res.headers["location"] == "/admin/dashboard"
    assert MSG_LOGIN_SUCCESS in flashes(res)


@pytest.mark.asyncio
async def test_login_database_error_is_generic(client, login):
    error = OperationalError("SELECT", {}, Exception("connection refused"))
    with patch("helpdesk.api.endpoints.auth.authenticate", AsyncMock(side_effect=error)):
        res = await login("alice")

    assert res.headers["location"] == "/auth/login"
    assert flashes(res) == [MSG_LOGIN_ERROR]


@pytest.mark.asyncio
async def test_login_replaces_existing_session(client, login, make_user, store):
    await make_user("alice")

    await login("alice")
    first = session_cookie(client)
    await login("alice")
    second = session_cookie(client)

    assert first != second
    assert await store.get(first) is None
    assert await store.get(second) is not None


@pytest.mark.asyncio
async def test_authenticated_user_skips_login_page(client, login, make_user):
    await make_user("alice")
    await login("alice")

    res = await client.get("/auth/login")
    assert res.status_code == 303
    assert res.headers["location"] == "/admin/dashboard"


# ------------------------------------------------------------------
# LOGOUT
# ------------------------------------------------------------------
@pytest.mark.asyncio
async def test_logout_destroys_session(client, login, make_user, store):
    await make_user("alice")
    await login("alice")
    sid = session_cookie(client)

    res = await client.post("/auth/logout")

    assert res.status_code == 303
    assert res.headers["location"] == "/auth/login"
    assert MSG_LOGOUT_SUCCESS in flashes(res)
    assert await store.get(sid) is None
    assert session_cookie(client) is None


@pytest.mark.asyncio
async def test_logout_redirects_even_if_destroy_fails(client, login, make_user, store):
    await make_user("alice")
    await login("alice")

    with patch.object(store, "destroy", AsyncMock(side_effect=ConnectionError("redis gone"))):
        res = await client.post("/auth/logout")

    assert res.status_code == 303
    assert res.headers["location"] == "/auth/login"
    assert session_cookie(client) is None


@pytest.mark.asyncio
async def test_logout_without_session(client):
    res = await client.post("/auth/logout")
    assert res.status_code == 303
    assert res.headers["location"] == "/auth/login"


# ------------------------------------------------------------------
# SESSION GATE
# ------------------------------------------------------------------
@pytest.mark.asyncio
async def test_dashboard_requires_login(client):
    res = await client.get("/admin/dashboard")

    assert res.status_code == 303
    assert res.headers["location"] == "/auth/login"
    assert flashes(res) == [MSG_UNAUTHORIZED]


@pytest.mark.asyncio
async def test_dashboard_renders_for_logged_in_user(client, login, make_user):
    await make_user("alice", role=UserRole.Department)
    await login("alice")

    res = await client.get("/admin/dashboard")

    assert res.status_code == 200
    assert "alice" in res.text
    assert "Welcome back!" in res.text


@pytest.mark.asyncio
async def test_unknown_session_id_is_rejected(client):
    client.cookies.set("helpdesk_session", "forged-session-id")

    res = await client.get("/admin/dashboard")

    assert res.status_code == 303
    assert res.headers["location"] == "/auth/login"


@pytest.mark.asyncio
@pytest.mark.parametrize("new_status", [UserStatus.Inactive, UserStatus.Deleted])
async def test_deactivated_user_loses_session(client, login, make_user, session, store, new_status):
    user = await make_user("alice", role=UserRole.SuperAdmin)
    await login("alice")
    sid = session_cookie(client)
    assert (await client.get("/admin/dashboard")).status_code == 200

    # Status changes outside the session; the snapshot still says active super admin
    user.status = new_status
    session.add(user)
    await session.commit()

    res = await client.get("/admin/dashboard")

    assert res.status_code == 303
    assert res.headers["location"] == "/auth/login"
    assert await store.get(sid) is None
    assert session_cookie(client) is None


@pytest.mark.asyncio
async def test_removed_user_loses_session(client, login, make_user, session, store):
    user = await make_user("alice")
    await login("alice")
    sid = session_cookie(client)

    await session.delete(user)
    await session.commit()

    res = await client.get("/admin/dashboard")

    assert res.headers["location"] == "/auth/login"
    assert await store.get(sid) is None


@pytest.mark.asyncio
async def test_session_gate_fails_closed(client, login, make_user):
    await make_user("alice")
    await login("alice")

    error = OperationalError("SELECT", {}, Exception("db down"))
    with patch("helpdesk.api.deps.find_by_id", AsyncMock(side_effect=error)):
        res = await client.get("/admin/dashboard")

    assert res.status_code == 303
    assert res.headers["location"] == "/auth/login"


@pytest.mark.asyncio
async def test_session_store_failure_means_no_session(client, login, make_user, store):
    await make_user("alice")
    await login("alice")

    with patch.object(store, "get", AsyncMock(side_effect=ConnectionError("redis gone"))):
        res = await client.get("/admin/dashboard")

    assert res.headers["location"] == "/auth/login"
