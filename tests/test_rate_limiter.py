from unittest.mock import patch

import pytest

from conftest import flashes
from helpdesk.core.constants import MSG_LOGIN_RATE_LIMITED
from helpdesk.core.rate_limiter import LOGIN_WINDOW_SECONDS, reset_seconds
from helpdesk.services.auth_service import authenticate

ATTACKER = {"X-Forwarded-For": "203.0.113.5"}
NEIGHBOUR = {"X-Forwarded-For": "198.51.100.7"}


@pytest.mark.asyncio
async def test_eleventh_attempt_is_throttled(client, login, make_user):
    await make_user("alice")

    with patch("helpdesk.api.endpoints.auth.authenticate", wraps=authenticate) as spy:
        # successes and failures both count
        for attempt in range(10):
            password = "Str0ng!Pass" if attempt % 3 == 0 else "wrong"
            res = await login("alice", password, headers=ATTACKER)
            assert res.status_code == 303
            assert MSG_LOGIN_RATE_LIMITED not in flashes(res)

        res = await login("alice", headers=ATTACKER)

    assert res.status_code == 303
    assert res.headers["location"] == "/auth/login"
    assert MSG_LOGIN_RATE_LIMITED in flashes(res)
    assert spy.call_count == 10


@pytest.mark.asyncio
async def test_limit_is_per_client_ip(client, login, make_user):
    await make_user("alice")

    for _ in range(11):
        await login("ghost", "wrong", headers=ATTACKER)

    with patch("helpdesk.api.endpoints.auth.authenticate", wraps=authenticate) as spy:
        res = await login("alice", headers=NEIGHBOUR)

    assert res.headers["location"] == "/admin/dashboard"
    assert spy.call_count == 1


@pytest.mark.asyncio
async def test_standard_rate_limit_headers(client, login):
    res = await login("ghost", headers=ATTACKER)

    assert res.headers["RateLimit-Limit"] == "10"
    assert res.headers["RateLimit-Remaining"] == "9"
    assert 0 <= int(res.headers["RateLimit-Reset"]) <= 15 * 60
    assert "X-RateLimit-Limit" not in res.headers


@pytest.mark.asyncio
async def test_throttled_response_keeps_headers(client, login):
    for _ in range(10):
        await login("ghost", headers=ATTACKER)

    res = await login("ghost", headers=ATTACKER)

    assert res.headers["RateLimit-Remaining"] == "0"
    assert "Retry-After" in res.headers


@pytest.mark.asyncio
async def test_other_routes_are_not_limited(client):
    for _ in range(15):
        res = await client.get("/auth/login", headers=ATTACKER)
    assert res.status_code == 200


@pytest.mark.parametrize(
    "reset_epoch, now, expected",
    [
        (1900.4, 1000.0, 900),  # fractional epoch on a fresh window
        (1899.2, 1000.0, 900),
        (1000.5, 1000.0, 1),
        (990.0, 1000.0, 0),
    ],
)
def test_reset_seconds_rounds_up_within_window(reset_epoch, now, expected):
    assert reset_seconds(reset_epoch, now) == expected


def test_login_window_matches_configured_limit():
    assert LOGIN_WINDOW_SECONDS == 15 * 60
