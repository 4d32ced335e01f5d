import os

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# ------------------------------------------------------------------
# FORCE TESTING MODE
# This must be done BEFORE importing helpdesk.main so settings, the
# engine and the limiter all pick up the test configuration.
# ------------------------------------------------------------------
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENV"] = "test"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ.pop("REDIS_URL", None)
os.environ.pop("SUPER_ADMIN_USERNAME", None)

from sqlmodel import SQLModel

from helpdesk.core.config import settings
from helpdesk.core.database import AsyncSessionLocal, engine
from helpdesk.core.rate_limiter import limiter
from helpdesk.core.responses import FLASH_COOKIE, decode_flashes
from helpdesk.core.security import hash_password
from helpdesk.core.sessions import MemorySessionStore
from helpdesk.main import app
from helpdesk.models import audit, department, floor, user  # noqa: F401
from helpdesk.models.enums import UserRole, UserStatus
from helpdesk.models.user import User

DEFAULT_PASSWORD = "Str0ng!Pass"


@pytest_asyncio.fixture(autouse=True)
async def reset_state():
    """Fresh tables, limiter counters and session store for every test."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
        await conn.run_sync(SQLModel.metadata.create_all)

    limiter.reset()
    app.state.session_store = MemorySessionStore(3600)
    yield


@pytest_asyncio.fixture
async def session():
    async with AsyncSessionLocal() as s:
        yield s


@pytest_asyncio.fixture
async def client():
    # Startup events do not run under ASGITransport; reset_state builds the tables
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def store():
    return app.state.session_store


@pytest.fixture
def make_user(session):
    async def _make_user(
        username: str = "alice",
        password: str = DEFAULT_PASSWORD,
        role: UserRole = UserRole.Admin,
        status: UserStatus = UserStatus.Active,
        login_attempts: int = 0,
        email: str | None = None,
        department_id: int | None = None,
    ) -> User:
        new_user = User(
            username=username,
            email=email or f"{username}@hospital.org",
            password_hash=hash_password(password),
            role=role,
            status=status,
            login_attempts=login_attempts,
            department_id=department_id,
        )
        session.add(new_user)
        await session.commit()
        await session.refresh(new_user)
        return new_user

    return _make_user


@pytest.fixture
def login(client):
    async def _login(username: str, password: str = DEFAULT_PASSWORD, headers: dict | None = None):
        return await client.post(
            "/auth/login",
            data={"username": username, "password": password},
            headers=headers or {},
        )

    return _login


def flashes(response) -> list[str]:
    """Messages carried by the flash cookie set on a response."""
    return [item["message"] for item in decode_flashes(response.cookies.get(FLASH_COOKIE))]


def session_cookie(client) -> str | None:
    return client.cookies.get(settings.SESSION_COOKIE_NAME)
