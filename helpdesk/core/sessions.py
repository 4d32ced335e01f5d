"""
Server-side session storage.

The browser only holds an opaque random session id. The record behind it is
kept here, so destroying a session (logout, stale account) takes effect on the
very next request regardless of what the client still sends.
"""

import json
import secrets
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

import redis.asyncio as redis
from loguru import logger

from helpdesk.core.config import settings
from helpdesk.schemas.auth import SessionSnapshot


def new_session_id() -> str:
    return secrets.token_urlsafe(32)


class SessionStore(ABC):
    """Create/read/destroy lifecycle for session records."""

    @abstractmethod
    async def create(self, data: dict[str, Any]) -> str:
        ...

    @abstractmethod
    async def get(self, sid: str) -> Optional[dict[str, Any]]:
        ...

    @abstractmethod
    async def destroy(self, sid: str) -> None:
        ...


class MemorySessionStore(SessionStore):
    def __init__(self, max_age_seconds: int):
        self.max_age_seconds = max_age_seconds
        self._records: dict[str, tuple[float, dict[str, Any]]] = {}

    async def create(self, data: dict[str, Any]) -> str:
        now = time.monotonic()
        self._sweep(now)
        sid = new_session_id()
        self._records[sid] = (now + self.max_age_seconds, dict(data))
        return sid

    async def get(self, sid: str) -> Optional[dict[str, Any]]:
        entry = self._records.get(sid)
        if entry is None:
            return None

        expires_at, data = entry
        if expires_at <= time.monotonic():
            self._records.pop(sid, None)
            return None

        return dict(data)

    async def destroy(self, sid: str) -> None:
        self._records.pop(sid, None)

    def _sweep(self, now: float) -> None:
        # abandoned sessions are never read again, so expiry on read alone leaks them
        expired = [sid for sid, (expires_at, _) in self._records.items() if expires_at <= now]
        for sid in expired:
            del self._records[sid]


class RedisSessionStore(SessionStore):
    def __init__(self, url: str, max_age_seconds: int, prefix: str = "helpdesk:session:"):
        self.max_age_seconds = max_age_seconds
        self.prefix = prefix
        self._redis = redis.from_url(url, decode_responses=True)

    def _key(self, sid: str) -> str:
        return f"{self.prefix}{sid}"

    async def create(self, data: dict[str, Any]) -> str:
        sid = new_session_id()
        await self._redis.set(self._key(sid), json.dumps(data), ex=self.max_age_seconds)
        return sid

    async def get(self, sid: str) -> Optional[dict[str, Any]]:
        raw = await self._redis.get(self._key(sid))
        if raw is None:
            return None
        return json.loads(raw)

    async def destroy(self, sid: str) -> None:
        await self._redis.delete(self._key(sid))


def build_session_store() -> SessionStore:
    if settings.REDIS_URL:
        logger.info("Using Redis session store")
        return RedisSessionStore(settings.REDIS_URL, settings.SESSION_MAX_AGE_SECONDS)

    logger.warning("REDIS_URL not set. Sessions are kept in process memory.")
    return MemorySessionStore(settings.SESSION_MAX_AGE_SECONDS)


@dataclass
class SessionContext:
    """Per-request view of the caller's session, passed into handlers."""

    sid: Optional[str]
    user: Optional[SessionSnapshot]

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None
