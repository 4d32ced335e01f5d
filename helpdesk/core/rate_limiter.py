import math
import time

from fastapi import Request
from limits import parse
from loguru import logger
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from helpdesk.core.config import settings
from helpdesk.core.constants import LOGIN_URL, MSG_LOGIN_RATE_LIMITED
from helpdesk.core.responses import error_redirect

# ----------------------------------------------------------------
# 1. CLIENT IP IDENTIFICATION
# ----------------------------------------------------------------
def get_real_ip(request: Request) -> str:
    """
    Client IP behind proxies.
    Checks X-Forwarded-For (load balancers) first, then X-Real-IP.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # leftmost entry is the original client
        return forwarded.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    return get_remote_address(request)

# ----------------------------------------------------------------
# 2. LIMITER
# Fixed window, every attempt counts (successful logins included).
# ----------------------------------------------------------------
if settings.REDIS_URL:
    logger.info("Initializing rate limiter with Redis storage")
    limiter = Limiter(
        key_func=get_real_ip,
        storage_uri=settings.REDIS_URL,
        strategy="fixed-window",
        headers_enabled=True,
        storage_options={"socket_connect_timeout": 5, "retry_on_timeout": True},
    )
else:
    logger.warning("REDIS_URL not found. Falling back to in-memory rate limiting.")
    limiter = Limiter(
        key_func=get_real_ip,
        strategy="fixed-window",
        headers_enabled=True,
    )

# ----------------------------------------------------------------
# 3. LIMIT EXCEEDED
# The login handler is never reached; the client gets the login page
# back with a throttling notice.
# ----------------------------------------------------------------
async def login_rate_limit_exceeded(request: Request, exc: RateLimitExceeded):
    logger.warning(f"Login rate limit exceeded for {get_real_ip(request)} ({exc.detail})")
    response = error_redirect(request, MSG_LOGIN_RATE_LIMITED, LOGIN_URL)
    return request.app.state.limiter._inject_headers(response, request.state.view_rate_limit)

# ----------------------------------------------------------------
# 4. STANDARD HEADERS
# slowapi emits the legacy X-RateLimit-* names. Rewrite them to the
# IETF RateLimit-* fields, with Reset as seconds until the window ends.
# ----------------------------------------------------------------
_LEGACY_HEADERS = {
    "X-RateLimit-Limit": "RateLimit-Limit",
    "X-RateLimit-Remaining": "RateLimit-Remaining",
    "X-RateLimit-Reset": "RateLimit-Reset",
}

LOGIN_WINDOW_SECONDS = parse(settings.LOGIN_RATE_LIMIT).get_expiry()


def reset_seconds(reset_epoch: float, now: float, window: int = LOGIN_WINDOW_SECONDS) -> int:
    """Whole seconds until the window ends, rounded up and kept within 0..window."""
    return min(window, max(0, math.ceil(reset_epoch - now)))


async def standard_rate_limit_headers(request: Request, call_next):
    response = await call_next(request)

    for legacy, standard in _LEGACY_HEADERS.items():
        value = response.headers.get(legacy)
        if value is None:
            continue
        del response.headers[legacy]

        if standard == "RateLimit-Reset":
            try:
                value = str(reset_seconds(float(value), time.time()))
            except ValueError:
                pass
        response.headers[standard] = value

    return response
