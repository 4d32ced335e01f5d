# helpdesk/main.py

import sys
import time

import psutil
from fastapi import FastAPI, Request
from loguru import logger
from slowapi.errors import RateLimitExceeded

from helpdesk.core.config import settings
from helpdesk.core.database import check_connection, init_db
from helpdesk.core.rate_limiter import (
    limiter,
    login_rate_limit_exceeded,
    standard_rate_limit_headers,
)
from helpdesk.core.responses import AuthRedirect, auth_redirect_response
from helpdesk.core.seeding_logic import seed_super_admin
from helpdesk.core.sessions import build_session_store
from helpdesk.core.templating import render

# Routers
from helpdesk.api.endpoints import (
    account as account_router,
    auth as auth_router,
    dashboard as dashboard_router,
    departments as departments_router,
    floors as floors_router,
    logs as logs_router,
    users as users_router,
)

# ------------------------------------------------------------
# LOGURU CONFIGURATION
# ------------------------------------------------------------
logger.remove()
logger.add(
    sys.stdout,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
           "<level>{level}</level> | "
           "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
           "<level>{message}</level>",
    colorize=True,
    backtrace=True,
    diagnose=settings.ENV != "prod",
)

# ------------------------------------------------------------
# FASTAPI APP INIT
# ------------------------------------------------------------
app = FastAPI(
    title="Hospital IT Helpdesk",
    version="1.0.0",
    description="Staff-facing administration for the hospital IT helpdesk.",
)

START_TIME = time.time()

app.state.limiter = limiter
app.state.session_store = build_session_store()

# ------------------------------------------------------------
# EXCEPTION HANDLERS
# ------------------------------------------------------------
@app.exception_handler(AuthRedirect)
async def auth_redirect_handler(request: Request, exc: AuthRedirect):
    return auth_redirect_response(request, exc)


app.add_exception_handler(RateLimitExceeded, login_rate_limit_exceeded)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return render(
        request,
        "errors/500.html",
        {"title": "Something went wrong"},
        status_code=500,
    )

# ------------------------------------------------------------
# MIDDLEWARE
# ------------------------------------------------------------
app.middleware("http")(standard_rate_limit_headers)

# ------------------------------------------------------------
# REGISTER ROUTERS
# ------------------------------------------------------------
app.include_router(auth_router.router)
app.include_router(dashboard_router.router)
app.include_router(floors_router.router)
app.include_router(departments_router.router)
app.include_router(users_router.router)
app.include_router(account_router.router)
app.include_router(logs_router.router)

# ------------------------------------------------------------
# APPLICATION STARTUP EVENTS
# ------------------------------------------------------------
@app.on_event("startup")
async def on_startup():
    logger.info("Starting Hospital IT Helpdesk...")

    # 1) Database connection test
    try:
        await check_connection()
        logger.success("Database connection established.")
    except Exception:
        logger.exception("Startup aborted: Database connection failed.")
        return

    # 2) Initialize database tables
    try:
        await init_db()
        logger.success("Database tables ready.")
    except Exception as e:
        logger.warning(f"Table initialization encountered an issue: {e}")

    # 3) Seed Super Admin
    try:
        await seed_super_admin()
    except Exception:
        logger.exception("Super Admin seeding failed.")

    logger.success("Startup completed.")


# ------------------------------------------------------------
# HEALTH CHECK
# ------------------------------------------------------------
@app.get("/health", tags=["System"])
async def health():
    db_start = time.time()
    try:
        await check_connection()
        database = "Connected"
        db_latency = round((time.time() - db_start) * 1000, 2)
    except Exception:
        logger.exception("Health check: database unreachable")
        database = "Error"
        db_latency = 0

    return {
        "status": "ok" if database == "Connected" else "degraded",
        "version": app.version,
        "uptime": int(time.time() - START_TIME),
        "cpu": psutil.cpu_percent(interval=None),
        "ram": psutil.virtual_memory().percent,
        "database": database,
        "db_latency": db_latency,
    }
