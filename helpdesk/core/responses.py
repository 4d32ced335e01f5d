# helpdesk/core/responses.py

import base64
import binascii
import json

from fastapi import Request, status
from fastapi.responses import RedirectResponse
from pydantic import ValidationError

from helpdesk.core.config import settings

FLASH_COOKIE = "helpdesk_flash"

# Validation error types that mean "nothing usable was entered"
REQUIRED_ERROR_TYPES = frozenset({"missing", "string_too_short"})


# ------------------------------------------------------------
# Flash messages
# One-shot notices that survive a single redirect. They live in
# their own cookie because the gate must be able to flash even
# when there is no session at all.
# ------------------------------------------------------------
def encode_flashes(messages: list[dict]) -> str:
    # unpadded so the cookie value never needs quoting
    raw = base64.urlsafe_b64encode(json.dumps(messages).encode("utf-8"))
    return raw.decode("ascii").rstrip("=")


def decode_flashes(value: str | None) -> list[dict]:
    if not value:
        return []
    try:
        padded = value + "=" * (-len(value) % 4)
        messages = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")))
    except (binascii.Error, UnicodeError, ValueError):
        return []
    return messages if isinstance(messages, list) else []


def read_flashes(request: Request) -> list[dict]:
    return decode_flashes(request.cookies.get(FLASH_COOKIE))


def flash(response, request: Request, message: str, category: str = "error"):
    messages = read_flashes(request)
    messages.append({"category": category, "message": message})
    response.set_cookie(
        FLASH_COOKIE,
        encode_flashes(messages),
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
    )
    return response


# ------------------------------------------------------------
# Redirect helpers
# ------------------------------------------------------------
def redirect(url: str) -> RedirectResponse:
    # 303 so a POST is always followed by a GET
    return RedirectResponse(url, status_code=status.HTTP_303_SEE_OTHER)


def success_redirect(request: Request, message: str, url: str) -> RedirectResponse:
    return flash(redirect(url), request, message, "success")


def error_redirect(request: Request, message: str, url: str) -> RedirectResponse:
    return flash(redirect(url), request, message, "error")


def clear_session_cookie(response):
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return response


class AuthRedirect(Exception):
    """
    Raised by the session and role gates to abort the request.
    The registered handler turns it into a redirect with an optional flash.
    """

    def __init__(self, url: str, message: str | None = None, clear_session: bool = False):
        super().__init__(message or url)
        self.url = url
        self.message = message
        self.clear_session = clear_session


def auth_redirect_response(request: Request, exc: AuthRedirect) -> RedirectResponse:
    response = redirect(exc.url)
    if exc.message:
        flash(response, request, exc.message, "error")
    if exc.clear_session:
        clear_session_cookie(response)
    return response


# ------------------------------------------------------------
# Validation errors -> one human readable message
# ------------------------------------------------------------
def validation_message(exc: ValidationError, field_messages: dict[str, str] | None = None) -> str:
    error = exc.errors()[0]
    field = str(error["loc"][0]) if error.get("loc") else ""

    if field_messages and field in field_messages and error["type"] in REQUIRED_ERROR_TYPES:
        return field_messages[field]

    # Messages raised from our own validators
    ctx_error = error.get("ctx", {}).get("error")
    if ctx_error is not None:
        return str(ctx_error)

    return f"{field}: {error['msg']}" if field else error["msg"]
