from datetime import datetime
from pathlib import Path

from fastapi import Request
from fastapi.templating import Jinja2Templates

from helpdesk.core.responses import FLASH_COOKIE, read_flashes

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATE_DIR))


def format_datetime(value: datetime | None) -> str:
    if value is None:
        return "-"
    return value.strftime("%Y-%m-%d %H:%M")


templates.env.filters["datetime"] = format_datetime


def render(request: Request, name: str, context: dict | None = None, status_code: int = 200):
    """Render a page, consuming any pending flash messages."""
    messages = read_flashes(request)

    page_context = dict(context or {})
    page_context["messages"] = messages
    page_context.setdefault("current_user", getattr(request.state, "user", None))

    response = templates.TemplateResponse(request, name, page_context, status_code=status_code)
    if messages:
        response.delete_cookie(FLASH_COOKIE)
    return response
