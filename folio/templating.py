"""
Jinja2 environment for the HTML pages, plus flash ("toast") messages kept in
the signed session cookie.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from fastapi import Request
from fastapi.templating import Jinja2Templates

from folio.config import get_settings
from folio.markdown_utils import markdown_to_html

TEMPLATES_DIR = Path(__file__).parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

_FLASH_KEY = "_flashes"


def flash(request: Request, message: str, category: str = "success") -> None:
    if not message:
        return
    request.session.setdefault(_FLASH_KEY, []).append(
        {"message": message, "category": category}
    )


def pop_flashes(request: Request) -> list[dict]:
    if "session" not in request.scope:
        return []
    return request.session.pop(_FLASH_KEY, [])


def _format_date(value, fmt: str = "%B %d, %Y") -> str:
    if not value:
        return ""
    try:
        moment = datetime.fromisoformat(str(value))
    except ValueError:
        return str(value)
    return moment.strftime(fmt)


templates.env.filters["markdown"] = markdown_to_html
templates.env.filters["date"] = _format_date
templates.env.globals["pop_flashes"] = pop_flashes
templates.env.globals["get_settings"] = get_settings
templates.env.globals["current_year"] = lambda: datetime.now(timezone.utc).year
