from pathlib import Path
from typing import Any, Optional
from starlette.requests import Request
from starlette import status
from starlette.responses import HTMLResponse, RedirectResponse
from starlette.templating import Jinja2Templates
from utils.flash import get_flashed_messages

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def render(request: Request, template: str, context: Optional[dict[str, Any]] = None,
           status_code: int = 200) -> HTMLResponse:
    """
    Renders a page with the current identity and pending flash messages.
    """
    page_context = {
        "user": getattr(request.state, "user", None),
        "errors": get_flashed_messages(request, "errors"),
        "success": get_flashed_messages(request, "success"),
        **(context or {})
    }
    return templates.TemplateResponse(request, template, page_context, status_code=status_code)


def redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=status.HTTP_302_FOUND)
