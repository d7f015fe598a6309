from starlette.requests import Request

FLASH_KEY = "_flash"


def flash(request: Request, message: str, category: str = "errors") -> None:
    """Queue a message for the next rendered page (stored in the signed session cookie)."""
    messages = request.session.get(FLASH_KEY, {})
    messages.setdefault(category, []).append(message)
    request.session[FLASH_KEY] = messages


def get_flashed_messages(request: Request, category: str = "errors") -> list[str]:
    messages = request.session.get(FLASH_KEY, {})
    popped = messages.pop(category, [])
    if messages:
        request.session[FLASH_KEY] = messages
    else:
        request.session.pop(FLASH_KEY, None)
    return popped
