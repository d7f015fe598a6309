from typing import Optional
from starlette.requests import Request


def client_ip(request: Request) -> Optional[str]:
    # First hop of X-Forwarded-For when behind a proxy
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip() or None
    return request.client.host if request.client else None


def user_agent(request: Request) -> Optional[str]:
    return request.headers.get("user-agent")
