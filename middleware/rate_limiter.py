from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request
from core.config import settings

def get_user_id(request: Request):
    # Set by AuthenticationMiddleware, which runs before any route
    identity = getattr(request.state, "user", None)
    if identity is not None:
        return f"user:{identity.id}"

    return get_remote_address(request)

limiter = Limiter(
    key_func=get_user_id,
    default_limits=["200/hour"],
    enabled=settings.ENV != "testing"
)
