from starlette.responses import Response
from core.config import settings
from schemas.auth_schemas import TokenPair

ACCESS_TOKEN_COOKIE = "access_token"
REFRESH_TOKEN_COOKIE = "refresh_token"
OAUTH_STATE_COOKIE = "google_oauth_state"
OAUTH_VERIFIER_COOKIE = "google_code_verifier"


def set_auth_cookies(response: Response, tokens: TokenPair) -> None:
    response.set_cookie(
        ACCESS_TOKEN_COOKIE,
        tokens.access_token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        path="/"
    )
    response.set_cookie(
        REFRESH_TOKEN_COOKIE,
        tokens.refresh_token,
        max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        path="/"
    )


def clear_auth_cookies(response: Response) -> None:
    for name in (ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE):
        response.delete_cookie(name, path="/", httponly=True, secure=settings.COOKIE_SECURE, samesite="lax")


def writes_auth_cookies(response: Response) -> bool:
    """True when the handler already set or cleared the auth cookies itself."""
    prefixes = (f"{ACCESS_TOKEN_COOKIE}=", f"{REFRESH_TOKEN_COOKIE}=")
    return any(
        value.startswith(prefixes)
        for value in response.headers.getlist("set-cookie")
    )
