"""
Authentication middleware.

Runs the Authenticator for every request before the route handler, exposes
the result as ``request.state.user`` and writes whatever cookie changes the
decision requires (fresh pair after a refresh, or clearing stale cookies).
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from services.authenticator import Authenticator
from utils.cookies import (ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE, set_auth_cookies,
                           clear_auth_cookies, writes_auth_cookies)
from utils.deps import LazyDBSession, get_token_codec


class AuthenticationMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next):
        authenticator = Authenticator(get_token_codec())
        lazy_db = LazyDBSession(request.app)

        try:
            # The database is only opened if the refresh path needs it
            result = authenticator.authenticate(
                request.cookies.get(ACCESS_TOKEN_COOKIE),
                request.cookies.get(REFRESH_TOKEN_COOKIE),
                lazy_db
            )
        finally:
            lazy_db.close()

        request.state.user = result.identity

        response: Response = await call_next(request)

        # Logout and login write their own cookies; don't undo them
        if writes_auth_cookies(response):
            return response

        if result.tokens is not None:
            set_auth_cookies(response, result.tokens)
        elif result.clear_cookies:
            clear_auth_cookies(response)

        return response
