"""
Middleware package exports.
"""

from middleware.request_id import RequestIDMiddleware, get_request_id
from middleware.rate_limiter import limiter, get_user_id
from middleware.authentication import AuthenticationMiddleware

__all__ = ["RequestIDMiddleware", "get_request_id", "limiter", "get_user_id", "AuthenticationMiddleware"]
