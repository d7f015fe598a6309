"""Domain exceptions raised by the services and recovered by the routers."""

from typing import Optional, Dict, Any


class AppError(Exception):
    """Base exception for all application errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


# Form / registration errors
class ValidationError(AppError):
    """Submitted form failed validation; message is the first violation"""


class UserExists(AppError):
    def __init__(self):
        super().__init__("User already exists.")


class DuplicateEmail(AppError):
    """Unique email constraint violated at insert time"""

    def __init__(self, email: str):
        super().__init__("Email already registered", details={"email": email})


class InvalidCredentials(AppError):
    """Wrong email or password. Deliberately does not say which."""

    def __init__(self):
        super().__init__("Invalid email or password")


# Token errors
class InvalidToken(AppError):
    """Base for every token verification failure"""

    reason = "invalid"


class InvalidSignature(InvalidToken):
    reason = "invalid_signature"

    def __init__(self, message: str = "Token signature is invalid"):
        super().__init__(message)


class TokenExpired(InvalidToken):
    reason = "expired"

    def __init__(self):
        super().__init__("Token has expired")


class WrongTokenType(InvalidToken):
    reason = "wrong_type"

    def __init__(self, expected: str, actual: str):
        super().__init__(
            f"Expected {expected} token, got {actual}",
            details={"expected": expected, "actual": actual}
        )


# Session errors
class SessionError(AppError):
    reason = "session"


class SessionNotFound(SessionError):
    reason = "session_not_found"

    def __init__(self, session_id: int):
        super().__init__("Session not found", details={"session_id": session_id})


class SessionRevoked(SessionError):
    reason = "session_revoked"

    def __init__(self, session_id: int):
        super().__init__("Session has been revoked", details={"session_id": session_id})


class UserNotFound(SessionError):
    reason = "user_not_found"

    def __init__(self, user_id: int):
        super().__init__("Session owner not found", details={"user_id": user_id})


# Supporting flows
class InvalidVerificationToken(AppError):
    def __init__(self):
        super().__init__("Verification code is invalid or expired. Please request a new code.")


class OAuthError(AppError):
    pass


class ShortCodeTaken(AppError):
    def __init__(self, short_code: str):
        super().__init__(
            "URL with that shortcode already exists, please choose another",
            details={"short_code": short_code}
        )
