import secrets
from datetime import datetime, timezone, timedelta
from typing import Callable, Optional, Union
from jose import jwt, JWTError
from pydantic import ValidationError as ClaimsValidationError
from core.exceptions import InvalidSignature, TokenExpired, WrongTokenType
from schemas.auth_schemas import AccessTokenClaims, RefreshTokenClaims


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TokenCodec:
    """
    Signs and verifies the two token kinds.

    Access tokens carry the full identity (user id, name, email, session id)
    so a request holding one needs no database read. Refresh tokens carry
    only the session id. Every token gets a random ``jti``. Both are tagged
    with a ``type`` claim, so one kind can never be accepted where the other
    is expected.

    The codec is stateless and does no I/O; the signing secret is handed
    in at construction.
    """

    ACCESS = "access"
    REFRESH = "refresh"

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        access_ttl: timedelta = timedelta(minutes=15),
        refresh_ttl: timedelta = timedelta(days=7),
        clock: Optional[Callable[[], datetime]] = None
    ):
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self._clock = clock or utc_now

    def _encode(self, claims: dict, ttl: timedelta) -> str:
        issued_at = self._clock()
        payload = {
            **claims,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + ttl).timestamp()),
            # Unique per token, so two tokens minted in the same second differ
            "jti": secrets.token_urlsafe(16)
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def issue_access_token(self, user_id: int, name: str, email: str, session_id: int) -> str:
        return self._encode(
            {
                "type": self.ACCESS,
                "id": user_id,
                "name": name,
                "email": email,
                "session_id": session_id
            },
            self.access_ttl
        )

    def issue_refresh_token(self, session_id: int) -> str:
        return self._encode({"type": self.REFRESH, "session_id": session_id}, self.refresh_ttl)

    def verify(self, token: str) -> Union[AccessTokenClaims, RefreshTokenClaims]:
        """
        Verifies signature and expiry, then parses the claims for the token's kind.

        Expiry is judged by the codec's own clock, not the wall clock.

        Raises:
            TokenExpired: the embedded expiry has passed
            InvalidSignature: bad signature, malformed token or claims
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"verify_exp": False}
            )
        except JWTError as e:
            raise InvalidSignature(str(e) or "Token signature is invalid")

        expires_at = payload.get("exp")
        if not isinstance(expires_at, int):
            raise InvalidSignature("Token has no expiry")
        if expires_at < int(self._clock().timestamp()):
            raise TokenExpired()

        token_type = payload.get("type")
        try:
            if token_type == self.ACCESS:
                return AccessTokenClaims.model_validate(payload)
            if token_type == self.REFRESH:
                return RefreshTokenClaims.model_validate(payload)
        except ClaimsValidationError:
            raise InvalidSignature("Token claims are malformed")

        raise InvalidSignature("Unknown token type")

    def verify_access(self, token: str) -> AccessTokenClaims:
        claims = self.verify(token)
        if not isinstance(claims, AccessTokenClaims):
            raise WrongTokenType(expected=self.ACCESS, actual=claims.type)
        return claims

    def verify_refresh(self, token: str) -> RefreshTokenClaims:
        claims = self.verify(token)
        if not isinstance(claims, RefreshTokenClaims):
            raise WrongTokenType(expected=self.REFRESH, actual=claims.type)
        return claims
