from dataclasses import dataclass
from typing import Callable, Optional
from sqlalchemy.orm import Session
from core.exceptions import InvalidToken, SessionError, UserNotFound
from schemas.auth_schemas import Identity, RefreshTokenClaims, TokenPair
from services.session_service import SessionService
from services.token_service import TokenCodec
from services.user_service import UserService
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class AuthResult:
    """
    Outcome of authenticating one request.

    identity: who the request is, or None for anonymous
    tokens: a freshly minted pair the response must set as cookies
    clear_cookies: the response must delete both auth cookies
    """
    identity: Optional[Identity]
    tokens: Optional[TokenPair] = None
    clear_cookies: bool = False


ANONYMOUS = AuthResult(identity=None)


class Authenticator:
    """
    Decides who a request is from its two auth cookies.

    1. No cookies: anonymous.
    2. Access token verifies: identity from its claims. No database access.
    3. Otherwise, with a refresh token: look up its session (must still be
       valid) and the session's owner, then mint a new pair bound to the
       same session.
    4. Anything else: anonymous, and the stale cookies get cleared.

    Token and session failures never escape; they degrade to anonymous.
    Database errors are not caught here and fail the request.
    """

    def __init__(self, codec: TokenCodec):
        self.codec = codec

    def authenticate(self, access_token: Optional[str], refresh_token: Optional[str],
                     get_db: Callable[[], Session]) -> AuthResult:
        if not access_token and not refresh_token:
            return ANONYMOUS

        if access_token:
            try:
                claims = self.codec.verify_access(access_token)
                return AuthResult(identity=Identity.from_claims(claims))
            except InvalidToken as e:
                logger.debug(
                    "Access token rejected, trying refresh token",
                    extra={"reason": e.reason}
                )

        if refresh_token:
            try:
                # Signature and expiry are checked before any database work
                claims = self.codec.verify_refresh(refresh_token)
                identity, tokens = self.refresh_from_claims(get_db(), claims)
                return AuthResult(identity=identity, tokens=tokens)
            except (InvalidToken, SessionError) as e:
                logger.warning(
                    "Token refresh failed",
                    extra={"reason": e.reason, "error": e.message}
                )

        return AuthResult(identity=None, clear_cookies=True)

    def refresh(self, db: Session, refresh_token: str) -> tuple[Identity, TokenPair]:
        """
        Mints a new access/refresh pair from a refresh token.

        The session row is left untouched: no rotation, no last-used update.

        Raises:
            InvalidToken: refresh token is bad, expired or not a refresh token
            SessionNotFound / SessionRevoked: the session can't be used
            UserNotFound: the session's owner is gone
        """
        return self.refresh_from_claims(db, self.codec.verify_refresh(refresh_token))

    def refresh_from_claims(self, db: Session, claims: RefreshTokenClaims) -> tuple[Identity, TokenPair]:
        session = SessionService.require_valid_session(db, claims.session_id)

        user = UserService.find_by_id(db, session.user_id)
        if user is None:
            raise UserNotFound(session.user_id)

        identity = Identity(id=user.id, name=user.name, email=user.email, session_id=session.id)
        tokens = TokenPair(
            access_token=self.codec.issue_access_token(user.id, user.name, user.email, session.id),
            refresh_token=self.codec.issue_refresh_token(session.id)
        )

        logger.info(
            "Tokens refreshed",
            extra={"user_id": user.id, "session_id": session.id}
        )
        return identity, tokens
