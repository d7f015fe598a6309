from typing import Optional
from sqlalchemy.orm import Session
from core.exceptions import DuplicateEmail, InvalidCredentials, UserExists
from models.users import User
from schemas.auth_schemas import Identity, RegisterUserRequest, TokenPair
from services.session_service import SessionService
from services.token_service import TokenCodec
from services.user_service import UserService
from utils.hashing import get_password_hash, verify_password
from utils.logger import get_logger

logger = get_logger(__name__)


class AuthService:

    @staticmethod
    def register(db: Session, body: RegisterUserRequest) -> User:
        """
        Creates a new user from a validated registration form.

        Flow:
        1. Check if email already exists
        2. Hash the password
        3. Create the user (email unverified)

        Raises:
            UserExists: the email is taken, either at pre-check or at insert
        """
        if UserService.find_by_email(db, body.email):
            logger.warning(
                "Registration attempt with existing email",
                extra={"email": body.email}
            )
            raise UserExists()

        try:
            user = UserService.create_user(
                db,
                name=body.name,
                email=body.email,
                hashed_password=get_password_hash(body.password)
            )
        except DuplicateEmail:
            raise UserExists()

        logger.info(
            "User registered",
            extra={"user_id": user.id, "email": user.email}
        )
        return user

    @staticmethod
    def authenticate_user(db: Session, email: str, password: str) -> User:
        """
        Raises:
            InvalidCredentials: unknown email or wrong password (same error for both)
        """
        user = UserService.find_by_email(db, email)

        if not user:
            logger.warning(
                "Login failed - user not found",
                extra={"email": email}
            )
            raise InvalidCredentials()

        if not verify_password(password, user.hashed_password):
            logger.warning(
                "Login failed - invalid password",
                extra={"user_id": user.id, "email": email}
            )
            raise InvalidCredentials()

        logger.debug(
            "User authenticated successfully",
            extra={"user_id": user.id, "email": email}
        )
        return user

    @staticmethod
    def start_session(db: Session, codec: TokenCodec, user: User, ip: Optional[str] = None,
                      user_agent: Optional[str] = None) -> TokenPair:
        """
        Creates a session row for this login and issues the token pair bound to it.
        """
        session = SessionService.create_session(db, user.id, ip=ip, user_agent=user_agent)

        tokens = TokenPair(
            access_token=codec.issue_access_token(user.id, user.name, user.email, session.id),
            refresh_token=codec.issue_refresh_token(session.id)
        )

        logger.info(
            "User logged in",
            extra={"user_id": user.id, "session_id": session.id}
        )
        return tokens

    @staticmethod
    def logout(db: Session, identity: Identity) -> None:
        SessionService.revoke_session(db, identity.session_id)

        logger.info(
            "User logged out",
            extra={"user_id": identity.id, "session_id": identity.session_id}
        )
