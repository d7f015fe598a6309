from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from models.users import User
from models.oauth_accounts import OAuthAccount
from core.exceptions import DuplicateEmail, OAuthError
from utils.logger import get_logger

logger = get_logger(__name__)


class UserService:
    """
    Credential Store. Never sees plaintext passwords: callers pass a hash.
    """

    @staticmethod
    def find_by_email(db: Session, email: str) -> User | None:
        return db.query(User).filter(User.email == email).one_or_none()

    @staticmethod
    def find_by_id(db: Session, user_id: int) -> User | None:
        return db.query(User).filter(User.id == user_id).one_or_none()

    @staticmethod
    def create_user(db: Session, name: str, email: str, hashed_password: Optional[str] = None,
                    is_email_verified: bool = False, avatar_url: Optional[str] = None) -> User:
        """
        Inserts a user.

        The unique index on email is the real guard; a concurrent insert that
        slipped past the caller's pre-check surfaces here.

        Raises:
            DuplicateEmail: the email is already taken
        """
        model = User(
            name=name,
            email=email,
            hashed_password=hashed_password,
            is_email_verified=is_email_verified,
            avatar_url=avatar_url
        )

        db.add(model)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.warning("Duplicate email rejected by unique constraint", extra={"email": email})
            raise DuplicateEmail(email)

        db.refresh(model)
        return model

    @staticmethod
    def mark_email_verified(db: Session, user_id: int) -> User | None:
        model = UserService.find_by_id(db, user_id)
        if model is None:
            return None

        if not model.is_email_verified:
            model.is_email_verified = True
            db.commit()
            logger.info("Email verified", extra={"user_id": user_id})

        return model

    @staticmethod
    def find_oauth_account(db: Session, provider: str, provider_account_id: str) -> OAuthAccount | None:
        return db.query(OAuthAccount).filter(
            OAuthAccount.provider == provider,
            OAuthAccount.provider_account_id == provider_account_id
        ).one_or_none()

    @staticmethod
    def link_oauth_account(db: Session, user: User, provider: str, provider_account_id: str,
                           avatar_url: Optional[str] = None) -> OAuthAccount:
        """
        Links a provider account to an existing user.

        A concurrent callback may link the same provider account first; that
        row is returned if it points at this user.

        Raises:
            OAuthError: the provider account belongs to another user
        """
        account = OAuthAccount(
            user_id=user.id,
            provider=provider,
            provider_account_id=provider_account_id
        )
        db.add(account)

        if avatar_url and not user.avatar_url:
            user.avatar_url = avatar_url
        # The provider vouched for this address
        user.is_email_verified = True

        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            existing = UserService.find_oauth_account(db, provider, provider_account_id)
            if existing is None or existing.user_id != user.id:
                raise OAuthError("OAuth account is linked to another user")

            logger.warning(
                "OAuth account already linked",
                extra={"user_id": user.id, "provider": provider}
            )
            return existing

        db.refresh(account)

        logger.info(
            "OAuth account linked",
            extra={"user_id": user.id, "provider": provider}
        )
        return account

    @staticmethod
    def create_oauth_user(db: Session, name: str, email: str, provider: str,
                          provider_account_id: str, avatar_url: Optional[str] = None) -> User:
        user = UserService.create_user(
            db,
            name=name,
            email=email,
            hashed_password=None,
            is_email_verified=True,
            avatar_url=avatar_url
        )
        UserService.link_oauth_account(db, user, provider, provider_account_id)
        return user
