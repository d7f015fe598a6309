from datetime import datetime, timezone
from urllib.parse import urlencode
from fastapi import BackgroundTasks
from sqlalchemy.orm import Session
from core.config import settings
from core.exceptions import InvalidVerificationToken
from core.templating import templates
from models.users import User
from models.verify_email_tokens import VerifyEmailToken
from services.email_service import send_email
from services.user_service import UserService
from utils.logger import get_logger
from utils.verification import generate_verification_code, get_code_expiry_time, as_utc

logger = get_logger(__name__)


class VerificationService:

    @staticmethod
    def create_verify_email_link(token: str, email: str) -> str:
        query = urlencode({"token": token, "email": email})
        return f"{settings.FRONTEND_URL.rstrip('/')}/verify-email-token?{query}"

    @staticmethod
    def clear_verify_email_tokens(db: Session, user_id: int) -> None:
        db.query(VerifyEmailToken).filter(VerifyEmailToken.user_id == user_id).delete()
        db.commit()

    @staticmethod
    def send_new_verify_email_link(db: Session, user: User, bg: BackgroundTasks) -> VerifyEmailToken:
        """
        Replaces any outstanding code with a new one and mails it.

        The email goes out as a background task after the response is sent.
        """
        db.query(VerifyEmailToken).filter(VerifyEmailToken.user_id == user.id).delete()

        model = VerifyEmailToken(
            user_id=user.id,
            token=generate_verification_code(),
            expires_at=get_code_expiry_time(days=settings.VERIFY_EMAIL_TOKEN_EXPIRE_DAYS)
        )
        db.add(model)
        db.commit()
        db.refresh(model)

        link = VerificationService.create_verify_email_link(model.token, user.email)
        body = templates.get_template("emails/verify_email.html").render(
            name=user.name,
            code=model.token,
            link=link,
            expire_days=settings.VERIFY_EMAIL_TOKEN_EXPIRE_DAYS
        )
        bg.add_task(send_email, to_email=user.email, subject="Verify your email", body=body)

        logger.info("Verification email queued", extra={"user_id": user.id})
        return model

    @staticmethod
    def find_valid_token(db: Session, token: str, email: str) -> VerifyEmailToken | None:
        model = db.query(VerifyEmailToken).join(User).filter(
            VerifyEmailToken.token == token,
            User.email == email
        ).first()

        if model is None:
            return None

        if as_utc(model.expires_at) < datetime.now(timezone.utc):
            return None

        return model

    @staticmethod
    def verify_email(db: Session, token: str, email: str) -> User:
        """
        Raises:
            InvalidVerificationToken: wrong code, wrong email or expired
        """
        model = VerificationService.find_valid_token(db, token, email)
        if model is None:
            logger.warning("Email verification failed", extra={"email": email})
            raise InvalidVerificationToken()

        user = UserService.mark_email_verified(db, model.user_id)
        VerificationService.clear_verify_email_tokens(db, model.user_id)
        return user
