from typing import Optional
from sqlalchemy.orm import Session
from models.sessions import UserSession
from core.exceptions import SessionNotFound, SessionRevoked
from utils.logger import get_logger

logger = get_logger(__name__)


class SessionService:
    """
    Session Store: one row per login.

    ``find_valid_by_id`` is the accessor every authentication path uses; it
    filters on ``valid`` in SQL so a revoked row can't be mistaken for a
    live one. ``find_any_by_id`` returns the raw row and is only for
    administrative checks such as "does this session belong to this user".
    """

    @staticmethod
    def create_session(db: Session, user_id: int, ip: Optional[str] = None,
                       user_agent: Optional[str] = None) -> UserSession:
        model = UserSession(user_id=user_id, ip=ip, user_agent=user_agent, valid=True)

        db.add(model)
        db.commit()
        db.refresh(model)

        logger.debug(
            "Session created",
            extra={"session_id": model.id, "user_id": user_id, "ip": ip}
        )
        return model

    @staticmethod
    def find_valid_by_id(db: Session, session_id: int) -> UserSession | None:
        return db.query(UserSession).filter(
            UserSession.id == session_id,
            UserSession.valid == True
        ).one_or_none()

    @staticmethod
    def find_any_by_id(db: Session, session_id: int) -> UserSession | None:
        return db.query(UserSession).filter(UserSession.id == session_id).one_or_none()

    @staticmethod
    def require_valid_session(db: Session, session_id: int) -> UserSession:
        """
        Like find_valid_by_id, but says why there is no usable session.

        Raises:
            SessionNotFound: no row with that id
            SessionRevoked: the row exists but has been revoked
        """
        model = SessionService.find_valid_by_id(db, session_id)
        if model is not None:
            return model

        if SessionService.find_any_by_id(db, session_id) is None:
            raise SessionNotFound(session_id)
        raise SessionRevoked(session_id)

    @staticmethod
    def list_valid_for_user(db: Session, user_id: int) -> list[UserSession]:
        return db.query(UserSession).filter(
            UserSession.user_id == user_id,
            UserSession.valid == True
        ).order_by(UserSession.id.desc()).all()

    @staticmethod
    def revoke_session(db: Session, session_id: int) -> None:
        """
        Marks a session invalid. Unknown or already revoked ids are a no-op.
        """
        updated = db.query(UserSession).filter(
            UserSession.id == session_id,
            UserSession.valid == True
        ).update({"valid": False}, synchronize_session="fetch")
        db.commit()

        if updated:
            logger.info("Session revoked", extra={"session_id": session_id})

    @staticmethod
    def revoke_all_user_sessions(db: Session, user_id: int,
                                 except_session_id: Optional[int] = None) -> int:
        """
        Revokes every live session of a user, optionally keeping one.

        Returns:
            Number of sessions revoked
        """
        query = db.query(UserSession).filter(
            UserSession.user_id == user_id,
            UserSession.valid == True
        )
        if except_session_id is not None:
            query = query.filter(UserSession.id != except_session_id)

        revoked = query.update({"valid": False}, synchronize_session="fetch")
        db.commit()

        logger.info(
            "User sessions revoked",
            extra={"user_id": user_id, "revoked": revoked, "kept_session_id": except_session_id}
        )
        return revoked
