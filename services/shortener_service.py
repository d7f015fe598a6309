import secrets
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from core.exceptions import ShortCodeTaken
from models.short_links import ShortLink
from utils.logger import get_logger

logger = get_logger(__name__)


def generate_short_code() -> str:
    return secrets.token_hex(4)


class ShortenerService:

    @staticmethod
    def list_links(db: Session, user_id: int) -> list[ShortLink]:
        return db.query(ShortLink).filter(ShortLink.user_id == user_id).order_by(ShortLink.id.desc()).all()

    @staticmethod
    def find_by_short_code(db: Session, short_code: str) -> ShortLink | None:
        return db.query(ShortLink).filter(ShortLink.short_code == short_code).one_or_none()

    @staticmethod
    def find_by_id(db: Session, link_id: int) -> ShortLink | None:
        return db.query(ShortLink).filter(ShortLink.id == link_id).one_or_none()

    @staticmethod
    def create_link(db: Session, user_id: int, url: str, short_code: Optional[str] = None) -> ShortLink:
        """
        Raises:
            ShortCodeTaken: the code belongs to another link
        """
        short_code = short_code or generate_short_code()

        if ShortenerService.find_by_short_code(db, short_code):
            raise ShortCodeTaken(short_code)

        model = ShortLink(user_id=user_id, url=url, short_code=short_code)
        db.add(model)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ShortCodeTaken(short_code)

        db.refresh(model)
        logger.info(
            "Short link created",
            extra={"user_id": user_id, "short_code": short_code}
        )
        return model

    @staticmethod
    def update_link(db: Session, link: ShortLink, url: str, short_code: str) -> ShortLink:
        """
        Raises:
            ShortCodeTaken: the new code belongs to another link
        """
        if short_code != link.short_code:
            existing = ShortenerService.find_by_short_code(db, short_code)
            if existing and existing.id != link.id:
                raise ShortCodeTaken(short_code)

        link.url = url
        link.short_code = short_code
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ShortCodeTaken(short_code)

        db.refresh(link)
        return link

    @staticmethod
    def delete_link(db: Session, link: ShortLink) -> None:
        link_id, user_id = link.id, link.user_id
        db.delete(link)
        db.commit()

        logger.info("Short link deleted", extra={"link_id": link_id, "user_id": user_id})
