from core.database import Base
from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship
from models.mixins import CreatedAtMixin, UpdatedAtMixin

class ShortLink(Base, CreatedAtMixin, UpdatedAtMixin):
    __tablename__ = "short_links"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #fk
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    #relationships
    user = relationship("User", back_populates="short_links")

    short_code = Column(String(16), unique=True, nullable=False, index=True)
    url = Column(String(2048), nullable=False)
