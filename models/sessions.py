from core.database import Base
from sqlalchemy import Column, Boolean, String, Integer, Text, ForeignKey
from sqlalchemy.orm import relationship
from models.mixins import CreatedAtMixin, UpdatedAtMixin

class UserSession(Base, CreatedAtMixin, UpdatedAtMixin):
    """
    One authenticated login (a browser or device).

    The session row, not the token, is the authority: refresh tokens only
    carry its id, and setting ``valid`` to False ends every refresh attempt
    made with any token that points here. ``valid`` never goes back to True.
    """
    __tablename__ = "sessions"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #fk
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    #relationships
    user = relationship("User", back_populates="sessions")

    valid = Column(Boolean, default=True, nullable=False)
    user_agent = Column(Text, nullable=True)
    ip = Column(String(255), nullable=True)
