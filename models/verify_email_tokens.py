from core.database import Base
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from models.mixins import CreatedAtMixin

class VerifyEmailToken(Base, CreatedAtMixin):
    __tablename__ = "verify_email_tokens"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #fk
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    #relationships
    user = relationship("User", back_populates="verify_email_tokens")

    token = Column(String(8), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
