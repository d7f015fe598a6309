from core.database import Base
from sqlalchemy import (Column, Integer, String, Boolean, Text)
from sqlalchemy.orm import relationship
from models.mixins import CreatedAtMixin, UpdatedAtMixin

class User(Base, CreatedAtMixin, UpdatedAtMixin):
    __tablename__ = "users"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #relationships
    sessions = relationship("UserSession", back_populates="user",
                            cascade="all, delete-orphan", passive_deletes=True)
    short_links = relationship("ShortLink", back_populates="user",
                               cascade="all, delete-orphan", passive_deletes=True)
    verify_email_tokens = relationship("VerifyEmailToken", back_populates="user",
                                       cascade="all, delete-orphan", passive_deletes=True)
    oauth_accounts = relationship("OAuthAccount", back_populates="user",
                                  cascade="all, delete-orphan", passive_deletes=True)

    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    # Null for users who only ever signed in through an OAuth provider
    hashed_password = Column(String(255), nullable=True)
    is_email_verified = Column(Boolean, default=False, nullable=False)
    avatar_url = Column(Text, nullable=True)
