from datetime import timedelta
from functools import lru_cache
from typing import Annotated, Optional
from fastapi import Depends, Request
from sqlalchemy.orm import Session
from core.config import settings
from core.database import SessionLocal
from schemas.auth_schemas import Identity
from services.oauth_service import GoogleOAuthClient
from services.token_service import TokenCodec

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

db_dependency = Annotated[Session, Depends(get_db)]


class LazyDBSession:
    """
    Opens a database session on first call, for code that runs outside
    FastAPI's dependency injection (middleware) but must still honour
    ``app.dependency_overrides[get_db]``.
    """
    def __init__(self, app):
        self._app = app
        self._generator = None
        self._db: Optional[Session] = None

    def __call__(self) -> Session:
        if self._db is None:
            provider = self._app.dependency_overrides.get(get_db, get_db)
            self._generator = provider()
            self._db = next(self._generator)
        return self._db

    @property
    def opened(self) -> bool:
        return self._db is not None

    def close(self):
        if self._generator is not None:
            self._generator.close()
            self._generator = None
            self._db = None


@lru_cache
def get_token_codec() -> TokenCodec:
    return TokenCodec(
        secret=settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
        access_ttl=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        refresh_ttl=timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    )

codec_dependency = Annotated[TokenCodec, Depends(get_token_codec)]


def get_current_identity(request: Request) -> Identity | None:
    """
    Identity resolved by AuthenticationMiddleware, or None when anonymous.

    Routes decide for themselves what to do with an anonymous request.
    """
    return getattr(request.state, "user", None)

identity_dependency = Annotated[Optional[Identity], Depends(get_current_identity)]


def get_google_client() -> GoogleOAuthClient:
    return GoogleOAuthClient(
        client_id=settings.GOOGLE_CLIENT_ID,
        client_secret=settings.GOOGLE_CLIENT_SECRET,
        redirect_uri=f"{settings.FRONTEND_URL.rstrip('/')}/google/callback"
    )

google_dependency = Annotated[GoogleOAuthClient, Depends(get_google_client)]
