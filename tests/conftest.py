import os

# Must be set before the app (and its settings) are imported
os.environ["ENV"] = "testing"
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("SESSION_SECRET", "test-session-secret")
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("LOG_DIR", "logs/test")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.orm import sessionmaker, Session
from typing import Generator

from main import app
from core.database import Base, build_engine
from models.users import User
from utils.deps import get_db, get_token_codec
from utils.hashing import get_password_hash

# SYNC SQLite for testing (matches sync service layer), foreign keys on
SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

engine = build_engine(SQLALCHEMY_DATABASE_URL)

TestingSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)

TEST_PASSWORD = "password123"


def cookie_header(**cookies) -> dict:
    """Explicit Cookie header, for requests that must carry exactly these cookies."""
    return {"Cookie": "; ".join(f"{name}={value}" for name, value in cookies.items())}


@pytest.fixture
def session() -> Generator[Session, None, None]:
    """
    Creates a fresh, empty database for each test.
    """
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

    Base.metadata.drop_all(bind=engine)


@pytest.fixture
async def client(session: Session):
    """
    Yields an HTTP client that talks to the app using the test database.

    The authentication middleware resolves get_db through the same
    overrides, so it sees the test session too.
    """
    def override_get_db():
        try:
            yield session
        finally:
            pass  # Session cleanup handled by session fixture

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def codec():
    return get_token_codec()


@pytest.fixture
def verified_user(session):
    user = User(
        name="Ada Lovelace",
        email="ada@example.com",
        hashed_password=get_password_hash(TEST_PASSWORD),
        is_email_verified=True
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def other_user(session):
    user = User(
        name="Grace Hopper",
        email="grace@example.com",
        hashed_password=get_password_hash(TEST_PASSWORD),
        is_email_verified=True
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
async def logged_in_client(client, verified_user):
    """Client holding the auth cookies of a fresh verified_user login."""
    response = await client.post("/login", data={
        "email": verified_user.email,
        "password": TEST_PASSWORD
    })
    assert response.status_code == 302
    assert response.headers["location"] == "/"
    return client
