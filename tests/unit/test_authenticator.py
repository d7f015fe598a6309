from datetime import timedelta
from unittest.mock import MagicMock
import pytest
from sqlalchemy.exc import OperationalError

from core.config import settings
from services.authenticator import Authenticator, ANONYMOUS
from services.token_service import TokenCodec, utc_now


def make_codec(**kwargs) -> TokenCodec:
    return TokenCodec(secret=settings.SECRET_KEY, algorithm=settings.ALGORITHM, **kwargs)


def no_db():
    raise AssertionError("database must not be touched")


def test_no_cookies_is_anonymous():
    result = Authenticator(make_codec()).authenticate(None, None, no_db)

    assert result == ANONYMOUS
    assert result.clear_cookies is False


def test_valid_access_token_never_touches_database():
    codec = make_codec()
    access = codec.issue_access_token(1, "Ada", "ada@example.com", 3)

    result = Authenticator(codec).authenticate(access, codec.issue_refresh_token(3), no_db)

    assert result.identity.id == 1
    assert result.identity.email == "ada@example.com"
    assert result.identity.session_id == 3
    assert result.tokens is None
    assert result.clear_cookies is False


def test_bad_access_token_without_refresh_clears_cookies():
    result = Authenticator(make_codec()).authenticate("garbage", None, no_db)

    assert result.identity is None
    assert result.clear_cookies is True


def test_refresh_token_in_access_slot_is_not_accepted():
    codec = make_codec()

    result = Authenticator(codec).authenticate(codec.issue_refresh_token(3), None, no_db)

    assert result.identity is None
    assert result.clear_cookies is True


def test_expired_refresh_token_clears_cookies_without_database():
    past = make_codec(clock=lambda: utc_now() - timedelta(days=8))

    result = Authenticator(make_codec()).authenticate(None, past.issue_refresh_token(3), no_db)

    assert result.identity is None
    assert result.clear_cookies is True


def test_database_failure_propagates():
    codec = make_codec()
    db = MagicMock()
    db.query.side_effect = OperationalError("SELECT", {}, Exception("database is down"))

    with pytest.raises(OperationalError):
        Authenticator(codec).authenticate(None, codec.issue_refresh_token(3), lambda: db)
