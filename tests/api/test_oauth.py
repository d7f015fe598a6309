from urllib.parse import urlparse, parse_qs

from core.exceptions import OAuthError
from main import app
from models.oauth_accounts import OAuthAccount
from models.users import User
from services.oauth_service import GoogleOAuthClient, GoogleProfile, code_challenge_s256
from tests.conftest import cookie_header
from utils.deps import get_google_client

EXCHANGE_COOKIES = {"google_oauth_state": "state-abc", "google_code_verifier": "verifier-xyz"}


class FakeGoogleClient:
    configured = True

    def __init__(self, profile=None, error=False):
        self.profile = profile or GoogleProfile(
            sub="google-123",
            email="ada@example.com",
            name="Ada Lovelace",
            picture="https://example.com/ada.png"
        )
        self.error = error
        self.exchanged = []

    def create_authorization_url(self, state, code_verifier):
        return f"https://accounts.google.com/o/oauth2/v2/auth?state={state}"

    async def validate_authorization_code(self, code, code_verifier):
        self.exchanged.append((code, code_verifier))
        if self.error:
            raise OAuthError("exchange failed")
        return self.profile


def use_google(fake):
    app.dependency_overrides[get_google_client] = lambda: fake
    return fake


def test_code_challenge_s256():
    # RFC 7636 appendix B
    verifier = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"
    assert code_challenge_s256(verifier) == "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"


def test_authorization_url():
    google = GoogleOAuthClient("client-id", "client-secret", "http://localhost:8000/google/callback")

    url = urlparse(google.create_authorization_url("state-abc", "verifier-xyz"))
    params = parse_qs(url.query)

    assert url.netloc == "accounts.google.com"
    assert params["state"] == ["state-abc"]
    assert params["code_challenge"] == [code_challenge_s256("verifier-xyz")]
    assert params["code_challenge_method"] == ["S256"]
    assert params["scope"] == ["openid profile email"]
    assert params["redirect_uri"] == ["http://localhost:8000/google/callback"]


async def test_google_redirect_sets_exchange_cookies(client):
    use_google(FakeGoogleClient())

    response = await client.get("/google")

    assert response.status_code == 302
    assert response.headers["location"].startswith("https://accounts.google.com/")
    state = parse_qs(urlparse(response.headers["location"]).query)["state"][0]
    assert response.cookies["google_oauth_state"] == state
    assert response.cookies["google_code_verifier"]


async def test_google_not_configured(client):
    fake = use_google(FakeGoogleClient())
    fake.configured = False

    response = await client.get("/google")

    assert response.headers["location"] == "/login"


async def test_callback_creates_verified_user(client, session, codec):
    fake = use_google(FakeGoogleClient())

    response = await client.get(
        "/google/callback",
        params={"code": "auth-code", "state": "state-abc"},
        headers=cookie_header(**EXCHANGE_COOKIES)
    )

    assert response.status_code == 302
    assert response.headers["location"] == "/"
    assert fake.exchanged == [("auth-code", "verifier-xyz")]

    user = session.query(User).one()
    assert user.email == "ada@example.com"
    assert user.is_email_verified is True
    assert user.hashed_password is None
    assert user.avatar_url == "https://example.com/ada.png"

    account = session.query(OAuthAccount).one()
    assert account.provider == "google"
    assert account.provider_account_id == "google-123"

    assert codec.verify_access(response.cookies["access_token"]).id == user.id
    assert "refresh_token" in response.cookies


async def test_callback_links_existing_user(client, session, verified_user):
    use_google(FakeGoogleClient())

    response = await client.get(
        "/google/callback",
        params={"code": "auth-code", "state": "state-abc"},
        headers=cookie_header(**EXCHANGE_COOKIES)
    )

    assert response.headers["location"] == "/"
    assert session.query(User).count() == 1
    assert session.query(OAuthAccount).one().user_id == verified_user.id


async def test_callback_returning_user(client, session):
    use_google(FakeGoogleClient())
    params = {"code": "auth-code", "state": "state-abc"}

    await client.get("/google/callback", params=params, headers=cookie_header(**EXCHANGE_COOKIES))
    client.cookies.clear()
    response = await client.get("/google/callback", params=params, headers=cookie_header(**EXCHANGE_COOKIES))

    assert response.headers["location"] == "/"
    assert session.query(User).count() == 1
    assert session.query(OAuthAccount).count() == 1


async def test_callback_state_mismatch(client, session):
    fake = use_google(FakeGoogleClient())

    response = await client.get(
        "/google/callback",
        params={"code": "auth-code", "state": "forged"},
        headers=cookie_header(**EXCHANGE_COOKIES)
    )

    assert response.headers["location"] == "/login"
    assert fake.exchanged == []
    assert session.query(User).count() == 0


async def test_callback_without_cookies(client):
    use_google(FakeGoogleClient())

    response = await client.get("/google/callback", params={"code": "auth-code", "state": "state-abc"})

    assert response.headers["location"] == "/login"


async def test_callback_exchange_failure(client, session):
    use_google(FakeGoogleClient(error=True))

    response = await client.get(
        "/google/callback",
        params={"code": "auth-code", "state": "state-abc"},
        headers=cookie_header(**EXCHANGE_COOKIES)
    )

    assert response.headers["location"] == "/login"
    assert "access_token" not in response.cookies
    assert session.query(User).count() == 0
