import base64
import hashlib
import secrets
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode
import httpx
from jose import jwt, JWTError
from core.exceptions import OAuthError
from utils.logger import get_logger

logger = get_logger(__name__)


def generate_state() -> str:
    return secrets.token_urlsafe(32)


def generate_code_verifier() -> str:
    return secrets.token_urlsafe(48)


def code_challenge_s256(code_verifier: str) -> str:
    digest = hashlib.sha256(code_verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


@dataclass(frozen=True)
class GoogleProfile:
    sub: str
    email: str
    name: str
    picture: Optional[str] = None


class GoogleOAuthClient:
    """
    Authorization-code flow with PKCE against Google's OpenID endpoints.
    """

    AUTHORIZATION_URL = "https://accounts.google.com/o/oauth2/v2/auth"
    TOKEN_URL = "https://oauth2.googleapis.com/token"
    SCOPES = ("openid", "profile", "email")

    def __init__(self, client_id: str, client_secret: str, redirect_uri: str, timeout: float = 10.0):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def create_authorization_url(self, state: str, code_verifier: str) -> str:
        params = {
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": " ".join(self.SCOPES),
            "state": state,
            "code_challenge": code_challenge_s256(code_verifier),
            "code_challenge_method": "S256"
        }
        return f"{self.AUTHORIZATION_URL}?{urlencode(params)}"

    async def validate_authorization_code(self, code: str, code_verifier: str) -> GoogleProfile:
        """
        Exchanges the authorization code and reads the profile from the ID token.

        The ID token comes straight from Google's token endpoint over TLS, so
        its claims are read without re-verifying the signature.

        Raises:
            OAuthError: the exchange failed or the ID token is unusable
        """
        data = {
            "grant_type": "authorization_code",
            "code": code,
            "code_verifier": code_verifier,
            "redirect_uri": self.redirect_uri,
            "client_id": self.client_id,
            "client_secret": self.client_secret
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.TOKEN_URL, data=data)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(
                "Google code exchange failed",
                extra={"error_type": type(e).__name__}
            )
            raise OAuthError("Google code exchange failed")

        id_token = response.json().get("id_token")
        if not id_token:
            raise OAuthError("Google response has no id_token")

        try:
            claims = jwt.get_unverified_claims(id_token)
        except JWTError:
            raise OAuthError("Google id_token is malformed")

        if not claims.get("sub") or not claims.get("email"):
            raise OAuthError("Google id_token is missing sub or email")

        return GoogleProfile(
            sub=str(claims["sub"]),
            email=claims["email"].strip(),
            name=claims.get("name") or claims["email"].split("@")[0],
            picture=claims.get("picture")
        )
