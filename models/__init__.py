from models.users import User
from models.sessions import UserSession
from models.verify_email_tokens import VerifyEmailToken
from models.oauth_accounts import OAuthAccount
from models.short_links import ShortLink

__all__ = ["User", "UserSession", "VerifyEmailToken", "OAuthAccount", "ShortLink"]
