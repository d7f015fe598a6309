from fastapi import APIRouter, Request
from fastapi.responses import RedirectResponse
from core.config import settings
from core.templating import redirect
from core.exceptions import DuplicateEmail, OAuthError
from services.auth_service import AuthService
from services.oauth_service import generate_state, generate_code_verifier
from services.user_service import UserService
from utils.cookies import OAUTH_STATE_COOKIE, OAUTH_VERIFIER_COOKIE, set_auth_cookies
from utils.deps import db_dependency, codec_dependency, identity_dependency, google_dependency
from utils.flash import flash
from utils.logger import get_logger
from utils.request_meta import client_ip, user_agent

logger = get_logger(__name__)

GOOGLE_PROVIDER = "google"
OAUTH_FAILED_MESSAGE = "Couldn't login with Google because of invalid login attempt. Please try again!"


router = APIRouter(tags=["oauth"])


def _clear_exchange_cookies(response: RedirectResponse) -> None:
    for name in (OAUTH_STATE_COOKIE, OAUTH_VERIFIER_COOKIE):
        response.delete_cookie(name, path="/", httponly=True, secure=settings.COOKIE_SECURE, samesite="lax")


@router.get("/google")
async def get_google_login_page(request: Request, google: google_dependency, user: identity_dependency):
    if user:
        return redirect("/")

    if not google.configured:
        flash(request, "Google login is not configured.")
        return redirect("/login")

    state = generate_state()
    code_verifier = generate_code_verifier()

    response = redirect(google.create_authorization_url(state, code_verifier))

    # Lax so the cookies survive Google's redirect back to us
    for name, value in ((OAUTH_STATE_COOKIE, state), (OAUTH_VERIFIER_COOKIE, code_verifier)):
        response.set_cookie(
            name,
            value,
            max_age=settings.OAUTH_EXCHANGE_EXPIRE_MINUTES * 60,
            httponly=True,
            secure=settings.COOKIE_SECURE,
            samesite="lax",
            path="/"
        )
    return response


@router.get("/google/callback")
async def get_google_login_callback(request: Request, db: db_dependency, codec: codec_dependency,
                                    google: google_dependency, code: str = "", state: str = ""):
    stored_state = request.cookies.get(OAUTH_STATE_COOKIE)
    code_verifier = request.cookies.get(OAUTH_VERIFIER_COOKIE)

    if not code or not state or not stored_state or not code_verifier or state != stored_state:
        logger.warning("Google callback rejected - state mismatch or missing parameters")
        flash(request, OAUTH_FAILED_MESSAGE)
        return redirect("/login")

    try:
        profile = await google.validate_authorization_code(code, code_verifier)
    except OAuthError as e:
        logger.warning("Google login failed", extra={"error": e.message})
        flash(request, OAUTH_FAILED_MESSAGE)
        return redirect("/login")

    # 1. already linked  2. same email, not linked yet  3. brand new user
    account = UserService.find_oauth_account(db, GOOGLE_PROVIDER, profile.sub)
    user = account.user if account else UserService.find_by_email(db, profile.email)

    if user and not account:
        try:
            UserService.link_oauth_account(db, user, GOOGLE_PROVIDER, profile.sub, avatar_url=profile.picture)
        except OAuthError as e:
            logger.warning("Google login failed", extra={"error": e.message})
            flash(request, OAUTH_FAILED_MESSAGE)
            return redirect("/login")

    if not user:
        try:
            user = UserService.create_oauth_user(
                db,
                name=profile.name,
                email=profile.email,
                provider=GOOGLE_PROVIDER,
                provider_account_id=profile.sub,
                avatar_url=profile.picture
            )
        except DuplicateEmail:
            flash(request, OAUTH_FAILED_MESSAGE)
            return redirect("/login")

    tokens = AuthService.start_session(db, codec, user, ip=client_ip(request), user_agent=user_agent(request))

    response = redirect("/")
    set_auth_cookies(response, tokens)
    _clear_exchange_cookies(response)
    return response
