from typing import Annotated
from fastapi import APIRouter, BackgroundTasks, Form, Request
from fastapi.responses import HTMLResponse
from core.exceptions import InvalidCredentials, InvalidVerificationToken, UserExists, ValidationError
from core.templating import render, redirect
from middleware.rate_limiter import limiter
from schemas.auth_schemas import LoginUserRequest, RegisterUserRequest, VerifyEmailQuery, parse_form
from services.auth_service import AuthService
from services.shortener_service import ShortenerService
from services.user_service import UserService
from services.verification_service import VerificationService
from utils.cookies import set_auth_cookies, clear_auth_cookies
from utils.deps import db_dependency, codec_dependency, identity_dependency
from utils.flash import flash
from utils.logger import get_logger, sanitize_log_data
from utils.request_meta import client_ip, user_agent

logger = get_logger(__name__)


router = APIRouter(tags=["auth"])


@router.get("/register", response_class=HTMLResponse)
async def get_register_page(request: Request, user: identity_dependency):
    if user:
        return redirect("/")
    return render(request, "auth/register.html")


@router.post("/register")
@limiter.limit("3/minute")
async def post_register(request: Request, db: db_dependency, codec: codec_dependency,
                        bg: BackgroundTasks, user: identity_dependency,
                        name: Annotated[str, Form()] = "",
                        email: Annotated[str, Form()] = "",
                        password: Annotated[str, Form()] = ""):
    if user:
        return redirect("/")

    try:
        body = parse_form(RegisterUserRequest, name=name, email=email, password=password)
    except ValidationError as e:
        logger.info(
            "Registration form rejected",
            extra=sanitize_log_data({"email": email, "password": password})
        )
        flash(request, e.message)
        return redirect("/register")

    try:
        new_user = AuthService.register(db, body)
    except UserExists as e:
        flash(request, e.message)
        return redirect("/register")

    # Registration logs the user straight in
    tokens = AuthService.start_session(db, codec, new_user, ip=client_ip(request), user_agent=user_agent(request))
    VerificationService.send_new_verify_email_link(db, new_user, bg)

    flash(request, "Verification code sent to your email. Please check your inbox.", "success")

    response = redirect("/")
    set_auth_cookies(response, tokens)
    return response


@router.get("/login", response_class=HTMLResponse)
async def get_login_page(request: Request, user: identity_dependency):
    if user:
        return redirect("/")
    return render(request, "auth/login.html")


@router.post("/login")
@limiter.limit("5/minute")
async def post_login(request: Request, db: db_dependency, codec: codec_dependency,
                     user: identity_dependency,
                     email: Annotated[str, Form()] = "",
                     password: Annotated[str, Form()] = ""):
    if user:
        return redirect("/")

    try:
        body = parse_form(LoginUserRequest, email=email, password=password)
    except ValidationError as e:
        flash(request, e.message)
        return redirect("/login")

    try:
        account = AuthService.authenticate_user(db, body.email, body.password)
    except InvalidCredentials as e:
        flash(request, e.message)
        return redirect("/login")

    tokens = AuthService.start_session(db, codec, account, ip=client_ip(request), user_agent=user_agent(request))

    response = redirect("/")
    set_auth_cookies(response, tokens)
    return response


@router.get("/logout")
async def logout(request: Request, db: db_dependency, user: identity_dependency):
    if not user:
        return redirect("/login")

    AuthService.logout(db, user)

    response = redirect("/login")
    clear_auth_cookies(response)
    return response


@router.get("/me", response_class=HTMLResponse)
async def get_me(request: Request, user: identity_dependency):
    if not user:
        return HTMLResponse("Not logged in")
    return render(request, "auth/me.html")


@router.get("/profile", response_class=HTMLResponse)
async def get_profile_page(request: Request, db: db_dependency, user: identity_dependency):
    if not user:
        return redirect("/login")

    account = UserService.find_by_id(db, user.id)
    if not account:
        return redirect("/login")

    return render(request, "auth/profile.html", {
        "account": account,
        "links": ShortenerService.list_links(db, account.id)
    })


@router.get("/verify-email", response_class=HTMLResponse)
async def get_verify_email_page(request: Request, db: db_dependency, user: identity_dependency):
    if not user:
        return redirect("/login")

    account = UserService.find_by_id(db, user.id)
    if not account:
        return redirect("/login")
    if account.is_email_verified:
        return redirect("/")

    return render(request, "auth/verify_email.html", {"email": account.email})


@router.post("/resend-verification-link")
@limiter.limit("3/minute")
async def resend_verification_link(request: Request, db: db_dependency, bg: BackgroundTasks,
                                   user: identity_dependency):
    if not user:
        return redirect("/")

    account = UserService.find_by_id(db, user.id)
    if not account or account.is_email_verified:
        return redirect("/")

    VerificationService.send_new_verify_email_link(db, account, bg)
    flash(request, "Verification link sent to your email. Please check your inbox.", "success")

    return redirect("/verify-email")


@router.get("/verify-email-token")
async def verify_email_token(request: Request, db: db_dependency, token: str = "", email: str = ""):
    try:
        query = parse_form(VerifyEmailQuery, token=token, email=email)
    except ValidationError:
        flash(request, "Verification link invalid or expired. Please request a new code.")
        return redirect("/verify-email")

    try:
        VerificationService.verify_email(db, query.token, query.email)
    except InvalidVerificationToken as e:
        flash(request, e.message)
        return redirect("/verify-email")

    flash(request, "Email verified successfully.", "success")
    return redirect("/profile")
