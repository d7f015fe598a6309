from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from core.templating import render, redirect
from services.session_service import SessionService
from utils.cookies import clear_auth_cookies
from utils.deps import db_dependency, identity_dependency
from utils.flash import flash
from utils.logger import get_logger

logger = get_logger(__name__)


router = APIRouter(
    prefix="/sessions",
    tags=["sessions"]
)


@router.get("", response_class=HTMLResponse)
async def list_sessions(request: Request, db: db_dependency, user: identity_dependency):
    """
    Every device the user is currently signed in on.
    """
    if not user:
        return redirect("/login")

    return render(request, "sessions.html", {
        "sessions": SessionService.list_valid_for_user(db, user.id),
        "current_session_id": user.session_id
    })


@router.post("/revoke-others")
async def revoke_other_sessions(request: Request, db: db_dependency, user: identity_dependency):
    if not user:
        return redirect("/login")

    revoked = SessionService.revoke_all_user_sessions(db, user.id, except_session_id=user.session_id)
    flash(request, f"Signed out of {revoked} other session(s).", "success")
    return redirect("/sessions")


@router.post("/{session_id}/revoke")
async def revoke_session(request: Request, session_id: int, db: db_dependency, user: identity_dependency):
    if not user:
        return redirect("/login")

    session = SessionService.find_any_by_id(db, session_id)
    if session is None or session.user_id != user.id:
        logger.warning(
            "Attempt to revoke a session not owned by the user",
            extra={"user_id": user.id, "session_id": session_id}
        )
        flash(request, "Session not found")
        return redirect("/sessions")

    SessionService.revoke_session(db, session_id)

    if session_id == user.session_id:
        response = redirect("/login")
        clear_auth_cookies(response)
        return response

    flash(request, "Session signed out.", "success")
    return redirect("/sessions")
