from typing import Annotated
from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse
from starlette import status
from core.exceptions import ShortCodeTaken, ValidationError
from core.templating import render, redirect
from schemas.auth_schemas import parse_form
from schemas.shortener_schemas import ShortLinkRequest
from services.shortener_service import ShortenerService
from utils.deps import db_dependency, identity_dependency
from utils.flash import flash
from utils.logger import get_logger

logger = get_logger(__name__)


router = APIRouter(tags=["shortener"])


@router.get("/", response_class=HTMLResponse)
async def get_shortener_page(request: Request, db: db_dependency, user: identity_dependency):
    links = ShortenerService.list_links(db, user.id) if user else []
    return render(request, "index.html", {"links": links, "host": request.url.netloc})


@router.post("/")
async def post_shortener(request: Request, db: db_dependency, user: identity_dependency,
                         url: Annotated[str, Form()] = "",
                         short_code: Annotated[str, Form()] = ""):
    if not user:
        flash(request, "You must be logged in to create short links")
        return redirect("/login")

    try:
        body = parse_form(ShortLinkRequest, url=url, short_code=short_code)
    except ValidationError as e:
        flash(request, e.message)
        return redirect("/")

    try:
        ShortenerService.create_link(db, user.id, body.url, body.short_code)
    except ShortCodeTaken as e:
        flash(request, e.message)

    return redirect("/")


@router.get("/edit/{link_id}", response_class=HTMLResponse)
async def get_edit_page(request: Request, link_id: int, db: db_dependency, user: identity_dependency):
    if not user:
        return redirect("/login")

    link = ShortenerService.find_by_id(db, link_id)
    if not link or link.user_id != user.id:
        return render(request, "404.html", {"short_code": None}, status_code=status.HTTP_404_NOT_FOUND)

    return render(request, "edit_link.html", {"link": link})


@router.post("/edit/{link_id}")
async def post_edit(request: Request, link_id: int, db: db_dependency, user: identity_dependency,
                    url: Annotated[str, Form()] = "",
                    short_code: Annotated[str, Form()] = ""):
    if not user:
        flash(request, "You must be logged in to update short links")
        return redirect("/login")

    link = ShortenerService.find_by_id(db, link_id)
    if not link:
        flash(request, "Short link not found")
        return redirect("/")

    if link.user_id != user.id:
        flash(request, "You can only edit your own links")
        return redirect("/")

    try:
        body = parse_form(ShortLinkRequest, url=url, short_code=short_code)
    except ValidationError as e:
        flash(request, e.message)
        return redirect(f"/edit/{link_id}")

    try:
        ShortenerService.update_link(db, link, body.url, body.short_code or link.short_code)
    except ShortCodeTaken as e:
        flash(request, e.message)
        return redirect(f"/edit/{link_id}")

    return redirect("/")


@router.post("/delete/{link_id}")
async def delete_link(request: Request, link_id: int, db: db_dependency, user: identity_dependency):
    if not user:
        return redirect("/login")

    link = ShortenerService.find_by_id(db, link_id)
    if not link or link.user_id != user.id:
        flash(request, "Short link not found")
        return redirect("/")

    ShortenerService.delete_link(db, link)
    return redirect("/")


# Must stay the last route registered: it matches any single path segment
@router.get("/{short_code}")
async def redirect_short_code(request: Request, short_code: str, db: db_dependency):
    link = ShortenerService.find_by_short_code(db, short_code)
    if not link:
        return render(request, "404.html", {"short_code": short_code}, status_code=status.HTTP_404_NOT_FOUND)

    return redirect(link.url)
