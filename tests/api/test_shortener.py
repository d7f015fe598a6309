from models.short_links import ShortLink
from services.shortener_service import ShortenerService


async def test_home_anonymous(client):
    response = await client.get("/")

    assert response.status_code == 200
    assert 'href="/login"' in response.text


async def test_create_requires_login(client, session):
    response = await client.post("/", data={"url": "https://example.com"})

    assert response.headers["location"] == "/login"
    assert session.query(ShortLink).count() == 0


async def test_create_with_custom_code(logged_in_client, session, verified_user):
    response = await logged_in_client.post("/", data={"url": "https://example.com/docs", "short_code": "docs"})

    assert response.headers["location"] == "/"
    link = session.query(ShortLink).one()
    assert link.short_code == "docs"
    assert link.user_id == verified_user.id

    page = await logged_in_client.get("/")
    assert "test/docs" in page.text


async def test_create_generates_code(logged_in_client, session):
    await logged_in_client.post("/", data={"url": "https://example.com", "short_code": ""})

    link = session.query(ShortLink).one()
    assert len(link.short_code) == 8


async def test_create_invalid_url(logged_in_client, session):
    await logged_in_client.post("/", data={"url": "not a url"})

    assert session.query(ShortLink).count() == 0
    page = await logged_in_client.get("/")
    assert "Please enter a valid URL" in page.text


async def test_duplicate_short_code(logged_in_client, session, other_user):
    ShortenerService.create_link(session, other_user.id, "https://example.org", "taken")

    await logged_in_client.post("/", data={"url": "https://example.com", "short_code": "taken"})

    assert session.query(ShortLink).count() == 1
    page = await logged_in_client.get("/")
    assert "URL with that shortcode already exists" in page.text


async def test_redirect(client, session, verified_user):
    ShortenerService.create_link(session, verified_user.id, "https://example.com/target", "go")

    response = await client.get("/go")

    assert response.status_code == 302
    assert response.headers["location"] == "https://example.com/target"


async def test_unknown_code(client):
    response = await client.get("/nope")

    assert response.status_code == 404
    assert "nope" in response.text


async def test_edit_link(logged_in_client, session, verified_user):
    link = ShortenerService.create_link(session, verified_user.id, "https://example.com", "old")

    page = await logged_in_client.get(f"/edit/{link.id}")
    assert page.status_code == 200

    response = await logged_in_client.post(f"/edit/{link.id}", data={"url": "https://example.org", "short_code": "new"})

    assert response.headers["location"] == "/"
    session.expire_all()
    link = session.query(ShortLink).one()
    assert link.url == "https://example.org"
    assert link.short_code == "new"


async def test_cannot_edit_others_link(logged_in_client, session, other_user):
    link = ShortenerService.create_link(session, other_user.id, "https://example.org", "theirs")

    page = await logged_in_client.get(f"/edit/{link.id}")
    assert page.status_code == 404

    await logged_in_client.post(f"/edit/{link.id}", data={"url": "https://evil.example", "short_code": "theirs"})

    session.expire_all()
    assert session.query(ShortLink).one().url == "https://example.org"


async def test_delete_link(logged_in_client, session, verified_user):
    link = ShortenerService.create_link(session, verified_user.id, "https://example.com", "bye")

    response = await logged_in_client.post(f"/delete/{link.id}")

    assert response.headers["location"] == "/"
    assert session.query(ShortLink).count() == 0


async def test_cannot_delete_others_link(logged_in_client, session, other_user):
    link = ShortenerService.create_link(session, other_user.id, "https://example.org", "keep")

    await logged_in_client.post(f"/delete/{link.id}")

    assert session.query(ShortLink).count() == 1
