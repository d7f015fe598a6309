from models.sessions import UserSession
from tests.conftest import TEST_PASSWORD, cookie_header


async def login(client, user):
    response = await client.post("/login", data={"email": user.email, "password": TEST_PASSWORD})
    return response.cookies["access_token"], response.cookies["refresh_token"]


async def test_logout_revokes_session_and_clears_cookies(client, session, verified_user):
    await login(client, verified_user)

    response = await client.get("/logout")

    assert response.status_code == 302
    assert response.headers["location"] == "/login"

    cleared = [h.lower() for h in response.headers.get_list("set-cookie")]
    assert any(h.startswith("access_token=") and "max-age=0" in h for h in cleared)
    assert any(h.startswith("refresh_token=") and "max-age=0" in h for h in cleared)

    session.expire_all()
    row = session.query(UserSession).one()
    assert row.valid is False

    assert (await client.get("/me")).text == "Not logged in"


async def test_logout_anonymous(client):
    response = await client.get("/logout")

    assert response.status_code == 302
    assert response.headers["location"] == "/login"


async def test_access_token_outlives_logout(client, verified_user):
    access, refresh = await login(client, verified_user)
    await client.get("/logout")
    client.cookies.clear()

    # Access tokens are self-contained: still good until they expire
    response = await client.get("/me", headers=cookie_header(access_token=access))
    assert "hey Ada Lovelace" in response.text


async def test_refresh_token_dead_after_logout(client, verified_user):
    access, refresh = await login(client, verified_user)
    await client.get("/logout")
    client.cookies.clear()

    response = await client.get("/me", headers=cookie_header(refresh_token=refresh))

    assert response.text == "Not logged in"
    cleared = [h.lower() for h in response.headers.get_list("set-cookie")]
    assert any(h.startswith("refresh_token=") and "max-age=0" in h for h in cleared)


async def test_logout_leaves_other_sessions(client, session, verified_user):
    _, laptop_refresh = await login(client, verified_user)
    client.cookies.clear()
    await login(client, verified_user)

    await client.get("/logout")
    client.cookies.clear()

    response = await client.get("/me", headers=cookie_header(refresh_token=laptop_refresh))
    assert "hey Ada Lovelace" in response.text
