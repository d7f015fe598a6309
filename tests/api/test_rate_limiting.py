from middleware.rate_limiter import limiter
from core.config import settings
from tests.conftest import TEST_PASSWORD


def test_rate_limiter_disabled_in_testing():
    """Verify rate limiter is disabled during tests."""
    assert settings.ENV == "testing"
    assert limiter.enabled is False


async def test_can_make_multiple_requests_in_tests(client, verified_user):
    """Verify rate limiting doesn't interfere with tests."""
    # Normally limited to 5/minute
    for _ in range(10):
        client.cookies.clear()
        response = await client.post("/login", data={
            "email": verified_user.email,
            "password": TEST_PASSWORD
        })
        assert response.headers["location"] == "/"
