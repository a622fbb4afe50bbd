from starlette.requests import Request
from middleware.rate_limiter import limiter, get_user_id
from services.token_service import TokenService
from core.config import settings
from tests.helpers import login


def test_rate_limiter_disabled_in_testing():
    assert settings.ENV == "testing"
    assert limiter.enabled is False


async def test_can_make_multiple_requests_in_tests(client, test_user):
    # Login is normally limited to 5/minute
    for _ in range(7):
        response = await login(client, test_user.email)
        assert response.status_code == 200


async def test_health_and_request_id(client):
    response = await client.get("/health", headers={"X-Request-ID": "req-123"})

    assert response.status_code == 200
    assert response.json() == {"status": "Healthy"}
    assert response.headers["X-Request-ID"] == "req-123"


async def test_request_id_generated(client):
    response = await client.get("/")

    assert response.status_code == 200
    assert response.headers["X-Request-ID"]


def test_rate_limit_key_prefers_session_user():
    token = TokenService.create_access_token("user-42")
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": [(b"cookie", f"jwt={token}".encode())],
        "client": ("10.0.0.1", 1234),
    }
    assert get_user_id(Request(scope)) == "user:user-42"

    anonymous = dict(scope, headers=[])
    assert get_user_id(Request(anonymous)) == "10.0.0.1"
