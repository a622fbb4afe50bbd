from utils.hashing import verify_password
from tests.helpers import USER_URL, TEST_PASSWORD, login, use_cookies

CHANGE_URL = f"{USER_URL}/change-password"


async def _session_cookie(client, email):
    response = await login(client, email)
    use_cookies(client, jwt=response.cookies.get("jwt"))


async def test_change_password_success(client, test_user, session):
    await _session_cookie(client, test_user.email)

    response = await client.post(CHANGE_URL, json={
        "current_password": TEST_PASSWORD,
        "new_password": "NewSecurePass456"
    })

    assert response.status_code == 200
    assert response.json()["message"] == "Password changed successfully"
    assert "password" not in response.json()["data"]

    session.refresh(test_user)
    assert verify_password("NewSecurePass456", test_user.hashed_password)

    # New password works for login, old one does not
    assert (await login(client, test_user.email, "NewSecurePass456")).status_code == 200
    assert (await login(client, test_user.email, TEST_PASSWORD)).status_code == 401


async def test_change_password_wrong_current_password(client, test_user, session):
    await _session_cookie(client, test_user.email)

    response = await client.post(CHANGE_URL, json={
        "current_password": "WrongPassword123",
        "new_password": "NewSecurePass456"
    })

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid current password"

    session.refresh(test_user)
    assert verify_password(TEST_PASSWORD, test_user.hashed_password)


async def test_change_password_keeps_existing_session(client, test_user):
    await _session_cookie(client, test_user.email)

    await client.post(CHANGE_URL, json={
        "current_password": TEST_PASSWORD,
        "new_password": "NewSecurePass456"
    })

    response = await client.get(f"{USER_URL}/check-cookie")
    assert response.status_code == 200


async def test_change_password_weak_new_password(client, test_user):
    await _session_cookie(client, test_user.email)

    response = await client.post(CHANGE_URL, json={
        "current_password": TEST_PASSWORD,
        "new_password": "weak"
    })

    assert response.status_code == 400


async def test_change_password_unauthenticated(client):
    use_cookies(client)
    response = await client.post(CHANGE_URL, json={
        "current_password": TEST_PASSWORD,
        "new_password": "NewSecurePass456"
    })

    assert response.status_code == 401
    assert response.json()["detail"] == "Unauthorized - no session cookie found"
