from models.users import User
from tests.helpers import USER_URL


async def test_signup_success(client, session):
    response = await client.post(f"{USER_URL}/signup", json={
        "name": "Alice",
        "email": "a@x.com",
        "password": "password123"
    })

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "success"
    assert body["data"]["email"] == "a@x.com"
    assert body["data"]["name"] == "Alice"
    assert body["data"]["id"]

    # Digest never leaves the server
    assert "password" not in body["data"]
    assert "hashed_password" not in body["data"]

    user = session.query(User).filter(User.email == "a@x.com").first()
    assert user is not None
    assert user.hashed_password != "password123"


async def test_signup_sets_no_cookies(client):
    response = await client.post(f"{USER_URL}/signup", json={
        "name": "Alice",
        "email": "a@x.com",
        "password": "password123"
    })

    assert response.status_code == 201
    assert response.headers.get_list("set-cookie") == []


async def test_signup_duplicate(client, session):
    payload = {"name": "Alice", "email": "a@x.com", "password": "password123"}
    await client.post(f"{USER_URL}/signup", json=payload)
    response = await client.post(f"{USER_URL}/signup", json=payload)

    assert response.status_code == 409
    assert response.json()["detail"] == "User already exists"

    users = session.query(User).filter(User.email == "a@x.com").all()
    assert len(users) == 1


async def test_signup_duplicate_is_case_insensitive(client):
    await client.post(f"{USER_URL}/signup", json={"name": "Alice", "email": "a@x.com", "password": "password123"})
    response = await client.post(f"{USER_URL}/signup", json={"name": "Alice", "email": "A@X.COM", "password": "password123"})

    assert response.status_code == 409


async def test_signup_short_password(client):
    response = await client.post(f"{USER_URL}/signup", json={
        "name": "Alice",
        "email": "a@x.com",
        "password": "short"
    })

    assert response.status_code == 400
    fields = [error["loc"][-1] for error in response.json()["detail"]]
    assert "password" in fields


async def test_signup_invalid_email_and_blank_name(client):
    response = await client.post(f"{USER_URL}/signup", json={
        "name": "   ",
        "email": "not-an-email",
        "password": "password123"
    })

    assert response.status_code == 400
    fields = {error["loc"][-1] for error in response.json()["detail"]}
    assert {"name", "email"} <= fields
