from httpx import AsyncClient

TEST_PASSWORD = "TestPassword123!"

USER_URL = "/api/v1/user"


def use_cookies(client: AsyncClient, **cookies):
    """Replace the client's cookie jar with exactly the given cookies."""
    client.cookies.clear()
    for name, value in cookies.items():
        client.cookies.set(name, value)


async def login(client: AsyncClient, email: str, password: str = TEST_PASSWORD):
    return await client.post(f"{USER_URL}/login", json={"email": email, "password": password})


def set_cookie_headers(response) -> dict[str, str]:
    """Map cookie name to its raw Set-Cookie header."""
    headers = {}
    for header in response.headers.get_list("set-cookie"):
        name = header.split("=", 1)[0]
        headers[name] = header
    return headers
