import pytest
from httpx import AsyncClient

from src.app.services.credential_backends import CredentialBackends
from tests.utils.app import build_client, config_with
from tests.utils.cookies import set_cookies


async def signup(client: AsyncClient, email="user@example.com", password="SecurePass123!"):
    response = await client.post("/auth/signup", json={"email": email, "password": password})
    assert response.status_code == 201
    return response


@pytest.mark.asyncio
async def test_successful_login(client: AsyncClient):
    """Login sets an HttpOnly session cookie

    Given an account exists
    When I log in with the right password
    Then I get 200 with my user
    And a fresh session cookie with the configured attributes
    """
    signup_response = await signup(client)

    response = await client.post("/auth/login", json={
        "email": "User@Example.com",
        "password": "SecurePass123!",
    })

    assert response.status_code == 200
    data = response.json()
    assert data == {
        "ok": True,
        "user": signup_response.json()["user"],
    }

    session = set_cookies(response)["session"]
    assert session.value != set_cookies(signup_response)["session"].value
    assert session["httponly"] is True
    assert session["path"] == "/"
    assert session["max-age"] == "3600"
    assert session["samesite"].lower() == "lax"
    # Secure everywhere except development
    assert session["secure"] is True


@pytest.mark.asyncio
async def test_login_invalid_password(client: AsyncClient):
    await signup(client)

    response = await client.post("/auth/login", json={
        "email": "user@example.com",
        "password": "WrongPassword!",
    })

    assert response.status_code == 401
    data = response.json()
    assert data["ok"] is False
    assert data["error"]["code"] == "INVALID_CREDENTIALS"
    assert "set-cookie" not in response.headers


@pytest.mark.asyncio
async def test_login_unknown_email_looks_like_wrong_password(client: AsyncClient):
    await signup(client)

    wrong_password = await client.post("/auth/login", json={
        "email": "user@example.com",
        "password": "WrongPassword!",
    })
    unknown_email = await client.post("/auth/login", json={
        "email": "nobody@example.com",
        "password": "WrongPassword!",
    })

    assert unknown_email.status_code == wrong_password.status_code == 401
    assert unknown_email.json() == wrong_password.json()


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [
    {},
    {"email": "user@example.com"},
    {"password": "SecurePass123!"},
    {"email": "not-an-email", "password": "SecurePass123!"},
])
async def test_login_invalid_input(client: AsyncClient, payload):
    response = await client.post("/auth/login", json=payload)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_INPUT"


@pytest.mark.asyncio
async def test_login_admin_gets_admin_cookie(client: AsyncClient):
    await signup(client, email="admin@example.com")

    response = await client.post("/auth/login", json={
        "email": "admin@example.com",
        "password": "SecurePass123!",
    })

    cookies = set_cookies(response)
    assert cookies["is_admin"].value == "1"
    assert cookies["is_admin"]["httponly"] is True
    assert cookies["is_admin"]["max-age"] == "3600"


@pytest.mark.asyncio
async def test_login_rate_limited(client: AsyncClient):
    """Fourth attempt inside the window is refused, even with the right password"""
    await signup(client)

    for _ in range(3):
        response = await client.post("/auth/login", json={
            "email": "user@example.com",
            "password": "WrongPassword!",
        })
        assert response.status_code == 401

    response = await client.post("/auth/login", json={
        "email": "user@example.com",
        "password": "SecurePass123!",
    })

    assert response.status_code == 429
    assert response.json()["error"]["code"] == "RATE_LIMITED"
    assert 1 <= int(response.headers["Retry-After"]) <= 60


@pytest.mark.asyncio
async def test_login_rate_limit_is_per_origin_behind_trusted_proxy(primary_store, fallback_store, hasher):
    backends = CredentialBackends(primary=primary_store, fallback=fallback_store, hasher=hasher)
    trusting_local_proxy = config_with(TRUSTED_PROXIES=["127.0.0.1"])

    async with build_client(backends, config=trusting_local_proxy) as client:
        await signup(client)
        for _ in range(3):
            await client.post(
                "/auth/login",
                json={"email": "user@example.com", "password": "WrongPassword!"},
                headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"},
            )

        limited = await client.post(
            "/auth/login",
            json={"email": "user@example.com", "password": "SecurePass123!"},
            headers={"X-Forwarded-For": "203.0.113.7"},
        )
        other_origin = await client.post(
            "/auth/login",
            json={"email": "user@example.com", "password": "SecurePass123!"},
            headers={"X-Forwarded-For": "198.51.100.2"},
        )

    assert limited.status_code == 429
    assert other_origin.status_code == 200


@pytest.mark.asyncio
async def test_spoofed_forwarded_header_does_not_reset_limit(client: AsyncClient):
    """Proxy headers from an untrusted peer are ignored for rate limit keys"""
    await signup(client)

    statuses = []
    for i in range(5):
        response = await client.post(
            "/auth/login",
            json={"email": "user@example.com", "password": "WrongPassword!"},
            headers={"X-Forwarded-For": f"203.0.113.{i}", "X-Real-IP": f"198.51.100.{i}"},
        )
        statuses.append(response.status_code)

    assert statuses == [401, 401, 401, 429, 429]


@pytest.mark.asyncio
async def test_login_without_backends_is_server_error(unconfigured_client: AsyncClient):
    response = await unconfigured_client.post("/auth/login", json={
        "email": "user@example.com",
        "password": "SecurePass123!",
    })

    assert response.status_code == 500
    assert response.json()["ok"] is False
