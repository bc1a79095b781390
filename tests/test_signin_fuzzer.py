import random
import string

import pytest
from httpx import AsyncClient

# FUZZER: garbage, injections and oversized fields against the sign-in endpoints.
# Every response must be a clean 401 / 422, never a 500.


def generate_garbage(length=100):
    return "".join(random.choices(string.ascii_letters + string.digits + "!@#$%^&*()", k=length))


def generate_sql_injection():
    payloads = ["' OR '1'='1", "'; DROP TABLE users--", "admin'--", "' UNION SELECT 1,2,3--"]
    return random.choice(payloads)


def generate_xss():
    payloads = ["<script>alert(1)</script>", "<img src=x onerror=alert(1)>", "javascript:alert(1)"]
    return random.choice(payloads)


@pytest.mark.asyncio
async def test_interpreter_signin_fuzz(async_client: AsyncClient, make_interpreter):
    await make_interpreter(login_token="abc123")
    for i in range(60):
        email = generate_garbage(random.randint(1, 60)) + "@test.com"
        secret = generate_garbage(random.randint(1, 200))
        if i % 10 == 0:
            email = generate_sql_injection() + "@test.com"
        if i % 11 == 0:
            secret = generate_xss()
        field = random.choice(["password", "token"])

        resp = await async_client.post(
            "/api/v1/auth/interpreter-signin", json={"email": email, field: secret}
        )
        assert resp.status_code in [401, 422], f"Sign-in crashed on {email!r} / {secret!r}"


@pytest.mark.asyncio
async def test_known_account_fuzz(async_client: AsyncClient, make_interpreter):
    """Random secrets against a real account never authenticate."""
    await make_interpreter(login_token="abc123")
    for _ in range(30):
        resp = await async_client.post(
            "/api/v1/auth/interpreter-signin",
            json={"email": "interp@test.com", "token": generate_garbage(random.randint(1, 64))},
        )
        assert resp.status_code == 401


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {},
        {"email": None},
        {"email": 12345, "password": "x"},
        {"email": "a@b.c", "password": ["list"]},
        {"email": "a@b.c", "token": "x" * 10_000},
    ],
)
async def test_malformed_bodies(async_client: AsyncClient, body):
    resp = await async_client.post("/api/v1/auth/interpreter-signin", json=body)
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_health(async_client: AsyncClient):
    resp = await async_client.get("/api/v1/health")
    assert resp.status_code == 200
    assert resp.json() == {"db": True}
