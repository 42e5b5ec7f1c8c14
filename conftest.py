"""
Root conftest for the pytest test suite.

Every test runs against a fresh in-memory SQLite database. The FastAPI app is
driven in the test's own event loop through httpx's ASGITransport, so the
Tortoise connection opened here is the one the endpoints use and the
production lifespan never runs.

Key Fixtures:
- `initialize_test_db`: (autouse) Creates a fresh DB schema and the fixture users.
- `admin_user` / `customer_user`: The seeded accounts.
- `client`: A non-authenticated AsyncClient.
- `admin_client`: An AsyncClient authenticated as the seeded admin.
- `customer_client`: An AsyncClient authenticated as the seeded customer.
"""

from typing import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tortoise import Tortoise

from webshop.core.config import MODEL_MODULES
from webshop.features.auth.models import User
from webshop.features.auth.security import get_password_hash
from webshop.main import app

ADMIN_CREDENTIALS = {"username": "adminfixture", "password": "adminpassword123"}
CUSTOMER_CREDENTIALS = {"username": "customerfixture", "password": "customerpassword123"}


async def add_user(username: str, password: str, role: str, name: str) -> User:
    return await User.create(
        username=username,
        name=name,
        email=f"{username}@example.com",
        hashed_password=get_password_hash(password),
        role=role,
    )


@pytest_asyncio.fixture(scope="function", autouse=True)
async def initialize_test_db() -> AsyncGenerator[None, None]:
    """
    Initializes the database for each test function and tears it down afterwards.
    """
    test_db_config = {
        "connections": {"default": "sqlite://:memory:"},
        "apps": {
            "models": {
                "models": MODEL_MODULES,
                "default_connection": "default",
            }
        },
        "use_tz": True,
        "timezone": "UTC",
    }
    await Tortoise.init(config=test_db_config)
    await Tortoise.generate_schemas()
    await add_user(**ADMIN_CREDENTIALS, role="admin", name="Admin Fixture")
    await add_user(**CUSTOMER_CREDENTIALS, role="customer", name="Customer Fixture")

    yield

    await Tortoise.close_connections()


@pytest_asyncio.fixture
async def admin_user() -> User:
    return await User.get(username=ADMIN_CREDENTIALS["username"])


@pytest_asyncio.fixture
async def customer_user() -> User:
    return await User.get(username=CUSTOMER_CREDENTIALS["username"])


async def _authenticated_client(credentials: dict) -> AsyncClient:
    ac = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
    response = await ac.post("/api/v1/auth/token", data=credentials)
    if response.status_code != 200:
        await ac.aclose()
        raise Exception(f"Authentication failed for {credentials['username']}")
    ac.headers["Authorization"] = f"Bearer {response.json()['access_token']}"
    return ac


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def admin_client() -> AsyncGenerator[AsyncClient, None]:
    ac = await _authenticated_client(ADMIN_CREDENTIALS)
    try:
        yield ac
    finally:
        await ac.aclose()


@pytest_asyncio.fixture
async def customer_client() -> AsyncGenerator[AsyncClient, None]:
    ac = await _authenticated_client(CUSTOMER_CREDENTIALS)
    try:
        yield ac
    finally:
        await ac.aclose()
