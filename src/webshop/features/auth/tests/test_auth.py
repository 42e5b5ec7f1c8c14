from datetime import timedelta

import pytest
from fastapi import HTTPException, status

from webshop.features.auth.models import User
from webshop.features.auth.schemas import UserCreate
from webshop.features.auth.security import (
    authenticate_user, create_access_token, get_current_active_admin_user,
    get_current_active_user, get_current_user, get_password_hash, verify_password,
)
from webshop.features.auth.service import ADMIN_ROLE, CUSTOMER_ROLE, create_user


@pytest.mark.parametrize("password", ["jelszo123", "!@#$%^&*()_+", "ékezetes-jelszó", ""])
def test_password_hash_round_trip(password):
    hashed = get_password_hash(password)
    assert hashed != password
    assert verify_password(password, hashed) is True
    assert verify_password(password + "x", hashed) is False


def test_password_hash_is_salted():
    assert get_password_hash("jelszo123") != get_password_hash("jelszo123")


# --- Accounts ---

async def test_create_user_defaults_to_customer():
    user = await create_user(
        UserCreate(username="kovacs", email="kovacs@example.com", password="jelszo123", name="Kovács Anna"),
        get_password_hash("jelszo123"),
    )
    assert user.role == CUSTOMER_ROLE
    assert user.name == "Kovács Anna"
    assert len(user.public_id) == 27


@pytest.mark.parametrize(
    "username, email",
    [("adminfixture", "other@example.com"), ("someoneelse", "adminfixture@example.com")],
)
async def test_create_user_rejects_duplicates(username, email):
    with pytest.raises(HTTPException) as exc_info:
        await create_user(UserCreate(username=username, email=email, password="jelszo123"), "hash")
    assert exc_info.value.status_code == status.HTTP_400_BAD_REQUEST


async def test_authenticate_user(customer_user):
    assert (await authenticate_user("customerfixture", "customerpassword123")).id == customer_user.id
    assert await authenticate_user("customerfixture", "wrong") is None
    assert await authenticate_user("nobody", "customerpassword123") is None


async def test_current_user_from_token(customer_user):
    user = await get_current_user(create_access_token(customer_user.username))
    assert user.id == customer_user.id


async def test_expired_token_is_rejected(customer_user):
    token = create_access_token(customer_user.username, expires_delta=timedelta(minutes=-1))
    with pytest.raises(HTTPException) as exc_info:
        await get_current_user(token)
    assert exc_info.value.status_code == status.HTTP_401_UNAUTHORIZED


async def test_inactive_and_non_admin_users_are_stopped(customer_user, admin_user):
    with pytest.raises(HTTPException) as exc_info:
        await get_current_active_admin_user(customer_user)
    assert exc_info.value.status_code == status.HTTP_403_FORBIDDEN
    assert (await get_current_active_admin_user(admin_user)).role == ADMIN_ROLE

    customer_user.is_active = False
    with pytest.raises(HTTPException) as exc_info:
        await get_current_active_user(customer_user)
    assert exc_info.value.status_code == status.HTTP_400_BAD_REQUEST


# --- API ---

async def test_register_and_login(client):
    response = await client.post(
        "/api/v1/auth/register",
        json={"username": "nagyjanos", "email": "nagy.janos@example.com", "password": "jelszo123", "name": "Nagy János"},
    )
    assert response.status_code == status.HTTP_201_CREATED, response.text
    data = response.json()
    assert data["role"] == "customer"
    assert "password" not in data and "hashed_password" not in data

    response = await client.post("/api/v1/auth/token", data={"username": "nagyjanos", "password": "jelszo123"})
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["token_type"] == "bearer"


async def test_register_rejects_short_password(client):
    response = await client.post(
        "/api/v1/auth/register",
        json={"username": "rovid", "email": "rovid@example.com", "password": "123"},
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


async def test_login_with_wrong_password(client):
    response = await client.post("/api/v1/auth/token", data={"username": "adminfixture", "password": "nope"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


async def test_inactive_user_cannot_log_in(client, customer_user):
    await User.filter(id=customer_user.id).update(is_active=False)
    response = await client.post("/api/v1/auth/token", data={"username": "customerfixture", "password": "customerpassword123"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
