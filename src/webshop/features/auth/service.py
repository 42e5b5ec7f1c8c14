"""Account logic: lookups, registration and admin provisioning."""
import logging
from typing import Optional

from fastapi import HTTPException, status

from . import models
from .schemas import UserCreate

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"
CUSTOMER_ROLE = "customer"


async def get_user_by_username(username: str) -> Optional[models.User]:
    return await models.User.get_or_none(username=username)


async def get_user_by_email(email: str) -> Optional[models.User]:
    return await models.User.get_or_none(email=email)


async def create_user(user_in: UserCreate, hashed_password: str, role: str = CUSTOMER_ROLE) -> models.User:
    """Creates a user after checking that the username and email are free.

    Args:
        user_in: The registration data.
        hashed_password: bcrypt hash of ``user_in.password``.
        role: customer (self registration) or admin (provisioned from the CLI).

    Returns:
        The newly created User object.

    Raises:
        HTTPException: 400 when the username or email is already taken.
    """
    if await get_user_by_username(user_in.username):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username already registered",
        )
    if await get_user_by_email(user_in.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )
    user = await models.User.create(
        **user_in.model_dump(exclude={"password"}),
        hashed_password=hashed_password,
        role=role,
    )
    logger.info(f"Created {role} account {user.username}")
    return user
