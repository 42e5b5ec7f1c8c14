"""Request and response schemas for accounts and tokens."""

from pydantic import BaseModel, ConfigDict, Field, EmailStr
from typing import Optional
import datetime


class UserBase(BaseModel):
    username: str = Field(..., min_length=3, max_length=100, description="Username")
    email: EmailStr = Field(..., description="User email address")
    name: Optional[str] = Field(None, max_length=255, description="Display name, shown in reports")


class UserCreate(UserBase):
    password: str = Field(..., min_length=8, description="User password")


class UserResponse(UserBase):
    public_id: str = Field(
        ..., description="Public unique identifier for the user (KSUID)"
    )
    role: str = Field(..., description="customer or admin")
    is_active: bool
    created_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)


class Token(BaseModel):
    access_token: str
    token_type: str
