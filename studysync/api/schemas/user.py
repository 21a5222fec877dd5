# studysync/api/schemas/user.py
from pydantic import Field, EmailStr
from typing import Optional
from uuid import UUID

from ...models.db_models import Role, User
from .common import ApiModel


class SignupRequest(ApiModel):
    full_name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=6)


class LoginRequest(ApiModel):
    email: str
    password: str


class UserResponse(ApiModel):
    """Public user fields; the password hash never leaves the server."""
    id: UUID = Field(..., alias="_id")
    full_name: str
    email: str
    role: Role

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(id=user.id, full_name=user.full_name, email=user.email, role=user.role)


class AuthResponse(ApiModel):
    success: bool = True
    token: str
    user: UserResponse


class MeResponse(ApiModel):
    success: bool = True
    user: UserResponse


# Internal representation of JWT data
class TokenData(ApiModel):
    user_id: Optional[UUID] = None
