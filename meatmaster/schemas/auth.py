from pydantic import BaseModel, EmailStr, Field
from typing import Optional

from meatmaster.models.user import UserRole
from meatmaster.schemas.user import UserResponse


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)
    role: Optional[UserRole] = None


class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=100)
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    role: UserRole = UserRole.admin


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class Logout(BaseModel):
    message: str
