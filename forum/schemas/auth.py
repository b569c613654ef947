# forum/schemas/auth.py
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from forum.schemas.user import UserResponse


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    full_name: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=6, max_length=128)


class LoginRequest(BaseModel):
    username_or_email: str = Field(..., description="Username or email")
    password: str


class AuthResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds
    user: UserResponse


class TokenStatusResponse(BaseModel):
    valid: bool
    user_id: Optional[str] = None
    role: Optional[str] = None
