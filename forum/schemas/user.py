# forum/schemas/user.py

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from forum.models.enums import UserRole


class UserBase(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    full_name: str = Field(..., min_length=1, max_length=100)


class UserCreate(UserBase):
    password: str = Field(..., min_length=6, max_length=128)
    role: UserRole = UserRole.USER
    is_verified: bool = False


class UserUpdate(BaseModel):
    """Partial update; only provided fields are merged"""

    username: Optional[str] = Field(None, min_length=3, max_length=50)
    email: Optional[EmailStr] = None
    full_name: Optional[str] = Field(None, min_length=1, max_length=100)
    password: Optional[str] = Field(None, min_length=6, max_length=128)
    profile_picture: Optional[str] = None


class AdminUserUpdate(UserUpdate):
    """Fields only an admin may change"""

    role: Optional[UserRole] = None
    is_verified: Optional[bool] = None
    rating: Optional[int] = None


class UserResponse(UserBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    role: UserRole
    is_verified: bool
    rating: int
    profile_picture: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class UserListResponse(BaseModel):
    users: List[UserResponse]
    total: int
    page: int
    size: int
    total_pages: int


class UserActivityResponse(BaseModel):
    """Ids of everything a user has authored"""

    post_ids: List[str] = []
    comment_ids: List[str] = []
    like_ids: List[str] = []
