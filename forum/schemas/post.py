# forum/schemas/post.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from forum.core.config import settings
from forum.models.enums import PostStatus


class PostBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)


class PostCreate(PostBase):
    category_ids: List[str] = Field(..., min_length=1)


class PostUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, min_length=1)
    status: Optional[PostStatus] = None
    category_ids: Optional[List[str]] = Field(None, min_length=1)


class PostResponse(BaseModel):
    id: str
    title: str
    content: str
    status: PostStatus
    author: str  # Author's full name
    author_id: Optional[str] = None
    category_titles: List[str] = []
    likes_count: int = 0
    dislikes_count: int = 0
    comments_count: int = 0
    created_at: datetime
    updated_at: datetime


class PostListResponse(BaseModel):
    posts: List[PostResponse]
    total: int
    page: int
    limit: int
    total_pages: int


class PostListQuery(BaseModel):
    """Listing options accepted by GET /posts"""

    page: int = Field(1, ge=1)
    limit: int = Field(settings.default_page_size, ge=1, le=settings.max_page_size)
    search_term: Optional[str] = None
    sort_option: Optional[str] = None
    sort_order: str = "DESC"
    category: Optional[str] = None

    @field_validator("sort_order", mode="before")
    @classmethod
    def normalize_sort_order(cls, value):
        value = (value or "DESC").upper()
        if value not in ("ASC", "DESC"):
            raise ValueError("sort_order must be ASC or DESC")
        return value
