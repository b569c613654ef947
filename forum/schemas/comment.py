# forum/schemas/comment.py
import enum
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class AuthorField(str, enum.Enum):
    """Which author attribute a comment response carries in `author`"""

    ID = "id"
    FULL_NAME = "full_name"


class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)
    post_id: str
    parent_comment_id: Optional[str] = None  # For replies


class CommentUpdate(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)


class CommentResponse(BaseModel):
    id: str
    content: str
    author: str
    post_id: str
    parent_comment_id: Optional[str] = None
    reply_ids: List[str] = []
    like_count: int = 0
    dislike_count: int = 0
    reply_count: int = 0
    created_at: datetime
    updated_at: datetime
