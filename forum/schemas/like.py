# forum/schemas/like.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from forum.models.enums import LikeType


class ReactionCreate(BaseModel):
    type: LikeType


class LikeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    author_id: str
    post_id: Optional[str] = None
    comment_id: Optional[str] = None
    type: LikeType
    created_at: datetime
    updated_at: datetime


class UserReactionResponse(BaseModel):
    user_reaction: Optional[LikeType] = None


class LikeCountsResponse(BaseModel):
    likes: int
    dislikes: int
