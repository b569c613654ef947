# forum/models/like.py
import uuid

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    String,
    UniqueConstraint,
)
from sqlalchemy.sql import func

from forum.core.database import Base
from forum.models.enums import LikeType


class Like(Base):
    __tablename__ = "likes"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Foreign Keys
    author_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Exactly one of post_id / comment_id is set
    post_id = Column(
        String(36),
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    comment_id = Column(
        String(36),
        ForeignKey("comments.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    type = Column(String(20), default=LikeType.LIKE.value, nullable=False)

    # Timestamps
    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    # One reaction per user per target (the type can change)
    __table_args__ = (
        UniqueConstraint("author_id", "post_id", name="unique_post_like"),
        UniqueConstraint("author_id", "comment_id", name="unique_comment_like"),
        CheckConstraint(
            "(post_id IS NULL) <> (comment_id IS NULL)", name="like_single_target"
        ),
    )

    @property
    def target_kind(self) -> str:
        return "post" if self.post_id is not None else "comment"

    @property
    def target_id(self) -> str:
        return self.post_id if self.post_id is not None else self.comment_id

    def __repr__(self):
        return f"<Like(author_id={self.author_id}, {self.target_kind}={self.target_id}, type='{self.type}')>"
