# forum/models/post.py
import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String, Table, Text
from sqlalchemy.sql import func

from forum.core.database import Base
from forum.models.enums import PostStatus

# Many-to-many: posts <-> categories
post_categories = Table(
    "post_categories",
    Base.metadata,
    Column(
        "post_id",
        String(36),
        ForeignKey("posts.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "category_id",
        String(36),
        ForeignKey("categories.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Post(Base):
    __tablename__ = "posts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Foreign Keys
    author_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Content
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)

    status = Column(
        String(20), default=PostStatus.ACTIVE.value, nullable=False, index=True
    )

    # Timestamps
    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False, index=True
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self):
        return f"<Post(id={self.id}, author_id={self.author_id})>"
