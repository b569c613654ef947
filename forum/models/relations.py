# forum/models/relations.py

from sqlalchemy.orm import relationship

# Import all relevant models
from .category import Category
from .comment import Comment
from .like import Like
from .post import Post, post_categories
from .user import User


def setup_relationships():
    """
    Configure all SQLAlchemy relationships between models.

    Deletes cascade in the database (ON DELETE CASCADE); the ORM side uses
    passive_deletes so it does not load children just to delete them.
    """

    # 1. User to Posts (One-to-Many)
    User.posts = relationship(
        "Post",
        back_populates="author",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    Post.author = relationship("User", back_populates="posts")

    # 2. User to Comments (One-to-Many)
    User.comments = relationship(
        "Comment",
        back_populates="author",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    Comment.author = relationship("User", back_populates="comments")

    # 3. User to Likes (One-to-Many)
    User.likes = relationship(
        "Like",
        back_populates="author",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    Like.author = relationship("User", back_populates="likes")

    # 4. Post <-> Category (Many-to-Many)
    Post.categories = relationship(
        "Category",
        secondary=post_categories,
        back_populates="posts",
        order_by="Category.title",
    )
    Category.posts = relationship(
        "Post",
        secondary=post_categories,
        back_populates="categories",
        passive_deletes=True,
    )

    # 5. Post to Comments (One-to-Many)
    Post.comments = relationship(
        "Comment",
        back_populates="post",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Comment.created_at",
    )
    Comment.post = relationship("Post", back_populates="comments")

    # 6. Post to Likes (One-to-Many)
    Post.likes = relationship(
        "Like",
        back_populates="post",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    Like.post = relationship("Post", back_populates="likes")

    # 7. Comment to Likes (One-to-Many)
    Comment.likes = relationship(
        "Like",
        back_populates="comment",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    Like.comment = relationship("Comment", back_populates="likes")

    # 8. Comment self-referential (for replies)
    Comment.replies = relationship(
        "Comment",
        back_populates="parent",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Comment.created_at",
    )
    Comment.parent = relationship(
        "Comment",
        remote_side=[Comment.id],
        back_populates="replies",
    )
