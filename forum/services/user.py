# forum/services/user.py
import logging
import math
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from forum.core.database import LIKE_ESCAPE, contains_pattern
from forum.core.decorator import db_exception
from forum.core.exceptions import ConflictError, UserNotFound, ValidationFailedError
from forum.core.security import password_hasher
from forum.models.comment import Comment
from forum.models.like import Like
from forum.models.post import Post
from forum.models.user import User
from forum.schemas.user import UserCreate

logger = logging.getLogger(__name__)


class UserService:
    LOOKUP_FIELDS = ("id", "username", "email", "full_name")

    def __init__(self, db: Session):
        self.db = db

    @db_exception
    def create_user(self, user_in: UserCreate) -> User:
        """Create a user with a bcrypt-hashed password"""
        self._ensure_unique(user_in.username, user_in.email)

        user = User(
            username=user_in.username,
            email=user_in.email,
            full_name=user_in.full_name,
            password_hash=password_hasher.hash_password(user_in.password),
            role=user_in.role.value,
            is_verified=user_in.is_verified,
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)

        logger.info(f"User created: {user.username} ({user.id})")
        return user

    def find_one_by(self, field: str, value) -> Optional[User]:
        """
        Retrieves a single user by id, username, email or full name.
        """
        if field not in self.LOOKUP_FIELDS:
            raise ValidationFailedError(f"Cannot look up users by '{field}'")
        return self.db.query(User).filter(getattr(User, field) == value).first()

    def find_by_username_or_email(self, identifier: str) -> Optional[User]:
        return (
            self.db.query(User)
            .filter(or_(User.username == identifier, User.email == identifier))
            .first()
        )

    def get_all_users(
        self, page: int = 1, size: int = 20, search: Optional[str] = None
    ) -> dict:
        """
        Get paginated list of all users with optional search.
        """
        query = self.db.query(User)

        if search:
            search_filter = contains_pattern(search)
            query = query.filter(
                or_(
                    User.full_name.ilike(search_filter, escape=LIKE_ESCAPE),
                    User.username.ilike(search_filter, escape=LIKE_ESCAPE),
                    User.email.ilike(search_filter, escape=LIKE_ESCAPE),
                )
            )

        total = query.count()

        users = (
            query.order_by(User.created_at.desc(), User.id.asc())
            .offset((page - 1) * size)
            .limit(size)
            .all()
        )

        return {
            "users": users,
            "total": total,
            "page": page,
            "size": size,
            "total_pages": math.ceil(total / size) if size > 0 else 0,
        }

    @db_exception
    def update_user(self, user_id: str, update_data: dict) -> User:
        """
        Merge the provided fields into the user; a new password is re-hashed.
        """
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise UserNotFound()

        update_data = {k: v for k, v in update_data.items() if v is not None}
        self._ensure_unique(
            update_data.get("username"), update_data.get("email"), exclude_id=user.id
        )

        password = update_data.pop("password", None)
        if password:
            user.password_hash = password_hasher.hash_password(password)

        for field, value in update_data.items():
            setattr(user, field, getattr(value, "value", value))

        self.db.commit()
        self.db.refresh(user)

        logger.info(f"User {user.id} updated")
        return user

    @db_exception
    def delete_user(self, user_id: str) -> None:
        """
        Delete a user permanently, along with their posts, comments and likes.
        """
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise UserNotFound()

        self.db.delete(user)
        self.db.commit()
        logger.info(f"User {user_id} deleted")

    # ==================== Ownership ====================

    def find_post_ids_by_user(self, user_id: str) -> List[str]:
        rows = self.db.query(Post.id).filter(Post.author_id == user_id).all()
        return [row[0] for row in rows]

    def find_comment_ids_by_user(self, user_id: str) -> List[str]:
        rows = self.db.query(Comment.id).filter(Comment.author_id == user_id).all()
        return [row[0] for row in rows]

    def find_like_ids_by_user(self, user_id: str) -> List[str]:
        rows = self.db.query(Like.id).filter(Like.author_id == user_id).all()
        return [row[0] for row in rows]

    def _ensure_unique(
        self,
        username: Optional[str],
        email: Optional[str],
        exclude_id: Optional[str] = None,
    ) -> None:
        for column, value, label in (
            (User.username, username, "username"),
            (User.email, email, "email"),
        ):
            if not value:
                continue
            query = self.db.query(User.id).filter(column == value)
            if exclude_id:
                query = query.filter(User.id != exclude_id)
            if query.first():
                raise ConflictError(f"User with this {label} already exists")
