# forum/services/like.py
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from sqlalchemy import case, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from forum.core.decorator import db_exception
from forum.core.exceptions import (
    AuthorNotFound,
    CommentNotFound,
    ConflictError,
    InvalidLikeTarget,
    LikeNotFound,
    PostNotFound,
    ValidationFailedError,
)
from forum.models.comment import Comment
from forum.models.enums import LikeType
from forum.models.like import Like
from forum.models.post import Post
from forum.models.user import User

logger = logging.getLogger(__name__)

TARGET_POST = "post"
TARGET_COMMENT = "comment"


@dataclass(frozen=True)
class LikeTarget:
    """What a reaction points at: exactly one post or one comment"""

    kind: str
    id: str

    def __post_init__(self):
        if self.kind not in (TARGET_POST, TARGET_COMMENT):
            raise InvalidLikeTarget()
        if not self.id:
            raise InvalidLikeTarget("A like target needs an id")

    @classmethod
    def post(cls, post_id: str) -> "LikeTarget":
        return cls(TARGET_POST, post_id)

    @classmethod
    def comment(cls, comment_id: str) -> "LikeTarget":
        return cls(TARGET_COMMENT, comment_id)

    @property
    def column(self):
        return Like.post_id if self.kind == TARGET_POST else Like.comment_id

    def as_columns(self) -> Dict[str, Optional[str]]:
        return {
            "post_id": self.id if self.kind == TARGET_POST else None,
            "comment_id": self.id if self.kind == TARGET_COMMENT else None,
        }


class ToggleAction:
    CREATED = "created"
    UPDATED = "updated"
    REMOVED = "removed"


class LikeService:
    LOOKUP_FIELDS = ("id", "author_id", "post_id", "comment_id", "type")

    def __init__(self, db: Session):
        self.db = db

    # ==================== CRUD ====================

    @db_exception
    def create(self, author_id: str, target: LikeTarget, like_type: LikeType) -> Like:
        """Record a reaction; fails with a conflict if the user already reacted"""
        self._ensure_author(author_id)
        self._ensure_target(target)

        like = Like(author_id=author_id, type=LikeType(like_type).value, **target.as_columns())
        self.db.add(like)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError(f"User already reacted to this {target.kind}")
        self.db.refresh(like)

        logger.info(f"User {author_id} reacted '{like.type}' to {target.kind} {target.id}")
        return like

    def find_one_by(self, field: str, value) -> Optional[Like]:
        return self.db.query(Like).filter(self._lookup_column(field) == value).first()

    def find_all_by(self, field: Optional[str] = None, value=None) -> List[Like]:
        query = self.db.query(Like)
        if field is not None:
            query = query.filter(self._lookup_column(field) == value)
        return query.order_by(Like.created_at.asc(), Like.id.asc()).all()

    @db_exception
    def update_type(self, like_id: str, like_type: LikeType) -> Like:
        like = self.db.query(Like).filter(Like.id == like_id).first()
        if not like:
            raise LikeNotFound()

        like.type = LikeType(like_type).value
        self.db.commit()
        self.db.refresh(like)
        return like

    @db_exception
    def delete(self, like_id: str) -> None:
        like = self.db.query(Like).filter(Like.id == like_id).first()
        if not like:
            raise LikeNotFound()

        self.db.delete(like)
        self.db.commit()

    # ==================== Queries ====================

    def find_user_like_for_target(
        self,
        author_id: str,
        post_id: Optional[str] = None,
        comment_id: Optional[str] = None,
    ) -> Optional[Like]:
        """The user's reaction on a post or a comment (pass exactly one id)"""
        target = self._target_from_ids(post_id, comment_id)
        return (
            self.db.query(Like)
            .filter(Like.author_id == author_id, target.column == target.id)
            .first()
        )

    def count_likes_for_target(
        self, target_id: str, target_kind: str, like_type: LikeType
    ) -> int:
        target = LikeTarget(target_kind, target_id)
        return (
            self.db.query(func.count(Like.id))
            .filter(target.column == target.id, Like.type == LikeType(like_type).value)
            .scalar()
            or 0
        )

    def count_likes_dislikes_by_target(
        self, post_id: Optional[str] = None, comment_id: Optional[str] = None
    ) -> Dict[str, int]:
        target = self._target_from_ids(post_id, comment_id)
        likes, dislikes = (
            self.db.query(
                func.sum(case((Like.type == LikeType.LIKE.value, 1), else_=0)),
                func.sum(case((Like.type == LikeType.DISLIKE.value, 1), else_=0)),
            )
            .filter(target.column == target.id)
            .one()
        )
        return {"likes": int(likes or 0), "dislikes": int(dislikes or 0)}

    # ==================== Toggle ====================

    @db_exception
    def toggle(
        self, author_id: str, target: LikeTarget, like_type: LikeType
    ) -> Tuple[str, Optional[Like]]:
        """
        Flip a user's reaction on a target.

        No reaction yet creates one, the same type again removes it and the
        other type switches it. The existing row is locked for the duration
        of the transaction; two first reactions racing each other end with
        one of them hitting the unique constraint.

        Returns:
            (action, like) where like is None once removed
        """
        like_type = LikeType(like_type).value
        self._ensure_author(author_id)
        self._ensure_target(target)

        existing = (
            self.db.query(Like)
            .filter(Like.author_id == author_id, target.column == target.id)
            .with_for_update()
            .first()
        )

        if existing is None:
            like = Like(author_id=author_id, type=like_type, **target.as_columns())
            self.db.add(like)
            action = ToggleAction.CREATED
        elif existing.type == like_type:
            self.db.delete(existing)
            like = None
            action = ToggleAction.REMOVED
        else:
            existing.type = like_type
            like = existing
            action = ToggleAction.UPDATED

        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning(
                f"Concurrent reaction by user {author_id} on {target.kind} {target.id}"
            )
            raise ConflictError(f"User already reacted to this {target.kind}")

        if like is not None:
            self.db.refresh(like)

        logger.info(
            f"Reaction {action} by user {author_id} on {target.kind} {target.id} ({like_type})"
        )
        return action, like

    # ==================== Helpers ====================

    def _lookup_column(self, field: str):
        if field not in self.LOOKUP_FIELDS:
            raise ValidationFailedError(f"Cannot look up likes by '{field}'")
        return getattr(Like, field)

    @staticmethod
    def _target_from_ids(post_id: Optional[str], comment_id: Optional[str]) -> LikeTarget:
        if bool(post_id) == bool(comment_id):
            raise InvalidLikeTarget("Exactly one of post_id or comment_id is required")
        return LikeTarget.post(post_id) if post_id else LikeTarget.comment(comment_id)

    def _ensure_author(self, author_id: str) -> None:
        if not self.db.query(User.id).filter(User.id == author_id).first():
            raise AuthorNotFound()

    def _ensure_target(self, target: LikeTarget) -> None:
        if target.kind == TARGET_POST:
            if not self.db.query(Post.id).filter(Post.id == target.id).first():
                raise PostNotFound()
        elif not self.db.query(Comment.id).filter(Comment.id == target.id).first():
            raise CommentNotFound()
