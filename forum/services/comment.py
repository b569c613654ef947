# forum/services/comment.py
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import case, func
from sqlalchemy.orm import Session, selectinload

from forum.core.config import settings
from forum.core.decorator import db_exception
from forum.core.exceptions import (
    AuthorNotFound,
    CommentNotFound,
    MaxDepthExceeded,
    ParentCommentNotFound,
    PostNotFound,
    ValidationFailedError,
)
from forum.models.comment import Comment
from forum.models.enums import LikeType
from forum.models.like import Like
from forum.models.post import Post
from forum.models.user import User
from forum.schemas.comment import AuthorField, CommentResponse

logger = logging.getLogger(__name__)


class CommentService:
    """Threaded comments with per-read like/dislike/reply aggregates.

    Threads are an adjacency list (`parent_comment_id`). Replies are never
    delivered as a whole tree: callers list a post's root comments and then
    expand each one through `get_replies_by_comment_id`.
    """

    LOOKUP_FIELDS = ("id", "post_id", "author_id", "parent_comment_id")

    def __init__(self, db: Session, max_reply_depth: Optional[int] = None):
        self.db = db
        self.max_reply_depth = (
            max_reply_depth if max_reply_depth is not None else settings.max_reply_depth
        )

    # ==================== Create ====================

    @db_exception
    def create(
        self,
        content: str,
        author_id: str,
        post_id: str,
        parent_comment_id: Optional[str] = None,
        author_field: AuthorField = AuthorField.FULL_NAME,
    ) -> CommentResponse:
        """Create a comment, or a reply when `parent_comment_id` is given"""
        author = self.db.query(User).filter(User.id == author_id).first()
        if not author:
            raise AuthorNotFound()

        post = self.db.query(Post).filter(Post.id == post_id).first()
        if not post:
            raise PostNotFound()

        if parent_comment_id:
            parent = (
                self.db.query(Comment).filter(Comment.id == parent_comment_id).first()
            )
            if not parent or parent.post_id != post_id:
                raise ParentCommentNotFound()

            depth = self.get_reply_depth(parent.id)
            if depth >= self.max_reply_depth:
                logger.info(
                    f"Rejected reply to comment {parent.id}: depth {depth} "
                    f">= {self.max_reply_depth}"
                )
                raise MaxDepthExceeded(self.max_reply_depth)

        comment = Comment(
            content=content,
            author_id=author.id,
            post_id=post.id,
            parent_comment_id=parent_comment_id or None,
        )
        self.db.add(comment)
        self.db.commit()
        self.db.refresh(comment)

        logger.info(
            f"Comment {comment.id} created on post {post.id} by user {author.id}"
        )
        return self._to_response(comment, author_field)

    def get_reply_depth(self, comment_id: str) -> int:
        """Number of parent hops from a comment up to its root (root = 0).

        The walk stops once the depth passes the configured maximum, and a
        revisited id is reported as a broken thread instead of looping.
        """
        parent_id = self._get_parent_id(comment_id)
        if parent_id is False:
            raise CommentNotFound()

        depth = 0
        seen = {comment_id}
        while parent_id:
            if parent_id in seen:
                logger.error(f"Cycle detected in comment thread of {comment_id}")
                raise ValidationFailedError("Comment thread contains a cycle")
            seen.add(parent_id)
            depth += 1
            if depth > self.max_reply_depth:
                break
            parent_id = self._get_parent_id(parent_id)
            if parent_id is False:
                # Dangling parent link; treat the last reachable comment as root
                break
        return depth

    def _get_parent_id(self, comment_id: str):
        """Parent id of a comment, None for a root, False when it does not exist"""
        row = (
            self.db.query(Comment.parent_comment_id)
            .filter(Comment.id == comment_id)
            .first()
        )
        if row is None:
            return False
        return row[0]

    # ==================== Read ====================

    def find_one_by(
        self,
        field: str,
        value,
        author_field: AuthorField = AuthorField.ID,
    ) -> Optional[CommentResponse]:
        """Find a single comment by one of LOOKUP_FIELDS"""
        column = self._lookup_column(field)
        comment = (
            self.db.query(Comment)
            .options(selectinload(Comment.author))
            .filter(column == value)
            .order_by(Comment.created_at.asc(), Comment.id.asc())
            .first()
        )
        if not comment:
            return None
        return self._to_response(comment, author_field)

    def find_all_by(
        self,
        field: Optional[str] = None,
        value=None,
        author_field: AuthorField = AuthorField.FULL_NAME,
    ) -> List[CommentResponse]:
        """List comments, optionally filtered by one of LOOKUP_FIELDS (oldest first)"""
        query = self.db.query(Comment).options(selectinload(Comment.author))
        if field is not None:
            query = query.filter(self._lookup_column(field) == value)

        comments = query.order_by(Comment.created_at.asc(), Comment.id.asc()).all()
        return self._to_responses(comments, author_field)

    def get_comments_by_post_id(self, post_id: str) -> List[CommentResponse]:
        """Root comments of a post; replies are fetched per comment"""
        comments = (
            self.db.query(Comment)
            .options(selectinload(Comment.author))
            .filter(Comment.post_id == post_id, Comment.parent_comment_id.is_(None))
            .order_by(Comment.created_at.asc(), Comment.id.asc())
            .all()
        )
        return self._to_responses(comments, AuthorField.FULL_NAME)

    def get_replies_by_comment_id(self, comment_id: str) -> List[CommentResponse]:
        """Direct replies of a comment"""
        return self.find_all_by("parent_comment_id", comment_id)

    def get_author_id(self, comment_id: str) -> Optional[str]:
        row = self.db.query(Comment.author_id).filter(Comment.id == comment_id).first()
        return row[0] if row else None

    # ==================== Update / Delete ====================

    @db_exception
    def update(
        self,
        field: str,
        value,
        content: Optional[str] = None,
        author_field: AuthorField = AuthorField.ID,
    ) -> CommentResponse:
        """Update a comment's content (the only mutable attribute)"""
        comment = self.db.query(Comment).filter(self._lookup_column(field) == value).first()
        if not comment:
            raise CommentNotFound()

        if content is not None:
            comment.content = content

        self.db.commit()
        self.db.refresh(comment)

        logger.info(f"Comment {comment.id} updated")
        return self._to_response(comment, author_field)

    @db_exception
    def delete(self, field: str, value) -> None:
        """Delete a comment; replies and likes go with it (ON DELETE CASCADE)"""
        comment = self.db.query(Comment).filter(self._lookup_column(field) == value).first()
        if not comment:
            raise CommentNotFound()

        self.db.delete(comment)
        self.db.commit()
        logger.info(f"Comment {comment.id} deleted")

    # ==================== Projection ====================

    def _lookup_column(self, field: str):
        if field not in self.LOOKUP_FIELDS:
            raise ValidationFailedError(f"Cannot look up comments by '{field}'")
        return getattr(Comment, field)

    def _load_aggregates(
        self, comment_ids: Iterable[str]
    ) -> Tuple[Dict[str, Tuple[int, int]], Dict[str, List[str]]]:
        """Like/dislike counts and direct reply ids for a batch of comments"""
        comment_ids = list(comment_ids)
        reactions = {comment_id: (0, 0) for comment_id in comment_ids}
        replies: Dict[str, List[str]] = {comment_id: [] for comment_id in comment_ids}
        if not comment_ids:
            return reactions, replies

        rows = (
            self.db.query(
                Like.comment_id,
                func.sum(case((Like.type == LikeType.LIKE.value, 1), else_=0)),
                func.sum(case((Like.type == LikeType.DISLIKE.value, 1), else_=0)),
            )
            .filter(Like.comment_id.in_(comment_ids))
            .group_by(Like.comment_id)
            .all()
        )
        for comment_id, like_count, dislike_count in rows:
            reactions[comment_id] = (int(like_count or 0), int(dislike_count or 0))

        reply_rows = (
            self.db.query(Comment.id, Comment.parent_comment_id)
            .filter(Comment.parent_comment_id.in_(comment_ids))
            .order_by(Comment.created_at.asc(), Comment.id.asc())
            .all()
        )
        for reply_id, parent_id in reply_rows:
            replies[parent_id].append(reply_id)

        return reactions, replies

    def _to_responses(
        self, comments: List[Comment], author_field: AuthorField
    ) -> List[CommentResponse]:
        reactions, replies = self._load_aggregates(c.id for c in comments)
        return [
            self._build_response(c, author_field, reactions[c.id], replies[c.id])
            for c in comments
        ]

    def _to_response(self, comment: Comment, author_field: AuthorField) -> CommentResponse:
        return self._to_responses([comment], author_field)[0]

    @staticmethod
    def _build_response(
        comment: Comment,
        author_field: AuthorField,
        reaction_counts: Tuple[int, int],
        reply_ids: List[str],
    ) -> CommentResponse:
        if author_field == AuthorField.ID:
            author = comment.author_id or ""
        else:
            author = comment.author.full_name if comment.author else ""

        like_count, dislike_count = reaction_counts
        return CommentResponse(
            id=comment.id,
            content=comment.content,
            author=author,
            post_id=comment.post_id,
            parent_comment_id=comment.parent_comment_id,
            reply_ids=reply_ids,
            like_count=like_count,
            dislike_count=dislike_count,
            reply_count=len(reply_ids),
            created_at=comment.created_at,
            updated_at=comment.updated_at,
        )
