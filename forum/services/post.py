# forum/services/post.py
import logging
import math
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, selectinload

from forum.core.config import settings
from forum.core.database import LIKE_ESCAPE, contains_pattern
from forum.core.decorator import db_exception
from forum.core.exceptions import (
    AuthorNotFound,
    PostNotFound,
    SomeCategoriesNotFound,
    UserNotFound,
    ValidationFailedError,
)
from forum.models.category import Category
from forum.models.comment import Comment
from forum.models.enums import LikeType, PostStatus
from forum.models.like import Like
from forum.models.post import Post
from forum.models.user import User
from forum.schemas.post import PostResponse, PostUpdate

logger = logging.getLogger(__name__)

# Counts attached to every post read: (likes, dislikes, comments)
EMPTY_COUNTS = (0, 0, 0)


class PostService:
    """Posts with derived like/dislike/comment counts and paginated listing"""

    LOOKUP_FIELDS = ("id", "author_id", "title", "status")
    SORT_OPTIONS = ("likes", "dislikes", "comments", "date")

    def __init__(self, db: Session):
        self.db = db

    # ==================== Create ====================

    @db_exception
    def create(
        self, title: str, content: str, author_id: str, category_ids: List[str]
    ) -> PostResponse:
        """Create an active post; every category id must resolve"""
        author = self.db.query(User).filter(User.id == author_id).first()
        if not author:
            raise AuthorNotFound()

        categories = self._resolve_categories(category_ids)

        post = Post(
            title=title,
            content=content,
            author_id=author.id,
            status=PostStatus.ACTIVE.value,
        )
        post.categories = categories
        self.db.add(post)
        self.db.commit()
        self.db.refresh(post)

        logger.info(f"Post {post.id} created by user {author.id}")
        return self._to_response(post, EMPTY_COUNTS)

    def _resolve_categories(self, category_ids: List[str]) -> List[Category]:
        if not category_ids:
            raise ValidationFailedError("At least one category is required")

        if len(set(category_ids)) != len(category_ids):
            raise ValidationFailedError("Duplicate category ids")

        categories = (
            self.db.query(Category).filter(Category.id.in_(category_ids)).all()
        )
        if len(categories) != len(category_ids):
            missing = set(category_ids) - {category.id for category in categories}
            logger.info(f"Unknown category ids: {sorted(missing)}")
            raise SomeCategoriesNotFound(missing)

        return categories

    # ==================== Read ====================

    def find_one_by(self, field: str, value) -> Optional[PostResponse]:
        """Find a single post by one of LOOKUP_FIELDS"""
        post = (
            self._hydrated_query()
            .filter(self._lookup_column(field) == value)
            .order_by(Post.created_at.desc(), Post.id.desc())
            .first()
        )
        if not post:
            return None
        return self._to_response(post, self._load_counts([post.id])[post.id])

    def find_all_by(self, field: Optional[str] = None, value=None) -> List[PostResponse]:
        """All posts (any status), optionally filtered, newest first"""
        query = self._hydrated_query()
        if field is not None:
            query = query.filter(self._lookup_column(field) == value)

        posts = query.order_by(Post.created_at.desc(), Post.id.desc()).all()
        return self._to_responses(posts)

    def get_all_posts_by_user(self, user_id: str) -> List[PostResponse]:
        """Active posts of one author, newest first"""
        if not self.db.query(User.id).filter(User.id == user_id).first():
            raise UserNotFound()

        posts = (
            self._hydrated_query()
            .filter(Post.author_id == user_id, Post.status == PostStatus.ACTIVE.value)
            .order_by(Post.created_at.desc(), Post.id.desc())
            .all()
        )
        return self._to_responses(posts)

    def get_comment_count_by_post(self, post_id: str) -> int:
        """Number of comments on a post, replies included"""
        return (
            self.db.query(func.count(Comment.id))
            .filter(Comment.post_id == post_id)
            .scalar()
            or 0
        )

    def get_author_id(self, post_id: str) -> Optional[str]:
        row = self.db.query(Post.author_id).filter(Post.id == post_id).first()
        return row[0] if row else None

    def get_paginated_posts(
        self,
        page: int = 1,
        limit: int = 10,
        search_term: Optional[str] = None,
        sort_option: Optional[str] = None,
        sort_order: str = "DESC",
        category: Optional[str] = None,
    ) -> dict:
        """
        One page of active posts.

        The first query selects only ids and the three counts (as correlated
        subqueries) so that filtering, sorting and paging happen in the
        database; the second loads authors and categories for that page only.
        """
        page = max(page, 1)
        limit = min(max(limit, 1), settings.max_page_size)
        descending = (sort_order or "DESC").upper() != "ASC"

        likes_count = self._reaction_count_subquery(LikeType.LIKE)
        dislikes_count = self._reaction_count_subquery(LikeType.DISLIKE)
        comments_count = (
            select(func.count(Comment.id))
            .where(Comment.post_id == Post.id)
            .correlate(Post)
            .scalar_subquery()
        )

        query = self.db.query(Post.id).filter(Post.status == PostStatus.ACTIVE.value)

        if search_term:
            pattern = contains_pattern(search_term)
            query = query.join(User, Post.author_id == User.id).filter(
                or_(
                    Post.title.ilike(pattern, escape=LIKE_ESCAPE),
                    User.full_name.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )

        if category:
            # Titles are unique, so the join adds at most one row per post
            query = query.join(Post.categories).filter(Category.title == category)

        total = query.count()

        sort_columns = {
            "likes": likes_count,
            "dislikes": dislikes_count,
            "comments": comments_count,
            "date": Post.created_at,
        }
        sort_column = sort_columns.get(sort_option)
        ordering = []
        if sort_column is not None:
            ordering.append(sort_column.desc() if descending else sort_column.asc())
        ordering.append(Post.id.desc() if descending else Post.id.asc())

        rows = (
            query.add_columns(likes_count, dislikes_count, comments_count)
            .order_by(*ordering)
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )

        page_ids = [row[0] for row in rows]
        counts = {
            row[0]: (int(row[1] or 0), int(row[2] or 0), int(row[3] or 0))
            for row in rows
        }

        posts_by_id = {}
        if page_ids:
            posts_by_id = {
                post.id: post
                for post in self._hydrated_query().filter(Post.id.in_(page_ids)).all()
            }

        posts = [
            self._to_response(posts_by_id[post_id], counts[post_id])
            for post_id in page_ids
            if post_id in posts_by_id
        ]

        total_pages = math.ceil(total / limit) if limit > 0 else 0
        return {
            "posts": posts,
            "total": total,
            "page": page,
            "limit": limit,
            "total_pages": total_pages,
        }

    # ==================== Update / Delete ====================

    @db_exception
    def update(self, field: str, value, data: PostUpdate) -> PostResponse:
        """Partial update; `category_ids` replaces the whole category set"""
        post = self.db.query(Post).filter(self._lookup_column(field) == value).first()
        if not post:
            raise PostNotFound()

        changes = data.model_dump(exclude_unset=True)

        # Validate before touching the row so a failure leaves nothing half-applied
        categories = None
        if changes.get("category_ids") is not None:
            categories = self._resolve_categories(changes["category_ids"])

        for attr in ("title", "content"):
            if changes.get(attr) is not None:
                setattr(post, attr, changes[attr])
        if changes.get("status") is not None:
            post.status = PostStatus(changes["status"]).value
        if categories is not None:
            post.categories = categories

        self.db.commit()
        self.db.refresh(post)

        logger.info(f"Post {post.id} updated ({', '.join(sorted(changes)) or 'no fields'})")
        return self._to_response(post, self._load_counts([post.id])[post.id])

    @db_exception
    def delete(self, field: str, value) -> None:
        """Delete a post with its comments, likes and category links"""
        post = self.db.query(Post).filter(self._lookup_column(field) == value).first()
        if not post:
            raise PostNotFound()

        self.db.delete(post)
        self.db.commit()
        logger.info(f"Post {post.id} deleted")

    # ==================== Helpers ====================

    def _lookup_column(self, field: str):
        if field not in self.LOOKUP_FIELDS:
            raise ValidationFailedError(f"Cannot look up posts by '{field}'")
        return getattr(Post, field)

    def _hydrated_query(self):
        return self.db.query(Post).options(
            selectinload(Post.author), selectinload(Post.categories)
        )

    @staticmethod
    def _reaction_count_subquery(like_type: LikeType):
        return (
            select(func.count(Like.id))
            .where(Like.post_id == Post.id, Like.type == like_type.value)
            .correlate(Post)
            .scalar_subquery()
        )

    def _load_counts(self, post_ids: Iterable[str]) -> Dict[str, tuple]:
        """(likes, dislikes, comments) per post id, zero when nothing exists"""
        post_ids = list(post_ids)
        likes = {post_id: 0 for post_id in post_ids}
        dislikes = dict(likes)
        comments = dict(likes)
        if not post_ids:
            return {}

        reaction_rows = (
            self.db.query(Like.post_id, Like.type, func.count(Like.id))
            .filter(Like.post_id.in_(post_ids))
            .group_by(Like.post_id, Like.type)
            .all()
        )
        for post_id, like_type, count in reaction_rows:
            if like_type == LikeType.LIKE.value:
                likes[post_id] = count
            elif like_type == LikeType.DISLIKE.value:
                dislikes[post_id] = count

        comment_rows = (
            self.db.query(Comment.post_id, func.count(Comment.id))
            .filter(Comment.post_id.in_(post_ids))
            .group_by(Comment.post_id)
            .all()
        )
        for post_id, count in comment_rows:
            comments[post_id] = count

        return {
            post_id: (likes[post_id], dislikes[post_id], comments[post_id])
            for post_id in post_ids
        }

    def _to_responses(self, posts: List[Post]) -> List[PostResponse]:
        counts = self._load_counts(post.id for post in posts)
        return [self._to_response(post, counts[post.id]) for post in posts]

    @staticmethod
    def _to_response(post: Post, counts: tuple) -> PostResponse:
        likes_count, dislikes_count, comments_count = counts
        return PostResponse(
            id=post.id,
            title=post.title,
            content=post.content,
            status=post.status,
            author=post.author.full_name if post.author else "Unknown",
            author_id=post.author_id,
            category_titles=[category.title for category in post.categories],
            likes_count=likes_count,
            dislikes_count=dislikes_count,
            comments_count=comments_count,
            created_at=post.created_at,
            updated_at=post.updated_at,
        )
