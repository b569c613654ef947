import logging
from typing import Annotated

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from forum.core.database import get_db
from forum.core.security import jwt_manager, token_blacklist
from forum.models.user import User
from forum.services.comment import CommentService
from forum.services.post import PostService

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security),
) -> str:
    """Raw bearer token of the request, rejected when missing or logged out"""
    if not credentials:
        raise _unauthorized("Not authenticated")

    token = credentials.credentials
    if token_blacklist.is_blacklisted(token):
        raise _unauthorized("Token has been revoked")
    return token


async def get_current_user(
    token: str = Depends(get_current_token),
    db: Session = Depends(get_db),
) -> User:
    """
    Dependency that requires a valid Bearer token and returns the user.
    Raises 401 Unauthorized if the token is missing, revoked, invalid, or the user is gone.
    """
    payload = jwt_manager.verify_token(token, "access")

    user_id = payload.get("user_id")
    user = db.query(User).filter(User.id == user_id).first()

    if not user:
        raise _unauthorized("User not found")

    return user


async def get_current_admin(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """
    Dependency that only lets admins through
    """
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required"
        )
    return current_user


async def require_user_or_admin(
    user_id: str,
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """
    The `user_id` path parameter must be the caller's own id, unless the caller is an admin
    """
    if current_user.id != user_id and not current_user.is_admin:
        logger.info(f"User {current_user.id} denied access to user {user_id}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only manage your own account",
        )
    return current_user


async def require_post_author_or_admin(
    post_id: str,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Session = Depends(get_db),
) -> User:
    """
    Only the post's author or an admin may modify the post
    """
    author_id = PostService(db).get_author_id(post_id)
    if author_id is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Post not found"
        )

    if author_id != current_user.id and not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the author or an admin can modify this post",
        )
    return current_user


async def require_comment_author_or_admin(
    comment_id: str,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Session = Depends(get_db),
) -> User:
    """
    Only the comment's author or an admin may modify the comment
    """
    author_id = CommentService(db).get_author_id(comment_id)
    if author_id is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found"
        )

    if author_id != current_user.id and not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the author or an admin can modify this comment",
        )
    return current_user
