# forum/routers/likes.py
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from forum.core.database import get_db
from forum.core.dependencies import get_current_user
from forum.models.user import User
from forum.schemas.like import (
    LikeCountsResponse,
    LikeResponse,
    ReactionCreate,
    UserReactionResponse,
)
from forum.services.like import LikeService, LikeTarget, ToggleAction

router = APIRouter(
    prefix="/likes",
    tags=["Likes"],
    responses={404: {"description": "Not found"}},
)

TOGGLE_STATUS = {
    ToggleAction.CREATED: status.HTTP_201_CREATED,
    ToggleAction.UPDATED: status.HTTP_200_OK,
}


def _toggle(
    db: Session, user: User, target: LikeTarget, reaction: ReactionCreate, response: Response
):
    service = LikeService(db)
    action, like = service.toggle(user.id, target, reaction.type)

    if action == ToggleAction.REMOVED:
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    response.status_code = TOGGLE_STATUS[action]
    return like


# ==================== Toggle ====================


@router.post(
    "/post/{post_id}",
    response_model=LikeResponse,
    responses={201: {"description": "Reaction created"}, 204: {"description": "Reaction removed"}},
)
def toggle_post_reaction(
    post_id: str,
    reaction: ReactionCreate,
    response: Response,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Session = Depends(get_db),
):
    """
    Like or dislike a post. Sending the same reaction again removes it,
    sending the other one switches it.
    """
    return _toggle(db, current_user, LikeTarget.post(post_id), reaction, response)


@router.post(
    "/comment/{comment_id}",
    response_model=LikeResponse,
    responses={201: {"description": "Reaction created"}, 204: {"description": "Reaction removed"}},
)
def toggle_comment_reaction(
    comment_id: str,
    reaction: ReactionCreate,
    response: Response,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Session = Depends(get_db),
):
    """
    Like or dislike a comment, with the same toggle rules as posts.
    """
    return _toggle(db, current_user, LikeTarget.comment(comment_id), reaction, response)


# ==================== Reaction state ====================


@router.get("/post/{post_id}/check", response_model=UserReactionResponse)
def check_post_reaction(
    post_id: str,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Session = Depends(get_db),
):
    """The caller's reaction on a post, or null"""
    like = LikeService(db).find_user_like_for_target(current_user.id, post_id=post_id)
    return UserReactionResponse(user_reaction=like.type if like else None)


@router.get("/comment/{comment_id}/check", response_model=UserReactionResponse)
def check_comment_reaction(
    comment_id: str,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Session = Depends(get_db),
):
    """The caller's reaction on a comment, or null"""
    like = LikeService(db).find_user_like_for_target(
        current_user.id, comment_id=comment_id
    )
    return UserReactionResponse(user_reaction=like.type if like else None)


@router.get("/post/{post_id}/count", response_model=LikeCountsResponse)
def count_post_reactions(post_id: str, db: Session = Depends(get_db)):
    return LikeService(db).count_likes_dislikes_by_target(post_id=post_id)


@router.get("/comment/{comment_id}/count", response_model=LikeCountsResponse)
def count_comment_reactions(comment_id: str, db: Session = Depends(get_db)):
    return LikeService(db).count_likes_dislikes_by_target(comment_id=comment_id)
