# forum/routers/comments.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from forum.core.database import get_db
from forum.core.dependencies import get_current_user, require_comment_author_or_admin
from forum.models.user import User
from forum.schemas.comment import CommentCreate, CommentResponse, CommentUpdate
from forum.services.comment import CommentService

router = APIRouter(
    prefix="/comments",
    tags=["Comments"],
    responses={404: {"description": "Not found"}},
)


@router.get("/", response_model=List[CommentResponse])
def list_comments(db: Session = Depends(get_db)):
    """
    All comments, oldest first.
    """
    service = CommentService(db)
    return service.find_all_by()


@router.get("/post/{post_id}", response_model=List[CommentResponse])
def list_post_comments(post_id: str, db: Session = Depends(get_db)):
    """
    Root comments of a post. Expand a thread with `/comments/{id}/replies`.
    """
    service = CommentService(db)
    return service.get_comments_by_post_id(post_id)


@router.get("/{comment_id}/replies", response_model=List[CommentResponse])
def list_replies(comment_id: str, db: Session = Depends(get_db)):
    service = CommentService(db)
    return service.get_replies_by_comment_id(comment_id)


@router.get("/{comment_id}", response_model=CommentResponse)
def get_comment(comment_id: str, db: Session = Depends(get_db)):
    service = CommentService(db)
    comment = service.find_one_by("id", comment_id)

    if not comment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Comment not found",
        )

    return comment


@router.post("/", response_model=CommentResponse, status_code=201)
def create_comment(
    comment_in: CommentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Comment on a post, or reply to a comment with `parent_comment_id`.
    Threads are limited in depth.
    """
    service = CommentService(db)
    return service.create(
        content=comment_in.content,
        author_id=current_user.id,
        post_id=comment_in.post_id,
        parent_comment_id=comment_in.parent_comment_id,
    )


@router.put("/{comment_id}", response_model=CommentResponse)
def update_comment(
    comment_id: str,
    comment_in: CommentUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_comment_author_or_admin),
):
    """
    Edit a comment's content. Only the author or an admin can edit it.
    """
    service = CommentService(db)
    return service.update("id", comment_id, content=comment_in.content)


@router.delete("/{comment_id}", status_code=204)
def delete_comment(
    comment_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_comment_author_or_admin),
):
    """
    Delete a comment and all its replies.
    """
    service = CommentService(db)
    service.delete("id", comment_id)
    return None
