# forum/routers/posts.py
from typing import Annotated, List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from forum.core.database import get_db
from forum.core.dependencies import get_current_user, require_post_author_or_admin
from forum.models.user import User
from forum.schemas.post import (
    PostCreate,
    PostListQuery,
    PostListResponse,
    PostResponse,
    PostUpdate,
)
from forum.services.post import PostService

router = APIRouter(
    prefix="/posts",
    tags=["Posts"],
    responses={404: {"description": "Not found"}},
)


@router.get("/", response_model=PostListResponse)
def list_posts(
    params: Annotated[PostListQuery, Query()],
    db: Session = Depends(get_db),
):
    """
    Paginated listing of active posts.

    - **search_term**: matches post title or author name (case-insensitive)
    - **sort_option**: likes, dislikes, comments or date
    - **sort_order**: ASC or DESC (default DESC)
    - **category**: exact category title
    """
    service = PostService(db)
    return service.get_paginated_posts(
        page=params.page,
        limit=params.limit,
        search_term=params.search_term,
        sort_option=params.sort_option,
        sort_order=params.sort_order,
        category=params.category,
    )


@router.get("/all", response_model=List[PostResponse])
def list_all_posts(db: Session = Depends(get_db)):
    """
    Every post regardless of status, newest first.
    """
    service = PostService(db)
    return service.find_all_by()


@router.get("/user", response_model=List[PostResponse])
def list_posts_by_user(
    user_id: str = Query(..., description="Author id"),
    db: Session = Depends(get_db),
):
    """
    Active posts of one author, newest first.
    """
    service = PostService(db)
    return service.get_all_posts_by_user(user_id)


@router.post("/", response_model=PostResponse, status_code=201)
def create_post(
    post_in: PostCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Create a post authored by the caller.
    """
    service = PostService(db)
    return service.create(
        title=post_in.title,
        content=post_in.content,
        author_id=current_user.id,
        category_ids=post_in.category_ids,
    )


@router.get("/{post_id}", response_model=PostResponse)
def get_post(post_id: str, db: Session = Depends(get_db)):
    service = PostService(db)
    post = service.find_one_by("id", post_id)

    if not post:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Post not found",
        )

    return post


@router.put("/{post_id}", response_model=PostResponse)
def update_post(
    post_id: str,
    post_in: PostUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_post_author_or_admin),
):
    """
    Update a post. Only the author or an admin can update it.
    """
    service = PostService(db)
    return service.update("id", post_id, post_in)


@router.delete("/{post_id}", status_code=204)
def delete_post(
    post_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_post_author_or_admin),
):
    """
    Delete a post with its comments and likes.
    """
    service = PostService(db)
    service.delete("id", post_id)
    return None
