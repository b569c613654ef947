# forum/routers/users.py

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from forum.core.database import get_db
from forum.core.dependencies import (
    get_current_admin,
    get_current_user,
    require_user_or_admin,
)
from forum.models.user import User
from forum.schemas.user import (
    AdminUserUpdate,
    UserActivityResponse,
    UserListResponse,
    UserResponse,
)
from forum.services.user import UserService

router = APIRouter(
    prefix="/users",
    tags=["Users"],
    responses={404: {"description": "Not found"}},
)

ADMIN_ONLY_FIELDS = ("role", "is_verified", "rating")


def _get_or_404(service: UserService, field: str, value: str) -> User:
    user = service.find_one_by(field, value)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("/", response_model=UserListResponse)
def list_users(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    search: Optional[str] = Query(None, description="Search by name, username or email"),
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    """
    List all users with pagination.
    Only admins can list users.
    """
    service = UserService(db)
    return service.get_all_users(page, size, search)


@router.get("/find-user-by-id", response_model=UserResponse)
def find_user_by_id(
    id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _get_or_404(UserService(db), "id", id)


@router.get("/find-user-by-username", response_model=UserResponse)
def find_user_by_username(
    username: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _get_or_404(UserService(db), "username", username)


@router.get("/find-user-by-email", response_model=UserResponse)
def find_user_by_email(
    email: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _get_or_404(UserService(db), "email", email)


@router.get("/{user_id}/activity", response_model=UserActivityResponse)
def get_user_activity(
    user_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_user_or_admin),
):
    """
    Ids of the posts, comments and likes a user has authored.
    """
    service = UserService(db)
    _get_or_404(service, "id", user_id)
    return UserActivityResponse(
        post_ids=service.find_post_ids_by_user(user_id),
        comment_ids=service.find_comment_ids_by_user(user_id),
        like_ids=service.find_like_ids_by_user(user_id),
    )


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: str,
    user_in: AdminUserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_user_or_admin),
):
    """
    Update a user. Users may edit their own profile; role, verification and
    rating can only be changed by an admin.
    """
    update_data = user_in.model_dump(exclude_unset=True)
    if not current_user.is_admin and any(
        field in update_data for field in ADMIN_ONLY_FIELDS
    ):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only admins can change role, verification or rating",
        )

    service = UserService(db)
    return service.update_user(user_id, update_data)


@router.delete("/{user_id}", status_code=204)
def delete_user(
    user_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_user_or_admin),
):
    """
    Delete a user together with everything they authored.
    """
    service = UserService(db)
    service.delete_user(user_id)
    return None
