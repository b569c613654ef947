# forum/routers/categories.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from forum.core.database import get_db
from forum.core.dependencies import get_current_admin
from forum.models.user import User
from forum.schemas.category import CategoryCreate, CategoryResponse, CategoryUpdate
from forum.services.category import CategoryService

router = APIRouter(
    prefix="/categories",
    tags=["Categories"],
    responses={404: {"description": "Not found"}},
)


# ==================== Category Endpoints ====================


@router.post("/", response_model=CategoryResponse, status_code=201)
def create_category(
    category_in: CategoryCreate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    """
    Create a new category.
    Only admins can create categories.
    """
    service = CategoryService(db)
    return service.create_category(category_in)


@router.get("/", response_model=List[CategoryResponse])
def list_categories(db: Session = Depends(get_db)):
    """
    Get all categories in alphabetical order.
    """
    service = CategoryService(db)
    return service.get_categories()


@router.get("/title/{title}", response_model=CategoryResponse)
def get_category_by_title(title: str, db: Session = Depends(get_db)):
    service = CategoryService(db)
    category = service.get_category_by_title(title)

    if not category:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Category not found",
        )

    return category


@router.get("/{category_id}", response_model=CategoryResponse)
def get_category(category_id: str, db: Session = Depends(get_db)):
    service = CategoryService(db)
    category = service.get_category(category_id)

    if not category:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Category not found",
        )

    return category


@router.put("/{category_id}", response_model=CategoryResponse)
def update_category(
    category_id: str,
    category_in: CategoryUpdate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    """
    Update a category.
    Only admins can update categories.
    """
    service = CategoryService(db)
    return service.update_category(category_id, category_in)


@router.delete("/{category_id}", status_code=204)
def delete_category(
    category_id: str,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    """
    Delete a category.
    Only admins can delete categories.
    """
    service = CategoryService(db)
    service.delete_category(category_id)
    return None
