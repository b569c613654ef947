# forum/services/category.py
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from forum.core.decorator import db_exception
from forum.core.exceptions import CategoryNotFound, ConflictError
from forum.models.category import Category
from forum.schemas.category import CategoryCreate, CategoryUpdate

logger = logging.getLogger(__name__)


class CategoryService:
    def __init__(self, db: Session):
        self.db = db

    @db_exception
    def create_category(self, category_in: CategoryCreate) -> Category:
        """Create a new category (admin only)"""
        if self.get_category_by_title(category_in.title):
            raise ConflictError("Category with this title already exists")

        category = Category(**category_in.model_dump())
        self.db.add(category)
        self.db.commit()
        self.db.refresh(category)

        logger.info(f"Category '{category.title}' created ({category.id})")
        return category

    def get_categories(self) -> List[Category]:
        """All categories, alphabetical"""
        return self.db.query(Category).order_by(Category.title.asc()).all()

    def get_category(self, category_id: str) -> Optional[Category]:
        return self.db.query(Category).filter(Category.id == category_id).first()

    def get_category_by_title(self, title: str) -> Optional[Category]:
        return self.db.query(Category).filter(Category.title == title).first()

    @db_exception
    def update_category(self, category_id: str, category_in: CategoryUpdate) -> Category:
        """Update a category (admin only)"""
        category = self.get_category(category_id)
        if not category:
            raise CategoryNotFound()

        # Check if title is being changed and conflicts with another category
        if category_in.title and category_in.title != category.title:
            existing = (
                self.db.query(Category)
                .filter(
                    Category.title == category_in.title,
                    Category.id != category_id,
                )
                .first()
            )
            if existing:
                raise ConflictError("Category with this title already exists")

        for field, value in category_in.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(category, field, value)

        self.db.commit()
        self.db.refresh(category)

        return category

    @db_exception
    def delete_category(self, category_id: str) -> None:
        """Delete a category; posts keep existing without it"""
        category = self.get_category(category_id)
        if not category:
            raise CategoryNotFound()

        self.db.delete(category)
        self.db.commit()
        logger.info(f"Category {category_id} deleted")
