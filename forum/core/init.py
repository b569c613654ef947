"""
Application initialization module
Handles initial setup tasks like creating the default admin account
"""

import logging

from sqlalchemy.orm import Session

from forum.core.config import settings
from forum.core.security import password_hasher
from forum.models.enums import UserRole
from forum.models.user import User

logger = logging.getLogger(__name__)


def init_default_admin(db: Session) -> None:
    """
    Create the default admin user if no admin exists yet.

    Credentials come from settings (ADMIN_DEFAULT_* environment variables).
    """
    try:
        existing_admin = (
            db.query(User).filter(User.role == UserRole.ADMIN.value).first()
        )

        if existing_admin:
            logger.info(
                f"✅ Admin user already exists (ID: {existing_admin.id}, Username: {existing_admin.username})"
            )
            return

        admin = User(
            username=settings.admin_default_username,
            email=settings.admin_default_email,
            full_name=settings.admin_default_full_name,
            password_hash=password_hasher.hash_password(
                settings.admin_default_password
            ),
            role=UserRole.ADMIN.value,
            is_verified=True,
        )

        db.add(admin)
        db.commit()
        db.refresh(admin)

        logger.info("=" * 60)
        logger.info("🎉 DEFAULT ADMIN CREATED")
        logger.info("=" * 60)
        logger.info(f"Username: {admin.username}")
        logger.info(f"Email: {admin.email}")
        logger.info("=" * 60)
        logger.warning("⚠️  IMPORTANT: Change the default password immediately!")
        logger.info("=" * 60)

    except Exception as e:
        logger.error(f"❌ Failed to initialize default admin: {e}")
        db.rollback()
        raise


def initialize_application(db: Session) -> None:
    """
    Run all application initialization tasks.

    Args:
        db: Database session
    """
    logger.info("🚀 Starting application initialization...")

    init_default_admin(db)

    logger.info("✅ Application initialization completed")
