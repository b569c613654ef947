"""
Shared fixtures: an in-memory SQLite database recreated for every test, an
in-process token blacklist and ready-made users, categories and posts.
"""

import os
import tempfile
from pathlib import Path

# Settings are read at import time, so the environment must be in place first
_TMP_DIR = Path(tempfile.mkdtemp(prefix="forum-tests-"))
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["TOKEN_BLACKLIST_BACKEND"] = "memory"
os.environ["RATE_LIMIT_STORAGE_URI"] = "memory://"
os.environ["DEBUG"] = "false"
os.environ["LOG_FILE"] = str(_TMP_DIR / "forum.log")
os.environ["JWT_SECRET"] = "test-secret"
os.environ["BCRYPT_ROUNDS"] = "4"

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from forum.core.database import Base, SessionLocal, engine
from forum.core.limiter import limiter
from forum.core.security import jwt_manager, token_blacklist
from forum.models import Category, Comment, Post, User
from forum.models.enums import UserRole
from forum.schemas.user import UserCreate
from forum.services.user import UserService


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    token_blacklist._memory_blacklist.clear()
    limiter.reset()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    from main import app

    with TestClient(app) as test_client:
        yield test_client


def make_user(db, username, full_name=None, role=UserRole.USER, password="secret123"):
    return UserService(db).create_user(
        UserCreate(
            username=username,
            email=f"{username}@example.com",
            full_name=full_name or username.title(),
            password=password,
            role=role,
        )
    )


def make_category(db, title):
    category = Category(title=title)
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


def make_post(db, author, categories, title="A post", created_at=None, status="active"):
    post = Post(
        title=title,
        content=f"Content of {title}",
        author_id=author.id,
        status=status,
    )
    post.categories = list(categories)
    if created_at is not None:
        post.created_at = created_at
    db.add(post)
    db.commit()
    db.refresh(post)
    return post


def make_comment(db, author, post, parent=None, content="A comment", created_at=None):
    comment = Comment(
        content=content,
        author_id=author.id,
        post_id=post.id,
        parent_comment_id=parent.id if parent else None,
    )
    if created_at is not None:
        comment.created_at = created_at
    db.add(comment)
    db.commit()
    db.refresh(comment)
    return comment


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {jwt_manager.create_access_token(user)}"}


def minutes_ago(minutes: int) -> datetime:
    return datetime.now() - timedelta(minutes=minutes)


@pytest.fixture
def alice(db):
    return make_user(db, "alice", "Alice Smith")


@pytest.fixture
def bob(db):
    return make_user(db, "bob", "Bob Jones")


@pytest.fixture
def admin(db):
    return make_user(db, "moderator", "Mod Erator", role=UserRole.ADMIN)


@pytest.fixture
def tech(db):
    return make_category(db, "Tech")


@pytest.fixture
def news(db):
    return make_category(db, "News")


@pytest.fixture
def post(db, alice, tech):
    return make_post(db, alice, [tech], title="Hello forum")
