from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from forum.core.config import settings
from forum.core.database import get_db
from forum.core.dependencies import get_current_user
from forum.core.limiter import limiter
from forum.core.security import jwt_manager
from forum.models.user import User
from forum.schemas.auth import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    TokenStatusResponse,
)
from forum.schemas.user import UserResponse
from forum.services.auth import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=201)
@limiter.limit(settings.auth_rate_limit)
async def register_user(
    request: Request, payload: RegisterRequest, db: Session = Depends(get_db)
) -> AuthResponse:
    """Create an account and return an access token for it"""
    return AuthService(db).register(payload)


@router.post("/login", response_model=AuthResponse)
@limiter.limit(settings.auth_rate_limit)
async def login(
    request: Request, payload: LoginRequest, db: Session = Depends(get_db)
) -> AuthResponse:
    return AuthService(db).login(payload)


@router.post("/logout")
async def logout(
    current_user: Annotated[User, Depends(get_current_user)],
    token: str = Depends(jwt_manager.extract_token),
    db: Session = Depends(get_db),
) -> dict:
    """Logout current user; the token stops working immediately"""
    return AuthService(db).logout(token)


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: Annotated[User, Depends(get_current_user)]):
    """Get the authenticated user's profile"""
    return current_user


@router.get("/verify-token", response_model=TokenStatusResponse)
async def verify_token(
    current_user: Annotated[User, Depends(get_current_user)],
) -> TokenStatusResponse:
    """Check that the bearer token is valid and not logged out"""
    return TokenStatusResponse(valid=True, user_id=current_user.id, role=current_user.role)
