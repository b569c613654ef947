# forum/services/auth.py
import logging
from datetime import timedelta
from typing import Any, Dict

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from forum.core.config import settings
from forum.core.security import jwt_manager, password_hasher, token_blacklist
from forum.models.enums import UserRole
from forum.models.user import User
from forum.schemas.auth import AuthResponse, LoginRequest, RegisterRequest
from forum.schemas.user import UserCreate, UserResponse
from forum.services.user import UserService

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: Session):
        self.db = db

    def register(self, request: RegisterRequest) -> AuthResponse:
        """
        Create a regular user account and log it in
        """
        user = UserService(self.db).create_user(
            UserCreate(
                username=request.username,
                email=request.email,
                full_name=request.full_name,
                password=request.password,
                role=UserRole.USER,
            )
        )
        logger.info(f"User registered successfully: {user.username}")
        return self._auth_response(user)

    def login(self, request: LoginRequest) -> AuthResponse:
        """
        Login with username or email and password
        """
        user = UserService(self.db).find_by_username_or_email(request.username_or_email)

        if not user or not password_hasher.verify_password(
            request.password, user.password_hash
        ):
            logger.info(f"Failed login attempt for: {request.username_or_email}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid username/email or password",
                headers={"WWW-Authenticate": "Bearer"},
            )

        logger.info(f"User login successful: {user.username}")
        return self._auth_response(user)

    def logout(self, token: str) -> Dict[str, Any]:
        """
        Logout user by blacklisting the token until it would have expired
        """
        ttl = jwt_manager.remaining_lifetime(token) or settings.token_blacklist_ttl
        if not token_blacklist.blacklist(token, ttl):
            logger.warning("Failed to blacklist token, but continuing with logout")

        logger.info("User logged out successfully")
        return {"success": True, "message": "Logout successful"}

    def _auth_response(self, user: User) -> AuthResponse:
        access_token = jwt_manager.create_access_token(user)
        return AuthResponse(
            access_token=access_token,
            token_type="bearer",
            expires_in=int(timedelta(days=settings.jwt_user_expiration).total_seconds()),
            user=UserResponse.model_validate(user),
        )
