# core/security.py
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
from fastapi import Header, HTTPException, status
from jose import JWTError, jwt

from forum.core.cache import get_redis_client
from forum.core.config import settings
from forum.core.exceptions import ValidationFailedError
from forum.models.user import User

logger = logging.getLogger(__name__)


class JWTManager:
    """JWT token management for authentication"""

    def __init__(self):
        self.secret_key = settings.jwt_secret
        self.algorithm = settings.jwt_algorithm
        self.user_token_expire = timedelta(days=settings.jwt_user_expiration)
        self.issuer = settings.jwt_issuer

    def create_access_token(
        self,
        user: User,
        custom_expiration: Optional[timedelta] = None,
    ) -> str:
        """
        Create JWT access token for user

        Args:
            user: User model instance
            custom_expiration: Override default expiration

        Returns:
            JWT access token string
        """
        issued_at = datetime.now(timezone.utc)
        expire = issued_at + (custom_expiration or self.user_token_expire)

        payload = {
            "sub": str(user.id),
            "user_id": user.id,
            "role": user.role,
            "email": user.email,
            "exp": int(expire.timestamp()),
            "iat": int(issued_at.timestamp()),
            "iss": self.issuer,
            "jti": uuid.uuid4().hex,
            "type": "access",
        }

        try:
            token = jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
        except JWTError as e:
            logger.error(f"Failed to create access token: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to create access token",
            )

        logger.info(f"Access token created for user: {user.username}")
        return token

    def verify_token(self, token: str, token_type: str = "access") -> Dict[str, Any]:
        """
        Verify and decode JWT token
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"verify_exp": True},
                issuer=self.issuer,
            )
        except JWTError as e:
            logger.warning(f"JWT verification failed: {e}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid or expired token",
                headers={"WWW-Authenticate": "Bearer"},
            )

        if payload.get("type") != token_type:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=f"Invalid token type. Expected {token_type}",
            )

        if not payload.get("user_id") or not payload.get("role"):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid token structure",
                headers={"WWW-Authenticate": "Bearer"},
            )

        return payload

    def get_token_expiration(self, token: str) -> Optional[datetime]:
        """
        Get token expiration datetime, or None if the token cannot be decoded
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"verify_exp": False},
                issuer=self.issuer,
            )
        except JWTError:
            return None

        exp_timestamp = payload.get("exp")
        if exp_timestamp:
            return datetime.fromtimestamp(exp_timestamp, tz=timezone.utc)
        return None

    def remaining_lifetime(self, token: str) -> Optional[int]:
        """Seconds until the token expires (None when already expired or unreadable)"""
        expiration = self.get_token_expiration(token)
        if not expiration:
            return None
        ttl = int((expiration - datetime.now(timezone.utc)).total_seconds())
        return ttl if ttl > 0 else None

    def extract_token(
        self, authorization: str = Header(..., description="Bearer token")
    ) -> str:
        """Extract token from authorization header"""
        try:
            scheme, token = authorization.split()
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid authorization header",
                headers={"WWW-Authenticate": "Bearer"},
            )
        if scheme.lower() != "bearer":
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid authentication scheme",
                headers={"WWW-Authenticate": "Bearer"},
            )
        return token


class PasswordHasher:
    """bcrypt hashing for account passwords"""

    # bcrypt only reads the first 72 bytes of its input
    MAX_PASSWORD_BYTES = 72

    def __init__(self, rounds: int = None):
        self.rounds = rounds or settings.bcrypt_rounds

    def hash_password(self, password: str) -> str:
        encoded = password.encode("utf-8")
        if len(encoded) > self.MAX_PASSWORD_BYTES:
            raise ValidationFailedError(
                f"Password must be at most {self.MAX_PASSWORD_BYTES} bytes long"
            )
        return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify_password(self, password: str, password_hash: str) -> bool:
        encoded = password.encode("utf-8")
        if len(encoded) > self.MAX_PASSWORD_BYTES:
            return False
        try:
            return bcrypt.checkpw(encoded, password_hash.encode("utf-8"))
        except ValueError:
            logger.warning("Stored password hash is not a valid bcrypt hash")
            return False


class TokenBlacklist:
    """Expiring token blacklist: Redis keys `blacklist:<token>`, or an in-process dict"""

    def __init__(self, redis_client=None):
        self.redis_client = redis_client
        self._memory_blacklist: Dict[str, datetime] = {}

    def blacklist(self, token: str, ttl: Optional[int] = None) -> bool:
        """
        Add token to blacklist

        Args:
            token: JWT token to blacklist
            ttl: Time to live in seconds (defaults to settings.token_blacklist_ttl)

        Returns:
            True if successfully added, False otherwise
        """
        ttl = ttl or settings.token_blacklist_ttl
        if self.redis_client is None:
            now = datetime.now(timezone.utc)
            self._purge_expired(now)
            self._memory_blacklist[token] = now + timedelta(seconds=ttl)
            return True

        try:
            return bool(self.redis_client.setex(f"blacklist:{token}", ttl, "1"))
        except Exception as e:
            logger.error(f"Failed to blacklist token: {e}")
            return False

    def is_blacklisted(self, token: str) -> bool:
        """
        Check if token is blacklisted
        """
        if self.redis_client is None:
            expires_at = self._memory_blacklist.get(token)
            if expires_at is None:
                return False
            if expires_at <= datetime.now(timezone.utc):
                del self._memory_blacklist[token]
                return False
            return True

        try:
            return bool(self.redis_client.get(f"blacklist:{token}"))
        except Exception as e:
            logger.error(f"Failed to check token blacklist: {e}")
            return False

    def _purge_expired(self, now: datetime) -> None:
        expired = [t for t, expires_at in self._memory_blacklist.items() if expires_at <= now]
        for token in expired:
            del self._memory_blacklist[token]
        if expired:
            logger.debug(f"Purged {len(expired)} expired blacklist entries")


def build_token_blacklist() -> TokenBlacklist:
    if settings.token_blacklist_backend == "redis":
        return TokenBlacklist(get_redis_client())
    logger.warning("Token blacklist is kept in memory; not shared between workers")
    return TokenBlacklist()


# Global instances
jwt_manager = JWTManager()
password_hasher = PasswordHasher()
token_blacklist = build_token_blacklist()
