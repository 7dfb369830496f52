"""
Security utilities for authentication
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import logging

from app.config import settings
from app.core.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer scheme; missing headers are reported through AuthenticationError
bearer_scheme = HTTPBearer(auto_error=False)

# Standalone hashing helper for seeding and tests
get_password_hash = lambda password: pwd_context.hash(password)


class SecurityManager:
    """
    Issues and validates access tokens carrying a `user_id` claim.
    The signing key is injected so tests can rotate it.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        access_token_expire_minutes: int = 60 * 24
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.access_token_expire = timedelta(minutes=access_token_expire_minutes)

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """
        Verify a plain password against a hashed password
        """
        try:
            return pwd_context.verify(plain_password, hashed_password)
        except (ValueError, TypeError):
            # Not a recognised hash
            return False

    @staticmethod
    def hash_password(password: str) -> str:
        """
        Hash a password
        """
        return pwd_context.hash(password)

    def create_access_token(
        self,
        user_id: int,
        now: Optional[datetime] = None
    ) -> Tuple[str, int]:
        """
        Create a JWT access token, returns the token and its expiry (epoch seconds)
        """
        issued_at = now or datetime.now(timezone.utc)
        expire = int((issued_at + self.access_token_expire).timestamp())
        claims = {
            "user_id": user_id,
            "exp": expire,
            "iat": int(issued_at.timestamp()),
        }
        encoded_jwt = jwt.encode(claims, self.secret_key, algorithm=self.algorithm)
        return encoded_jwt, expire

    def decode_access_token(self, token: str) -> int:
        """
        Verify a JWT access token and return the user id it was issued for
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            logger.info(f"JWT decode error: {e}")
            raise AuthenticationError()

        user_id = payload.get("user_id")
        if not isinstance(user_id, int) or isinstance(user_id, bool):
            raise AuthenticationError()
        return user_id


# Create global security manager
security_manager = SecurityManager(
    secret_key=settings.JWT_SECRET_KEY,
    algorithm=settings.JWT_ALGORITHM,
    access_token_expire_minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES,
)


def get_security_manager() -> SecurityManager:
    return security_manager


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    manager: SecurityManager = Depends(get_security_manager),
) -> int:
    """
    Get current user ID from the bearer token
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError()
    return manager.decode_access_token(credentials.credentials)
