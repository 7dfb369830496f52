"""
Login: verifies credentials and issues access tokens
"""

import logging

from app.core.clock import Clock, SystemClock
from app.core.exceptions import InvalidCredentialsError
from app.core.security import SecurityManager
from app.repositories.base import UserRepository
from app.schemas.user import SessionResponse

logger = logging.getLogger(__name__)


class SessionService:
    def __init__(self, users: UserRepository, security: SecurityManager, clock: Clock = None):
        self.users = users
        self.security = security
        self.clock = clock or SystemClock()

    async def create_session(self, username: str, password: str) -> SessionResponse:
        user = await self.users.get_by_username(username)
        if user is None or not user.password_hash:
            logger.info(f"Login failed for unknown user: {username}")
            raise InvalidCredentialsError()

        if not self.security.verify_password(password, user.password_hash):
            logger.info(f"Login failed for user: {username}")
            raise InvalidCredentialsError()

        access_token, exp = self.security.create_access_token(user.id, now=self.clock.now())
        logger.info(f"Session created for user {user.id}")
        return SessionResponse(
            user_id=user.id,
            username=user.username,
            email=user.email,
            access_token=access_token,
            exp=exp
        )
