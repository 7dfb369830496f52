"""
Database configuration and session management
"""

from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    AsyncEngine,
    async_sessionmaker,
    create_async_engine
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool, AsyncAdaptedQueuePool
from sqlalchemy import text
import hashlib
import logging

from app.config import settings

logger = logging.getLogger(__name__)

# Create async engine
if settings.is_testing or settings.DATABASE_URL.startswith("sqlite"):
    # NullPool doesn't accept pool parameters
    engine: AsyncEngine = create_async_engine(
        settings.DATABASE_URL,
        echo=settings.DB_ECHO,
        poolclass=NullPool,
    )
else:
    engine: AsyncEngine = create_async_engine(
        settings.DATABASE_URL,
        echo=settings.DB_ECHO,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=settings.DB_POOL_RECYCLE,
        poolclass=AsyncAdaptedQueuePool,
    )

# Create async session factory
async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

# Create declarative base
Base = declarative_base()


async def init_db():
    """
    Initialize database connections
    """
    # Tables must be registered on Base.metadata before create_all
    import app.models  # noqa: F401

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise


async def close_db():
    """
    Close database connections
    """
    await engine.dispose()
    logger.info("Database connections closed")


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency to get database session.
    Repositories commit their own single write; nothing is committed here.
    """
    async with async_session() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


class DatabaseManager:
    """
    Advisory locking helpers on top of a session
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    @staticmethod
    def supports_advisory_locks(session: AsyncSession) -> bool:
        return session.bind is not None and session.bind.dialect.name == "postgresql"

    async def acquire_xact_lock(self, session: AsyncSession, lock_id: int) -> None:
        """
        Block until the transaction-scoped PostgreSQL advisory lock is held.
        It is released by the next commit or rollback on this session.
        """
        await session.execute(
            text("SELECT pg_advisory_xact_lock(:lock_id)"),
            {"lock_id": lock_id}
        )
        self.logger.debug(f"Advisory lock acquired: {lock_id}")

    def generate_lock_id(self, resource_type: str, resource_id: str) -> int:
        """
        Generate consistent integer lock ID from resource identifiers
        """
        lock_string = f"{resource_type}:{resource_id}"
        # Generate 32-bit signed integer from hash
        hash_bytes = hashlib.md5(lock_string.encode()).digest()[:4]
        return int.from_bytes(hash_bytes, byteorder='big', signed=True)


# Create global database manager
db_manager = DatabaseManager()
