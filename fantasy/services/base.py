"""
Base service class for the scoring & settlement engine.

Provides async database session management and local retry logic for
service layer operations.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Awaitable, Callable, Any, Tuple, Type
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from fantasy.utils.exceptions import ConcurrentUpdateError, TransactionError

logger = logging.getLogger(__name__)

# Write conflicts that are safe to retry from scratch
RETRYABLE_ERRORS: Tuple[Type[BaseException], ...] = (ConcurrentUpdateError, OperationalError, IntegrityError)

class BaseService:
    """Base class for all services with async database session management."""

    def __init__(self, session_factory):
        """
        Initialize base service with session factory.

        Args:
            session_factory: Async session factory from Database class
        """
        self.session_factory = session_factory

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide a transactional scope for async database operations."""
        session = self.session_factory()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def execute_with_retry(
        self,
        func: Callable[[], Awaitable[Any]],
        max_retries: int = 3,
        retry_on: Tuple[Type[BaseException], ...] = RETRYABLE_ERRORS,
        operation: str = None,
    ) -> Any:
        """Execute a function with automatic retry on write conflicts.

        Errors outside ``retry_on`` propagate immediately. After the last
        attempt a TransactionError is raised. A ``max_retries`` of 0 still makes
        a single attempt.
        """
        operation = operation or getattr(func, '__name__', 'operation')
        attempts = max(max_retries, 1)
        for attempt in range(attempts):
            try:
                return await func()
            except retry_on as e:
                if attempt == attempts - 1:
                    logger.error(f"{operation} failed after {attempts} attempts: {e}")
                    raise TransactionError(operation, attempts) from e
                logger.warning(f"Retry attempt {attempt + 1} for {operation}: {e}")
                await asyncio.sleep(min(0.05 * (2 ** attempt), 1.0))  # Exponential backoff
