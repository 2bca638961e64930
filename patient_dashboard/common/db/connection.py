"""
Database Connection Management

This module owns the async engine and session factory. A single
ConnectionManager lives on the application state; it is created at startup,
verified with a retrying probe, and disposed at shutdown. The retry schedule
is an injected policy object so it can be tested in isolation.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from patient_dashboard.common.exceptions import DatabaseConnectionError
from patient_dashboard.common.logger import app_logger

# Module logger
logger = app_logger.getChild("db.connection")


@dataclass(frozen=True)
class RetryPolicy:
    """
    Exponential backoff schedule for connection attempts.

    Attributes:
        max_attempts: Total number of attempts, including the first
        base_delay: Delay in seconds after the first failure
        backoff_factor: Multiplier applied to the delay after each failure
    """
    max_attempts: int = 5
    base_delay: float = 5.0
    backoff_factor: float = 2.0

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0:
            raise ValueError("base_delay must not be negative")
        if self.backoff_factor < 1:
            raise ValueError("backoff_factor must be at least 1")

    def delay_for(self, attempt: int) -> float:
        """Delay to wait after the given failed attempt (1-based)."""
        return self.base_delay * self.backoff_factor ** (attempt - 1)


class ConnectionManager:
    """
    Owns the engine, its pool and the session factory.

    Examples:
        manager = ConnectionManager.from_settings(settings)
        await manager.connect()
        async with manager.session() as session:
            ...
        await manager.dispose()
    """

    def __init__(
        self,
        database_url: str,
        *,
        echo: bool = False,
        pool_size: int = 10,
        max_overflow: int = 10,
        pool_timeout: int = 30,
        connect_timeout: float = 10.0,
        socket_timeout: float = 45.0,
        retry_policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """
        Initialize the manager. The engine connects lazily.

        Args:
            database_url: SQLAlchemy async URL
            echo: Whether to echo SQL statements
            pool_size: Connection pool size
            max_overflow: Connections allowed above pool_size
            pool_timeout: Seconds to wait for a pooled connection
            connect_timeout: Seconds to wait when opening a connection
            socket_timeout: Seconds a single statement may run
            retry_policy: Schedule used by connect()
            sleep: Awaitable used between attempts; replaceable in tests
        """
        self.database_url = database_url
        self.retry_policy = retry_policy or RetryPolicy()
        self._sleep = sleep
        self._connected = False

        self.engine: AsyncEngine = create_async_engine(
            database_url,
            **self._engine_kwargs(
                database_url,
                echo=echo,
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_timeout=pool_timeout,
                connect_timeout=connect_timeout,
                socket_timeout=socket_timeout,
            )
        )
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Any, **overrides: Any) -> "ConnectionManager":
        """Build a manager from application settings."""
        kwargs = dict(
            echo=settings.SQL_ECHO,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            connect_timeout=settings.DB_CONNECT_TIMEOUT,
            socket_timeout=settings.DB_SOCKET_TIMEOUT,
            retry_policy=RetryPolicy(
                max_attempts=settings.DB_MAX_RETRIES,
                base_delay=settings.DB_RETRY_DELAY,
                backoff_factor=settings.DB_RETRY_BACKOFF,
            ),
        )
        kwargs.update(overrides)
        return cls(settings.DATABASE_URL, **kwargs)

    @staticmethod
    def _engine_kwargs(database_url: str, **options: Any) -> Dict[str, Any]:
        """
        Get engine keyword arguments based on database type.
        Different databases support different connection options.
        """
        url = make_url(database_url)
        kwargs: Dict[str, Any] = {"echo": options["echo"]}

        if url.get_backend_name() == "sqlite":
            if url.database in (None, "", ":memory:"):
                # One shared connection, otherwise every checkout sees an empty database
                kwargs.update({
                    "poolclass": StaticPool,
                    "connect_args": {"check_same_thread": False},
                })
            else:
                kwargs["connect_args"] = {"timeout": options["connect_timeout"]}
        else:
            kwargs.update({
                "pool_size": options["pool_size"],
                "max_overflow": options["max_overflow"],
                "pool_timeout": options["pool_timeout"],
                "pool_pre_ping": True,
                "pool_recycle": 300,  # Recycle connections every 5 minutes
            })
            if url.get_driver_name() == "asyncpg":
                kwargs["connect_args"] = {
                    "timeout": options["connect_timeout"],
                    "command_timeout": options["socket_timeout"],
                }

        return kwargs

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def _probe(self) -> None:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def connect(self) -> None:
        """
        Verify the database is reachable, retrying with backoff.

        Raises:
            DatabaseConnectionError: If every attempt fails
        """
        policy = self.retry_policy
        for attempt in range(1, policy.max_attempts + 1):
            try:
                await self._probe()
                self._connected = True
                logger.info(f"Database connection established (attempt {attempt}/{policy.max_attempts})")
                return
            except (SQLAlchemyError, OSError) as e:
                self._connected = False
                if attempt == policy.max_attempts:
                    logger.error(f"Database connection failed after {attempt} attempts: {e}")
                    raise DatabaseConnectionError(
                        "Could not connect to the database", original_exception=e
                    )
                delay = policy.delay_for(attempt)
                logger.warning(
                    f"Database connection attempt {attempt}/{policy.max_attempts} failed "
                    f"({type(e).__name__}); retrying in {delay:.1f}s"
                )
                await self._sleep(delay)

    async def ping(self) -> bool:
        """Single connectivity check for health reporting."""
        try:
            await self._probe()
            return True
        except (SQLAlchemyError, OSError) as e:
            logger.warning(f"Database ping failed: {e}")
            return False

    def session(self) -> AsyncSession:
        """Open a new session; use as an async context manager."""
        return self.session_factory()

    async def dispose(self) -> None:
        """Close the pool and every pooled connection."""
        await self.engine.dispose()
        self._connected = False
        logger.info("Database engine disposed")
