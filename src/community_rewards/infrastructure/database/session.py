"""Database engine lifecycle and transactional sessions."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import event, exc as sa_exc, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from community_rewards.core.config import Settings
from community_rewards.core.errors import (
    RedemptionError,
    StoreConflictError,
    StoreConstraintError,
    StoreTimeoutError,
)
from community_rewards.models.base import Base

logger = logging.getLogger(__name__)

# PostgreSQL SQLSTATE codes
LOCK_TIMEOUT_SQLSTATES = frozenset({"55P03", "57014"})  # lock_not_available, query_canceled
CONFLICT_SQLSTATES = frozenset({"40001", "40P01"})  # serialization_failure, deadlock_detected


def _sqlstate(exc: sa_exc.DBAPIError) -> str | None:
    for attr in ("sqlstate", "pgcode"):
        code = getattr(exc.orig, attr, None)
        if code:
            return str(code)
    return None


def translate_store_error(exc: sa_exc.DBAPIError) -> RedemptionError | None:
    """Map a driver error onto the store error taxonomy.

    @param exc - SQLAlchemy DBAPI error raised inside a transaction
    @returns StoreTimeoutError, StoreConflictError or StoreConstraintError,
        or None if the error is not an infrastructure failure (programming
        errors propagate as-is)
    """
    code = _sqlstate(exc)
    detail = str(exc.orig)

    if code in CONFLICT_SQLSTATES:
        return StoreConflictError(
            "Transaction conflicted with a concurrent update, retry the request",
            sqlstate=code,
        )

    if isinstance(exc, sa_exc.IntegrityError):
        return StoreConstraintError(
            f"Write rejected by a store constraint: {detail}",
            sqlstate=code,
        )

    if code in LOCK_TIMEOUT_SQLSTATES or "database is locked" in detail.lower():
        return StoreTimeoutError(
            "Store unavailable: could not acquire locks in time",
            sqlstate=code,
        )

    if exc.connection_invalidated or isinstance(exc, sa_exc.OperationalError):
        return StoreTimeoutError(
            f"Store operation failed: {detail}",
            sqlstate=code,
        )

    return None


def _install_sqlite_locking(engine: AsyncEngine) -> None:
    """Make every SQLite transaction take the write lock up-front.

    SQLite has no row locks; BEGIN IMMEDIATE serialises writers for the whole
    transaction, which gives the same read-then-write guarantees as
    SELECT ... FOR UPDATE on PostgreSQL.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection: Any, connection_record: Any) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN IMMEDIATE")


class Database:
    """Owns the async engine and session factory.

    Lifecycle is explicit: call ``open()`` before use and ``await close()`` on
    shutdown. The FastAPI lifespan does both.

    Example:
        database = Database("postgresql+asyncpg://...")
        database.open()
        async with database.transaction() as session:
            ...
        await database.close()
    """

    def __init__(
        self,
        url: str,
        *,
        lock_timeout_ms: int = 5000,
        echo: bool = False,
        **engine_options: Any,
    ) -> None:
        """Initialize database handle.

        @param url - Async SQLAlchemy URL
        @param lock_timeout_ms - Maximum wait for row locks per transaction
        @param echo - Log SQL statements
        @param engine_options - Extra create_async_engine options (pool sizing)
        """
        self.url = url
        self.lock_timeout_ms = lock_timeout_ms
        self._echo = echo
        self._engine_options = engine_options
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        """Build a database handle from application settings."""
        options: dict[str, Any] = {}
        if make_url(settings.database_url).get_backend_name() != "sqlite":
            options = {
                "pool_size": settings.db_pool_size,
                "max_overflow": settings.db_max_overflow,
                "pool_timeout": settings.db_pool_timeout,
                "pool_recycle": 1800,
                "pool_pre_ping": True,
            }
        return cls(
            settings.database_url,
            lock_timeout_ms=settings.store_lock_timeout_ms,
            echo=settings.debug,
            **options,
        )

    @property
    def is_sqlite(self) -> bool:
        return make_url(self.url).get_backend_name() == "sqlite"

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database is not open")
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            raise RuntimeError("Database is not open")
        return self._session_factory

    def open(self) -> None:
        """Create the engine and session factory (idempotent)."""
        if self._engine is not None:
            return

        options = dict(self._engine_options)
        if self.is_sqlite:
            options.setdefault("connect_args", {"timeout": self.lock_timeout_ms / 1000})

        self._engine = create_async_engine(self.url, echo=self._echo, **options)
        if self.is_sqlite:
            _install_sqlite_locking(self._engine)

        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            autoflush=False,
            expire_on_commit=False,
        )
        logger.info(f"Database opened ({self._engine.dialect.name})")

    async def close(self) -> None:
        """Dispose the engine and its connection pool."""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Database closed")

    async def create_all(self) -> None:
        """Create all tables. Development and test helper; production uses Alembic."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Plain session for read-only work."""
        async with self.session_factory() as session:
            yield session

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """Run a block atomically.

        Commits when the block exits normally and rolls back on any
        exception, so no partial write is ever visible. Driver failures are
        re-raised as store errors (see translate_store_error).
        """
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    await self._apply_lock_timeout(session)
                    yield session
        except sa_exc.DBAPIError as exc:
            translated = translate_store_error(exc)
            if translated is None:
                raise
            logger.warning(f"Store transaction aborted: {translated.kind.value}: {exc.orig}")
            raise translated from exc
        except sa_exc.TimeoutError as exc:
            logger.warning("Store transaction aborted: connection pool exhausted")
            raise StoreTimeoutError(
                "Store unavailable: timed out waiting for a connection"
            ) from exc

    async def _apply_lock_timeout(self, session: AsyncSession) -> None:
        if self.engine.dialect.name == "postgresql":
            await session.execute(
                text(f"SET LOCAL lock_timeout = '{int(self.lock_timeout_ms)}ms'")
            )
