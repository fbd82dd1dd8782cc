"""
Connection to the host platform's database.

subgate shares the host's database rather than owning one: accounts,
channels, follows and videos are read from the host's tables, and the only
rows subgate writes are its own plugin storage and plugin setting entries.
``DatabaseManager`` owns the single async engine used for both.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from subgate.config.settings import settings

# Host connections are recycled before typical server-side idle timeouts
POSTGRES_POOL_RECYCLE_SECONDS = 3600


def engine_options(database_url: str) -> dict[str, object]:
    """Engine keyword arguments for a host database URL."""
    options: dict[str, object] = {
        "echo": settings.debug or settings.db_log_queries,
        "pool_pre_ping": True,
    }
    if database_url.startswith("postgresql"):
        options["pool_recycle"] = POSTGRES_POOL_RECYCLE_SECONDS
    return options


class DatabaseManager:
    """
    Lazily built engine and session factory for the host database.

    Parameters
    ----------
    database_url : str | None
        Connection URL; defaults to ``settings.database_url``.
    """

    def __init__(self, database_url: str | None = None) -> None:
        self._database_url = database_url
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def database_url(self) -> str:
        return self._database_url or settings.database_url

    def get_engine(self) -> AsyncEngine:
        if self._engine is None:
            url = self.database_url
            self._engine = create_async_engine(url, **engine_options(url))
        return self._engine

    def get_session_factory(self) -> async_sessionmaker[AsyncSession]:
        """
        Session factory shared by the flag store, the membership resolver
        and the settings manager.

        Sessions keep loaded rows usable after commit, since flag and
        membership lookups return values read inside short transactions.
        """
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                bind=self.get_engine(),
                class_=AsyncSession,
                expire_on_commit=False,
            )
        return self._session_factory

    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Yield one request-scoped session, committed on success."""
        async with self.get_session_factory()() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def close(self) -> None:
        """Dispose of the engine; the next use reconnects."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
        self._session_factory = None


db_manager = DatabaseManager()
