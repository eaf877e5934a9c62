"""Async database access for CertLedger.

One engine per process. Sessions commit when the ``get_session`` block exits
cleanly; services that must act on durable state (file cleanup after an update
or delete) commit earlier themselves.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from certledger.common.config import CertLedgerSettings, get_settings
from certledger.common.logging import get_logger
from certledger.common.models import Base

# Every table must be registered on Base.metadata before create_all().
import certledger.companies.models  # noqa: F401
import certledger.users.models  # noqa: F401
import certledger.certificates.models  # noqa: F401
import certledger.audit.models  # noqa: F401
import certledger.transactions.models  # noqa: F401

logger = get_logger("database")


def sqlite_file_path(db_url: str) -> Path | None:
    """Return the on-disk file for a SQLite URL, or None for memory and other backends."""
    url = make_url(db_url)
    if url.get_backend_name() != "sqlite" or url.database in (None, "", ":memory:"):
        return None
    return Path(url.database)


class DatabaseManager:
    """Owns the engine and hands out certificate-store sessions."""

    def __init__(self, settings: CertLedgerSettings | None = None):
        self._settings = settings or get_settings()
        self.engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    async def init(self) -> None:
        db_url = self._settings.db_url
        db_file = sqlite_file_path(db_url)
        if db_file is not None:
            db_file.parent.mkdir(parents=True, exist_ok=True)

        self.engine = create_async_engine(db_url, echo=False)
        # Results outlive their session in routers and tests, so keep attributes loaded.
        self._session_factory = async_sessionmaker(self.engine, expire_on_commit=False)
        logger.info("Database ready", extra={"backend": make_url(db_url).get_backend_name()})

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        if self._session_factory is None:
            raise RuntimeError("DatabaseManager not initialized, call init() first")
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def create_all(self) -> None:
        if self.engine is None:
            raise RuntimeError("DatabaseManager not initialized, call init() first")
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        if self.engine is None:
            return
        await self.engine.dispose()
        self.engine = None
        self._session_factory = None
