"""Database configuration and session management."""

from collections.abc import AsyncIterator, Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from shoppinglist.config import settings

DATABASE_URL = settings.database_url
_SQL_ECHO = settings.environment.lower() == "development" and settings.log_level.upper() == "DEBUG"


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


# Async engine for CRUD endpoints
async_engine = create_async_engine(DATABASE_URL, echo=_SQL_ECHO)
AsyncSessionLocal = async_sessionmaker(
    async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# Sync engine for export/import and backup jobs
sync_engine = create_engine(
    settings.sync_database_url,
    echo=_SQL_ECHO,
    pool_pre_ping=True,
)
SyncSessionLocal = sessionmaker(sync_engine, expire_on_commit=False)


async def get_db() -> AsyncIterator[AsyncSession]:
    """Dependency for async FastAPI endpoints."""
    async with AsyncSessionLocal() as session:
        yield session


@contextmanager
def transaction(session: Session | None = None) -> Iterator[Session]:
    """Run a block of work in exactly one transaction.

    Without a session, a pooled one is opened, committed or rolled back,
    and always closed. A session that is already inside a transaction gets
    a savepoint instead, leaving the final commit to its owner.
    """
    own_session = session is None
    if session is None:
        session = SyncSessionLocal()
    try:
        if session.in_transaction():
            with session.begin_nested():
                yield session
        else:
            with session.begin():
                yield session
    finally:
        if own_session:
            session.close()


def get_sync_db() -> Iterator[Session]:
    """Dependency for the data transfer endpoints, which run in the threadpool."""
    session = SyncSessionLocal()
    try:
        yield session
    finally:
        session.close()
