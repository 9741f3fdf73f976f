"""
SocialConnect Backend — Database Session Management
=====================================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
How:   Creates an async engine with connection pooling, provides a session
       dependency that auto-commits on success and auto-rolls-back on error.
Who:   Used by route handlers via FastAPI's dependency injection system and
       by services, which receive the session as their first argument.
When:  Engine is created at module import; sessions are created per-request.

This module is the single configured handle to the database. Services issue
SQLAlchemy statements against the session directly; there is no repository
layer between them.

Connection Pooling Strategy (PostgreSQL):
    pool_size=20:      Persistent connections for normal load
    max_overflow=10:   Temporary connections for traffic spikes (total max = 30)
    pool_pre_ping:     Validates connections before use
    pool_recycle=3600: Recycles connections every hour

SQLite (tests only) runs with NullPool and foreign keys switched on, so
ON DELETE CASCADE behaves the same way it does in PostgreSQL.
"""

import logging
from typing import Any, AsyncGenerator, Dict, Optional, Sequence

from sqlalchemy import event, insert
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from app.config import settings

logger = logging.getLogger(__name__)


def _engine_options() -> Dict[str, Any]:
    """Pool options for the configured backend."""
    if settings.is_sqlite:
        return {"poolclass": NullPool}
    return {
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_pre_ping": settings.db_pool_pre_ping,
        "pool_recycle": 3600,
    }


# ── Engine Configuration ──────────────────────────────────────────────────
engine = create_async_engine(
    settings.database_url,
    # Echo SQL queries in DEBUG mode for development visibility
    echo=settings.log_level == "DEBUG",
    **_engine_options(),
)


if settings.is_sqlite:
    @event.listens_for(engine.sync_engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: attributes stay readable after commit, which the
# notification publisher relies on.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Every model registers with this metadata, which Alembic reads for
    migrations and the test suite uses for create_all/drop_all.
    """
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler (the handler performs queries)
        3. On success: commits the transaction
        4. On error: rolls back the transaction
        5. Always: closes the session (returns connection to pool)

    Example usage in a route:
        @router.get("/posts/{post_id}")
        async def get_post(post_id: UUID, db: AsyncSession = Depends(get_db_session)):
            return await post_service.get_post(db, post_id)
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise  # Re-raise so the global error handler can respond
        finally:
            await session.close()


# ── Conditional Insert ────────────────────────────────────────────────────
async def insert_or_ignore(
    db: AsyncSession,
    model: Any,
    values: Dict[str, Any],
    conflict_columns: Sequence[str],
) -> Optional[Any]:
    """
    Insert one row unless it collides with a unique constraint.

    What:    A single INSERT ... ON CONFLICT DO NOTHING RETURNING id.
    Returns: The new row's id, or None when the row already existed.

    The uniqueness constraint decides the outcome, so two concurrent
    requests inserting the same (user, post) pair cannot both succeed.
    Dialects without ON CONFLICT fall back to a savepoint around a plain
    insert.
    """
    dialect = db.get_bind().dialect.name

    if dialect in ("postgresql", "sqlite"):
        insert_fn = pg_insert if dialect == "postgresql" else sqlite_insert
        stmt = (
            insert_fn(model)
            .values(**values)
            .on_conflict_do_nothing(index_elements=list(conflict_columns))
            .returning(model.id)
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    try:
        async with db.begin_nested():
            result = await db.execute(insert(model).values(**values).returning(model.id))
            return result.scalar_one()
    except IntegrityError:
        logger.debug("Conflicting insert into %s ignored", model.__tablename__)
        return None


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def dispose_engine() -> None:
    """
    What:  Gracefully closes all connections in the pool.
    When:  Called during application shutdown (lifespan handler).
    """
    await engine.dispose()
