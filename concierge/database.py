"""Async SQLAlchemy engine, session factory, and declarative base."""

import uuid
from datetime import datetime

from sqlalchemy import func, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from concierge.config import settings

engine = create_async_engine(
    settings.async_database_url,
    echo=settings.debug,
    pool_pre_ping=True,
    pool_size=10,
    max_overflow=20,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class TimestampMixin:
    """Mixin that adds created_at and updated_at columns."""

    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        onupdate=func.now(),
    )


class UUIDPrimaryKeyMixin:
    """Mixin that adds a UUID primary key column."""

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)


async def get_db() -> AsyncSession:  # type: ignore[misc]
    """Yield a request-scoped session: commit on success, roll back on error.

    Usage::

        @router.get("/reservations")
        async def list_reservations(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


# ---------------------------------------------------------------------------
# PostgreSQL helpers
# ---------------------------------------------------------------------------

REQUIRED_EXTENSIONS = ("btree_gist",)


async def ensure_extensions(conn: AsyncConnection) -> None:
    """Create the PostgreSQL extensions the schema depends on.

    ``btree_gist`` lets the reservation exclusion constraint combine an
    equality on ``unit_id`` with a range overlap in one GiST index.
    """
    for extension in REQUIRED_EXTENSIONS:
        await conn.execute(text(f"CREATE EXTENSION IF NOT EXISTS {extension}"))


def is_violation_of(exc: IntegrityError, constraint_name: str) -> bool:
    """Whether ``exc`` was raised by the named constraint or index.

    asyncpg exposes ``constraint_name`` on the driver exception, which
    SQLAlchemy keeps as the ``__cause__`` of ``exc.orig``.
    """
    orig = exc.orig
    for candidate in (orig, getattr(orig, "__cause__", None)):
        name = getattr(candidate, "constraint_name", None)
        if name is not None:
            return name == constraint_name
    return constraint_name in str(orig)
