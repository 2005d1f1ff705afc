"""
DevCamper Backend — Database Session Management
=================================================

What:  Async SQLAlchemy engine, session factory, declarative base and the
       FastAPI session dependency.
Why:   Centralizes all database connection logic in one place.
How:   Creates an async engine with connection pooling, provides a session
       dependency that auto-commits on success and auto-rolls-back on error.
Who:   Used by route handlers via FastAPI's dependency injection system.
When:  Engine is created at module import; sessions are created per-request.

Document view:
    Rows leave the service layer as JSON-like documents (plain dicts) rather
    than fixed response models, because listings may project an arbitrary
    whitelist of fields (`?select=name,careers`). `Base.to_document()` is the
    single place that turns a mapped instance into such a document.
"""

from typing import Any, AsyncGenerator, Dict, List, Optional, Sequence

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.config import settings


def _engine_options() -> Dict[str, Any]:
    # SQLite (tests, local runs) uses a pool that rejects sizing arguments
    options: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if not settings.is_sqlite:
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return options


# ── Engine Configuration ──────────────────────────────────────────────────
engine = create_async_engine(settings.database_url, **_engine_options())

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: instances stay readable after commit, which the
# document serialization relies on
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Besides registering metadata (used by Alembic), it gives every model a
    document view:

        __hidden_columns__:  columns that are folded into a composed field
                             instead of being exposed directly
        __document_extras__: names of composed fields, each backed by a
                             property of the same name on the model
        __field_aliases__:   dotted document paths that resolve to a column
                             (e.g. "location.city" → "city")
    """

    __hidden_columns__: Sequence[str] = ()
    __document_extras__: Sequence[str] = ()
    __field_aliases__: Dict[str, str] = {}

    @classmethod
    def document_fields(cls) -> List[str]:
        """Field names a document of this model can contain, in column order."""
        columns = [
            attr.key
            for attr in cls.__mapper__.column_attrs
            if attr.key not in cls.__hidden_columns__
        ]
        return columns + list(cls.__document_extras__)

    @classmethod
    def resolve_column(cls, field: str):
        """
        Map a public field name (or dotted alias) to its column attribute.

        Returns None when the name is not a queryable column.
        """
        name = cls.__field_aliases__.get(field, field)
        if name in cls.__hidden_columns__ and field == name:
            return None
        if name not in cls.__mapper__.column_attrs:
            return None
        return getattr(cls, name)

    def to_document(self, fields: Optional[Sequence[str]] = None) -> Dict[str, Any]:
        """
        Serialize this instance to a document.

        `fields` is a whitelist projection; `id` is always included, like a
        document store's primary key.
        """
        names = self.document_fields()
        if fields is not None:
            wanted = set(fields)
            names = [name for name in names if name == "id" or name in wanted]
        return {name: getattr(self, name) for name in names}


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back the transaction
        5. Always: closes the session (returns connection to pool)
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def dispose_engine() -> None:
    """Gracefully closes all connections in the pool (application shutdown)."""
    await engine.dispose()
