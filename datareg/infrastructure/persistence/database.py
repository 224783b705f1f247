"""Database engine and session factory creation."""

import os
from pathlib import Path
from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from datareg.config import Config


def is_memory_sqlite(url: str) -> bool:
    """True for SQLite URLs that name no file (``sqlite+aiosqlite://`` or ``:memory:``)."""
    if not url.startswith("sqlite"):
        return False
    database = make_url(url).database
    return not database or database == ":memory:"


def _expand_sqlite_path(url: str) -> str:
    """Expand ~ in SQLite file URLs and ensure the parent directory exists."""
    if not url.startswith("sqlite") or is_memory_sqlite(url):
        return url

    prefix_end = url.index("///") + 3
    prefix = url[:prefix_end]
    abs_path = os.path.abspath(os.path.expanduser(url[prefix_end:]))
    Path(abs_path).parent.mkdir(parents=True, exist_ok=True)
    return f"{prefix}{abs_path}"


def create_db_engine(config: Config) -> AsyncEngine:
    """Create async database engine.

    An in-memory SQLite database only exists inside one connection, so it gets
    a StaticPool. File databases use a normal pool: sharing one connection
    between concurrent sessions would interleave their transactions.
    """
    url = _expand_sqlite_path(config.database.url)
    engine_kwargs: dict[str, Any] = {"echo": config.database.echo}

    if is_memory_sqlite(url):
        engine_kwargs["poolclass"] = StaticPool
        engine_kwargs["connect_args"] = {"check_same_thread": False}
    elif url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False, "timeout": 30}
    else:
        engine_kwargs.update(pool_pre_ping=True, pool_size=5, max_overflow=10)

    return create_async_engine(url, **engine_kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory for dependency injection."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
