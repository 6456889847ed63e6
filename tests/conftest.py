"""Pytest configuration and shared fixtures for unit and integration tests."""

from __future__ import annotations

import os

# Settings are validated at import time; give the suite a complete environment.
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("POSTGRES_USER", "postgres")
os.environ.setdefault("POSTGRES_PASSWORD", "postgres")
os.environ.setdefault("POSTGRES_HOST", "localhost")
os.environ.setdefault("POSTGRES_PORT", "5432")
os.environ.setdefault("POSTGRES_DB", "ichidan_dokusho")
os.environ.setdefault("REDIS_HOST", "localhost")
os.environ.setdefault("REDIS_PORT", "6379")
os.environ.setdefault("REDIS_DB", "0")
os.environ.setdefault("RATE_LIMIT_STORAGE_URL", "memory://")
os.environ.setdefault("JWT_SECRET_KEY", "Test-Secret-Key-For-The-Suite-0123456789!")
os.environ.setdefault("GOOGLE_CLIENT_ID", "test-client-id.apps.googleusercontent.com")

from collections.abc import AsyncIterator, Awaitable, Callable, Iterator  # noqa: E402
from typing import cast  # noqa: E402
from urllib.parse import urlparse  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from pydantic import PostgresDsn  # noqa: E402
from sqlalchemy import insert, text  # noqa: E402
from sqlalchemy.exc import SQLAlchemyError  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.core import config  # noqa: E402
from app.core.auth import create_access_token  # noqa: E402
from app.core.rate_limit import limiter  # noqa: E402
from app.db import models  # noqa: E402,F401
from app.db.base import Base  # noqa: E402
from app.db.models.user import User  # noqa: E402
from app.main import create_app  # noqa: E402


def _get_test_database_url() -> str:
    """Resolve the test database URL from env or default derivation."""
    env_url = os.getenv("TEST_DATABASE_URL")
    if env_url:
        return env_url

    base_db_url = str(config.settings.database_url)
    parsed_base = urlparse(base_db_url)
    base_db_name = parsed_base.path.lstrip("/") or "postgres"
    return parsed_base._replace(path=f"/{base_db_name}_test").geturl()


test_database_url = _get_test_database_url()

_parsed_test = urlparse(test_database_url)
postgres_url = _parsed_test._replace(path="/postgres").geturl()


@pytest.fixture(autouse=True)
def reset_rate_limits() -> Iterator[None]:
    """Rate limit counters are process-wide; start every test from zero."""
    limiter.reset()
    yield


# Async fixtures (session-scoped, for async tests that need database access).


@pytest_asyncio.fixture(scope="session")
async def ensure_test_database() -> None:
    """Ensures the test database exists, skipping integration tests when Postgres is down."""
    test_db_name = _parsed_test.path.lstrip("/")
    admin_engine = create_async_engine(
        postgres_url, pool_pre_ping=True, echo=False, isolation_level="AUTOCOMMIT"
    )

    try:
        async with admin_engine.connect() as conn:
            result = await conn.execute(
                text("SELECT 1 FROM pg_database WHERE datname = :db_name"),
                {"db_name": test_db_name},
            )
            if result.scalar() is None:
                await conn.execute(text(f'CREATE DATABASE "{test_db_name}"'))
    except (OSError, SQLAlchemyError) as exc:
        pytest.skip(f"PostgreSQL test database unreachable: {exc}")
    finally:
        admin_engine.sync_engine.dispose()


@pytest_asyncio.fixture(scope="session")
async def test_engine(ensure_test_database: None) -> AsyncIterator[AsyncEngine]:
    """Creates a test database engine (reused across all tests)."""
    engine = create_async_engine(test_database_url, pool_pre_ping=True, echo=False)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="session")
async def setup_test_db(test_engine: AsyncEngine) -> AsyncIterator[None]:
    """Creates test database tables."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture(scope="session")
async def test_session_maker(
    setup_test_db: None, test_engine: AsyncEngine
) -> async_sessionmaker[AsyncSession]:
    """Creates a session maker (reused across all tests)."""
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db_session(
    test_session_maker: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """Creates a database session for a test (function-scoped).

    Every table is emptied afterwards so data never leaks between tests.
    """
    async with test_session_maker() as session:
        try:
            yield session
        finally:
            await session.rollback()
            for table in reversed(Base.metadata.sorted_tables):
                await session.execute(table.delete())
            await session.commit()


@pytest_asyncio.fixture(scope="session")
async def async_app(test_session_maker: async_sessionmaker[AsyncSession]) -> AsyncIterator[FastAPI]:
    """FastAPI app bound to the test database, shared by all async tests."""
    config.settings.environment = "test"
    config.settings.database_url = cast(PostgresDsn, test_database_url)

    fastapi_app = create_app()

    yield fastapi_app


@pytest_asyncio.fixture(scope="function")
async def async_http_client(
    async_app: FastAPI, db_session: AsyncSession
) -> AsyncIterator[AsyncClient]:
    """Creates an async http client; depends on ``db_session`` for per-test cleanup."""
    transport = ASGITransport(app=async_app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest_asyncio.fixture(scope="function")
async def create_user(
    db_session: AsyncSession,
) -> Callable[..., Awaitable[tuple[User, dict[str, str]]]]:
    """Factory inserting a user and returning it with bearer auth headers."""
    counter = 0

    async def _create(email: str | None = None, name: str = "Reader") -> tuple[User, dict[str, str]]:
        nonlocal counter
        counter += 1
        result = await db_session.execute(
            insert(User)
            .values(
                google_sub=f"google-sub-{counter}",
                email=email or f"reader{counter}@example.com",
                name=name,
            )
            .returning(User)
        )
        user = result.scalar_one()
        await db_session.commit()
        token = create_access_token(data={"sub": str(user.id), "email": user.email})
        return user, {"Authorization": f"Bearer {token}"}

    return _create


# Synchronous fixtures (function-scoped, for synchronous tests that don't need database access)


@pytest.fixture(scope="function")
def app() -> FastAPI:
    """Creates a FastAPI app for synchronous tests that never touch the database."""
    config.settings.environment = "test"

    return create_app()


@pytest.fixture(scope="function")
def http_client(app: FastAPI) -> TestClient:
    """Creates a synchronous http client."""
    return TestClient(app)
