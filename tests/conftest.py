"""Shared test constants, fixtures, and factory functions."""

from collections.abc import AsyncIterator
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from blog_posts_api.config import Settings
from blog_posts_api.main import app
from blog_posts_api.ratelimit import FixedWindowRateLimiter
from blog_posts_api.repository import PostRepository, metadata
from blog_posts_api.tokens import TokenService

# -- Constants --

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "correct-horse-battery-staple"
JWT_SECRET = "test-jwt-secret-0123456789abcdef0123456789"
SQLITE_URL = "sqlite+aiosqlite://"

POST_FIELDS: dict[str, str] = {"title": "A", "content": "B", "author": "C"}
MISSING_POST_FIELDS = "Error: Missing fields must be filled (title, content, author)"
NOT_FOUND = "Unsuccessful: Post cannot be found!"
GENERIC_FAILURE = "Unsuccessful: Something went wrong! Please try again later."


# -- Factories --


def make_settings(**overrides: Any) -> Settings:
    """Create a Settings instance with test defaults. Override any field."""
    defaults: dict[str, Any] = {
        "admin_username": ADMIN_USERNAME,
        "admin_password": ADMIN_PASSWORD,
        "jwt_secret": JWT_SECRET,
        "database_url": SQLITE_URL,
    }
    return Settings(**(defaults | overrides))


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def make_engine(create_tables: bool = True) -> AsyncEngine:
    """In-memory SQLite engine; StaticPool keeps one shared connection alive."""
    engine = create_async_engine(SQLITE_URL, poolclass=StaticPool)
    if create_tables:
        async with engine.begin() as conn:
            await conn.run_sync(metadata.create_all)
    return engine


# -- Fixtures --


@pytest.fixture
def env_vars(monkeypatch: pytest.MonkeyPatch) -> None:
    """Set required env vars for Settings."""
    monkeypatch.setenv("ADMIN_USERNAME", ADMIN_USERNAME)
    monkeypatch.setenv("ADMIN_PASSWORD", ADMIN_PASSWORD)
    monkeypatch.setenv("JWT_SECRET", JWT_SECRET)


@pytest.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    engine = await make_engine()
    yield engine
    await engine.dispose()


@pytest.fixture
def repository(engine: AsyncEngine) -> PostRepository:
    return PostRepository(engine)


@pytest.fixture
def tokens() -> TokenService:
    return TokenService(JWT_SECRET)


@pytest.fixture
def auth_headers(tokens: TokenService) -> dict[str, str]:
    return bearer(tokens.issue(ADMIN_USERNAME))


@pytest.fixture
async def client(repository: PostRepository, tokens: TokenService) -> AsyncIterator[AsyncClient]:
    """AsyncClient wired to the FastAPI app with test settings and an in-memory store."""
    app.state.settings = make_settings()
    app.state.repository = repository
    app.state.tokens = tokens
    app.state.rate_limiter = FixedWindowRateLimiter(limit=1000, window_seconds=120)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
