"""Posts store: parameterized SQL over a pooled async SQLAlchemy engine."""

from __future__ import annotations

import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from sqlalchemy import (
    Column,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    delete,
    insert,
    select,
    update,
)
from sqlalchemy.engine import Row
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from blog_posts_api.config import Settings
from blog_posts_api.errors import NotFound, StoreUnavailable
from blog_posts_api.metrics import store_duration, store_errors_total
from blog_posts_api.models import Post, PostFields

log = structlog.get_logger()

metadata = MetaData()

# Field presence is enforced by request validation, not by column constraints.
posts_table = Table(
    "posts",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", String(255)),
    Column("content", Text),
    Column("author", String(255)),
)

_COLUMNS = (posts_table.c.id, posts_table.c.title, posts_table.c.content, posts_table.c.author)


def create_engine(settings: Settings) -> AsyncEngine:
    """Create the shared connection pool for the configured store."""
    return create_async_engine(
        settings.database_dsn,
        pool_size=settings.db_pool_size,
        pool_recycle=settings.db_pool_recycle,
        pool_pre_ping=True,
    )


def _to_post(row: Row) -> Post:
    return Post.model_validate(dict(row._mapping))


class PostRepository:
    """CRUD over the ``posts`` relation.

    Every operation borrows one pooled connection, runs a single statement
    inside a transaction and returns the connection. Driver failures are
    logged and re-raised as StoreUnavailable.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    @asynccontextmanager
    async def _connection(self, operation: str) -> AsyncIterator[AsyncConnection]:
        start = time.monotonic()
        try:
            async with self._engine.begin() as conn:
                yield conn
        except (SQLAlchemyError, OSError) as exc:
            store_errors_total.add(1, {"operation": operation})
            await log.aerror("store_operation_failed", operation=operation, error=str(exc))
            raise StoreUnavailable() from exc
        finally:
            store_duration.record(time.monotonic() - start, {"operation": operation})

    async def create_schema(self) -> None:
        async with self._connection("create_schema") as conn:
            await conn.run_sync(metadata.create_all)

    async def list_all(self) -> list[Post]:
        async with self._connection("list_all") as conn:
            result = await conn.execute(select(*_COLUMNS))
            rows = result.all()
        return [_to_post(row) for row in rows]

    async def get_by_id(self, post_id: int) -> Post:
        async with self._connection("get_by_id") as conn:
            result = await conn.execute(select(*_COLUMNS).where(posts_table.c.id == post_id))
            row = result.first()
        if row is None:
            raise NotFound()
        return _to_post(row)

    async def insert(self, fields: PostFields) -> Post:
        async with self._connection("insert") as conn:
            result = await conn.execute(insert(posts_table).values(**fields.model_dump()))
            post_id = result.inserted_primary_key[0]
        return Post(id=post_id, **fields.model_dump())

    async def update_by_id(self, post_id: int, fields: PostFields) -> Post:
        """Replace title, content and author of an existing post."""
        async with self._connection("update_by_id") as conn:
            result = await conn.execute(
                update(posts_table)
                .where(posts_table.c.id == post_id)
                .values(**fields.model_dump())
            )
            matched = result.rowcount
        if matched == 0:
            raise NotFound()
        return Post(id=post_id, **fields.model_dump())

    async def delete_by_id(self, post_id: int) -> int:
        async with self._connection("delete_by_id") as conn:
            result = await conn.execute(delete(posts_table).where(posts_table.c.id == post_id))
            deleted = result.rowcount
        if deleted == 0:
            raise NotFound()
        return post_id
