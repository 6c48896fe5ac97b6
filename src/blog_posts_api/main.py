"""FastAPI application entrypoint."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

from blog_posts_api.auth import router as auth_router
from blog_posts_api.config import Settings
from blog_posts_api.errors import register_error_handlers
from blog_posts_api.posts import router as posts_router
from blog_posts_api.ratelimit import FixedWindowRateLimiter, rate_limit_middleware
from blog_posts_api.repository import PostRepository, create_engine
from blog_posts_api.telemetry import (
    add_trace_context,
    configure_stdlib_logging,
    init_telemetry,
    shutdown_telemetry,
)
from blog_posts_api.tokens import TokenService

structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_trace_context,  # type: ignore[list-item]
        structlog.processors.format_exc_info,
        structlog.dev.ConsoleRenderer(),
    ],
)

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    init_telemetry()
    settings = Settings()  # type: ignore[call-arg]
    configure_stdlib_logging(settings.log_level)

    engine = create_engine(settings)
    repository = PostRepository(engine)
    if settings.create_schema:
        await repository.create_schema()

    app.state.settings = settings
    app.state.repository = repository
    app.state.tokens = TokenService(settings.jwt_secret, settings.token_ttl_seconds)
    app.state.rate_limiter = FixedWindowRateLimiter(
        settings.rate_limit_requests, settings.rate_limit_window_seconds
    )

    if not settings.jwt_secret:
        await log.awarning(
            "jwt_secret_not_configured",
            msg="Login and all mutating endpoints will answer 500 until JWT_SECRET is set",
        )

    await log.ainfo("service started", host=settings.host, port=settings.port)
    yield

    await engine.dispose()
    await log.ainfo("service stopped")
    shutdown_telemetry()


app = FastAPI(title="Blog Posts API", lifespan=lifespan)
app.middleware("http")(rate_limit_middleware)
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])
register_error_handlers(app)
app.include_router(auth_router)
app.include_router(posts_router)
FastAPIInstrumentor.instrument_app(app)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


def run() -> None:
    """Console entrypoint: serve the app with uvicorn on HOST:PORT."""
    settings = Settings()  # type: ignore[call-arg]
    uvicorn.run(
        "blog_posts_api.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
        log_config=None,
    )
