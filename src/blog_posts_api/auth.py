"""Admin login endpoint and the bearer-token gate for mutating routes."""

import hmac

import structlog
from fastapi import APIRouter, Header, Request

from blog_posts_api.config import Settings
from blog_posts_api.errors import (
    AuthTokenMissing,
    BlogApiError,
    InvalidCredentials,
    ServerMisconfigured,
)
from blog_posts_api.metrics import auth_rejections_total, login_attempts_total
from blog_posts_api.models import Credentials, LoginResponse, TokenClaims
from blog_posts_api.payloads import read_body, require_fields
from blog_posts_api.tokens import TokenService

log = structlog.get_logger()

router = APIRouter()

_BEARER = "bearer"


def _extract_bearer(authorization: str | None) -> str:
    if not authorization:
        raise AuthTokenMissing()
    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != _BEARER or not token:
        raise AuthTokenMissing()
    return token


def _matches(received: str, expected: str) -> bool:
    return hmac.compare_digest(received.encode(), expected.encode())


async def require_token(
    request: Request, authorization: str | None = Header(default=None)
) -> TokenClaims:
    """Gate for mutating endpoints. Use as a FastAPI dependency.

    Missing token → 401, no signing secret → 500, bad or expired token → 403.
    On success the claims are stored on ``request.state.user`` and returned.
    """
    tokens: TokenService = request.app.state.tokens
    try:
        claims = tokens.verify(_extract_bearer(authorization))
    except BlogApiError as exc:
        reason = type(exc).__name__
        auth_rejections_total.add(1, {"reason": reason})
        await log.awarning("auth_rejected", reason=reason, path=request.url.path)
        raise
    request.state.user = claims
    return claims


@router.post("/login", response_model=LoginResponse)
async def login(request: Request) -> LoginResponse:
    settings: Settings = request.app.state.settings
    tokens: TokenService = request.app.state.tokens

    if not tokens.configured:
        await log.aerror("login_rejected", reason="jwt_secret_not_configured")
        raise ServerMisconfigured()

    credentials = require_fields(await read_body(request), Credentials)

    username_ok = _matches(credentials.username, settings.admin_username)
    password_ok = _matches(credentials.password, settings.admin_password)
    if not (username_ok and password_ok):
        login_attempts_total.add(1, {"outcome": "rejected"})
        await log.awarning("login_failed", username=credentials.username)
        raise InvalidCredentials()

    token = tokens.issue(credentials.username)
    login_attempts_total.add(1, {"outcome": "accepted"})
    await log.ainfo("login_succeeded", username=credentials.username)
    return LoginResponse(message="Success: You logged in the system!", token=token)
