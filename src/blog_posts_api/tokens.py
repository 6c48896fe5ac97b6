"""Issue and verify signed, time-limited bearer tokens for the admin user."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import jwt
import pydantic
import structlog

from blog_posts_api.errors import AuthTokenInvalid, ServerMisconfigured
from blog_posts_api.models import TokenClaims

log = structlog.get_logger()

ALGORITHM = "HS256"
DEFAULT_TTL_SECONDS = 3600


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TokenService:
    """HS256 JWTs carrying ``username``, ``iat`` and ``exp`` claims.

    Issued tokens are not persisted; there is no revocation. Both operations
    refuse to run without a signing secret rather than signing insecurely.
    """

    def __init__(
        self,
        secret: str | None,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._secret = secret
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock

    @property
    def configured(self) -> bool:
        return bool(self._secret)

    def _require_secret(self) -> str:
        if not self._secret:
            log.error("jwt_secret_not_configured")
            raise ServerMisconfigured()
        return self._secret

    def issue(self, username: str) -> str:
        secret = self._require_secret()
        now = self._clock()
        payload = {"username": username, "iat": now, "exp": now + self._ttl}
        return jwt.encode(payload, secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> TokenClaims:
        """Decode *token*; raise AuthTokenInvalid on bad signature, malformed input or expiry."""
        secret = self._require_secret()
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[ALGORITHM],
                options={"require": ["exp", "username"]},
            )
            return TokenClaims.model_validate(payload)
        except jwt.ExpiredSignatureError as exc:
            log.info("token_expired")
            raise AuthTokenInvalid() from exc
        except (jwt.InvalidTokenError, pydantic.ValidationError) as exc:
            log.info("token_invalid", reason=type(exc).__name__)
            raise AuthTokenInvalid() from exc
