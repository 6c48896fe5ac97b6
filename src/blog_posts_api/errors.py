"""Error taxonomy for the Blog Posts API and its JSON rendering."""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

log = structlog.get_logger()

GENERIC_FAILURE = "Unsuccessful: Something went wrong! Please try again later."


class BlogApiError(Exception):
    """Base error. Every subclass maps to one HTTP status and a client-safe message."""

    status_code = 500
    message = GENERIC_FAILURE

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationError(BlogApiError):
    status_code = 400
    message = "Error: Missing fields must be filled"

    @classmethod
    def missing(cls, *fields: str) -> ValidationError:
        return cls(f"Error: Missing fields must be filled ({', '.join(fields)})")


class AuthTokenMissing(BlogApiError):
    status_code = 401
    message = "Error: Auth Token Not Found"


class InvalidCredentials(BlogApiError):
    status_code = 401
    message = "Unsuccessful: Invalid Login Credentials"


class AuthTokenInvalid(BlogApiError):
    status_code = 403
    message = "Error: Token Invalid or Expired"


class NotFound(BlogApiError):
    status_code = 404
    message = "Unsuccessful: Post cannot be found!"


class RateLimited(BlogApiError):
    status_code = 429
    message = "Too many requests, please try again later."


class ServerMisconfigured(BlogApiError):
    status_code = 500
    message = "Error: Unconfigured JWT Secret"


class StoreUnavailable(BlogApiError):
    """Any store-layer failure. The driver error is logged, never returned."""

    status_code = 500
    message = GENERIC_FAILURE


def error_response(
    status_code: int, message: str, headers: dict[str, str] | None = None
) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


async def _handle_api_error(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, BlogApiError)
    return error_response(exc.status_code, exc.message)


async def _handle_http_error(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, StarletteHTTPException)
    return error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


async def _handle_request_validation(request: Request, exc: Exception) -> JSONResponse:
    return error_response(400, "Error: Malformed request")


async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    await log.aexception(
        "unhandled_request_error", path=request.url.path, method=request.method, exc_info=exc
    )
    return error_response(500, GENERIC_FAILURE)


def register_error_handlers(app: FastAPI) -> None:
    """Render every failure as ``{"error": ...}`` so no exception escapes a request."""
    app.add_exception_handler(BlogApiError, _handle_api_error)
    app.add_exception_handler(StarletteHTTPException, _handle_http_error)
    app.add_exception_handler(RequestValidationError, _handle_request_validation)
    app.add_exception_handler(Exception, _handle_unexpected)
