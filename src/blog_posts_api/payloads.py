"""Request body parsing and required-field validation."""

import json
from typing import Any, TypeVar

from fastapi import Request
from pydantic import BaseModel

from blog_posts_api.errors import ValidationError

M = TypeVar("M", bound=BaseModel)

_FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def read_body(request: Request) -> dict[str, Any]:
    """Return the request body as a dict. Accepts JSON and form-encoded bodies."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(_FORM_TYPES):
        form = await request.form()
        return {k: v for k, v in form.items() if isinstance(v, str)}

    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except ValueError as exc:
        raise ValidationError("Error: Request body must be valid JSON") from exc
    return data if isinstance(data, dict) else {}


def require_fields(body: dict[str, Any], model: type[M]) -> M:
    """Build *model* from *body*, failing if any of its fields is absent, empty or not text.

    The error names every field of the model, not only the missing ones.
    """
    names = tuple(model.model_fields)
    values = {name: body.get(name) for name in names}
    if not all(isinstance(v, str) and v for v in values.values()):
        raise ValidationError.missing(*names)
    return model.model_validate(values)
