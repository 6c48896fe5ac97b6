"""CRUD endpoints for blog posts."""

import structlog
from fastapi import APIRouter, Depends, Request

from blog_posts_api.auth import require_token
from blog_posts_api.errors import NotFound
from blog_posts_api.metrics import posts_mutations_total
from blog_posts_api.models import (
    DeletedPost,
    DeletedPostResponse,
    PostFields,
    PostListResponse,
    PostResponse,
    TokenClaims,
)
from blog_posts_api.payloads import read_body, require_fields
from blog_posts_api.repository import PostRepository

log = structlog.get_logger()

router = APIRouter(prefix="/posts")

_MAX_ID = 2**63 - 1


def _repository(request: Request) -> PostRepository:
    return request.app.state.repository


def _parse_id(raw: str) -> int:
    """Path ids that are not integers cannot match a row."""
    try:
        post_id = int(raw)
    except ValueError as exc:
        raise NotFound() from exc
    if not -_MAX_ID <= post_id <= _MAX_ID:
        raise NotFound()
    return post_id


@router.get("", response_model=PostListResponse)
async def list_posts(repository: PostRepository = Depends(_repository)) -> PostListResponse:
    posts = await repository.list_all()
    return PostListResponse(message="Success: All posts have been retrieved!", data=posts)


@router.get("/{post_id}", response_model=PostResponse)
async def read_post(
    post_id: str, repository: PostRepository = Depends(_repository)
) -> PostResponse:
    post = await repository.get_by_id(_parse_id(post_id))
    return PostResponse(message="Success: A post has been retrieved!", data=post)


@router.post("", status_code=201, response_model=PostResponse)
async def create_post(
    request: Request,
    user: TokenClaims = Depends(require_token),
    repository: PostRepository = Depends(_repository),
) -> PostResponse:
    fields = require_fields(await read_body(request), PostFields)
    post = await repository.insert(fields)
    posts_mutations_total.add(1, {"operation": "create"})
    await log.ainfo("post_created", post_id=post.id, user=user.username)
    return PostResponse(message="Success: A post has been created!", data=post)


@router.put("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: str,
    request: Request,
    user: TokenClaims = Depends(require_token),
    repository: PostRepository = Depends(_repository),
) -> PostResponse:
    fields = require_fields(await read_body(request), PostFields)
    post = await repository.update_by_id(_parse_id(post_id), fields)
    posts_mutations_total.add(1, {"operation": "update"})
    await log.ainfo("post_updated", post_id=post.id, user=user.username)
    return PostResponse(message="Success: A post has been updated!", data=post)


@router.delete("/{post_id}", response_model=DeletedPostResponse)
async def delete_post(
    post_id: str,
    user: TokenClaims = Depends(require_token),
    repository: PostRepository = Depends(_repository),
) -> DeletedPostResponse:
    deleted_id = await repository.delete_by_id(_parse_id(post_id))
    posts_mutations_total.add(1, {"operation": "delete"})
    await log.ainfo("post_deleted", post_id=deleted_id, user=user.username)
    return DeletedPostResponse(
        message="Success: A post has been deleted!", data=DeletedPost(id=deleted_id)
    )
