"""Tests for the /posts endpoints."""

import pytest
from httpx import AsyncClient

from tests.conftest import GENERIC_FAILURE, MISSING_POST_FIELDS, NOT_FOUND, POST_FIELDS


async def _create(client: AsyncClient, headers: dict[str, str], **fields: str) -> int:
    resp = await client.post("/posts", json=POST_FIELDS | fields, headers=headers)
    assert resp.status_code == 201
    post_id: int = resp.json()["data"]["id"]
    return post_id


async def test_list_posts_empty(client: AsyncClient) -> None:
    resp = await client.get("/posts")
    assert resp.status_code == 200
    assert resp.json() == {"message": "Success: All posts have been retrieved!", "data": []}


async def test_create_read_delete_scenario(
    client: AsyncClient, auth_headers: dict[str, str]
) -> None:
    resp = await client.post("/posts", json=POST_FIELDS, headers=auth_headers)
    assert resp.status_code == 201
    body = resp.json()
    post_id = body["data"]["id"]
    assert isinstance(post_id, int)
    assert body == {
        "message": "Success: A post has been created!",
        "data": {"id": post_id, **POST_FIELDS},
    }

    resp = await client.get(f"/posts/{post_id}")
    assert resp.status_code == 200
    assert resp.json() == {
        "message": "Success: A post has been retrieved!",
        "data": {"id": post_id, **POST_FIELDS},
    }

    resp = await client.delete(f"/posts/{post_id}", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json() == {"message": "Success: A post has been deleted!", "data": {"id": post_id}}

    resp = await client.get(f"/posts/{post_id}")
    assert resp.status_code == 404
    assert resp.json() == {"error": NOT_FOUND}


async def test_list_posts_returns_all(client: AsyncClient, auth_headers: dict[str, str]) -> None:
    first = await _create(client, auth_headers, title="one")
    second = await _create(client, auth_headers, title="two")

    resp = await client.get("/posts")

    assert resp.status_code == 200
    by_id = {p["id"]: p for p in resp.json()["data"]}
    assert set(by_id) == {first, second}
    assert by_id[first]["title"] == "one"
    assert by_id[second]["title"] == "two"


@pytest.mark.parametrize(
    "body",
    [
        {"title": "A"},
        {"title": "A", "content": "B"},
        {"title": "A", "content": "", "author": "C"},
        {"title": "A", "content": 5, "author": "C"},
        {},
    ],
)
async def test_create_missing_fields_returns_400_and_creates_nothing(
    client: AsyncClient, auth_headers: dict[str, str], body: dict[str, object]
) -> None:
    resp = await client.post("/posts", json=body, headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json() == {"error": MISSING_POST_FIELDS}

    listing = await client.get("/posts")
    assert listing.json()["data"] == []


async def test_create_without_body(client: AsyncClient, auth_headers: dict[str, str]) -> None:
    resp = await client.post("/posts", headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json() == {"error": MISSING_POST_FIELDS}


async def test_create_with_invalid_json(client: AsyncClient, auth_headers: dict[str, str]) -> None:
    headers = auth_headers | {"Content-Type": "application/json"}
    resp = await client.post("/posts", content=b"{not json", headers=headers)
    assert resp.status_code == 400
    assert "error" in resp.json()


async def test_create_accepts_form_body(client: AsyncClient, auth_headers: dict[str, str]) -> None:
    resp = await client.post("/posts", data=POST_FIELDS, headers=auth_headers)
    assert resp.status_code == 201
    assert resp.json()["data"]["title"] == "A"


async def test_create_requires_token_before_validation(client: AsyncClient) -> None:
    """An unauthenticated request with a bad body is rejected as unauthenticated."""
    resp = await client.post("/posts", json={"title": "A"})
    assert resp.status_code == 401


async def test_update_replaces_all_fields(client: AsyncClient, auth_headers: dict[str, str]) -> None:
    post_id = await _create(client, auth_headers)
    new_fields = {"title": "New title", "content": "New content", "author": "New author"}

    resp = await client.put(f"/posts/{post_id}", json=new_fields, headers=auth_headers)

    assert resp.status_code == 200
    assert resp.json() == {
        "message": "Success: A post has been updated!",
        "data": {"id": post_id, **new_fields},
    }
    fetched = await client.get(f"/posts/{post_id}")
    assert fetched.json()["data"] == {"id": post_id, **new_fields}


async def test_update_missing_fields_leaves_post_unchanged(
    client: AsyncClient, auth_headers: dict[str, str]
) -> None:
    post_id = await _create(client, auth_headers)

    resp = await client.put(f"/posts/{post_id}", json={"title": "X"}, headers=auth_headers)

    assert resp.status_code == 400
    assert resp.json() == {"error": MISSING_POST_FIELDS}
    fetched = await client.get(f"/posts/{post_id}")
    assert fetched.json()["data"] == {"id": post_id, **POST_FIELDS}


async def test_update_nonexistent_returns_404(
    client: AsyncClient, auth_headers: dict[str, str]
) -> None:
    resp = await client.put("/posts/999", json=POST_FIELDS, headers=auth_headers)
    assert resp.status_code == 404
    assert resp.json() == {"error": NOT_FOUND}


async def test_delete_nonexistent_is_404_every_time(
    client: AsyncClient, auth_headers: dict[str, str]
) -> None:
    for _ in range(3):
        resp = await client.delete("/posts/12345", headers=auth_headers)
        assert resp.status_code == 404
        assert resp.json() == {"error": NOT_FOUND}


@pytest.mark.parametrize("post_id", ["abc", "1.5", "99999999999999999999999"])
async def test_non_integer_id_is_not_found(client: AsyncClient, post_id: str) -> None:
    resp = await client.get(f"/posts/{post_id}")
    assert resp.status_code == 404
    assert resp.json() == {"error": NOT_FOUND}


@pytest.mark.parametrize(
    ("method", "path"),
    [("post", "/posts"), ("put", "/posts/1"), ("delete", "/posts/1")],
)
async def test_mutating_routes_require_token(client: AsyncClient, method: str, path: str) -> None:
    kwargs = {} if method == "delete" else {"json": POST_FIELDS}
    resp = await client.request(method.upper(), path, **kwargs)  # type: ignore[arg-type]
    assert resp.status_code == 401
    assert resp.json() == {"error": "Error: Auth Token Not Found"}


async def test_store_failure_returns_generic_500(client: AsyncClient) -> None:
    """Driver errors are reported generically, never leaked to the client."""
    from sqlalchemy import text

    from blog_posts_api.main import app

    async with app.state.repository._engine.begin() as conn:
        await conn.execute(text("DROP TABLE posts"))

    resp = await client.get("/posts")

    assert resp.status_code == 500
    assert resp.json() == {"error": GENERIC_FAILURE}


async def test_store_failure_on_create_returns_generic_500(
    client: AsyncClient, auth_headers: dict[str, str]
) -> None:
    from sqlalchemy import text

    from blog_posts_api.main import app

    async with app.state.repository._engine.begin() as conn:
        await conn.execute(text("DROP TABLE posts"))

    resp = await client.post("/posts", json=POST_FIELDS, headers=auth_headers)

    assert resp.status_code == 500
    assert resp.json() == {"error": GENERIC_FAILURE}
