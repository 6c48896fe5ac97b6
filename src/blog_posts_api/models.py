"""Pydantic models for posts, tokens and response envelopes."""

from pydantic import BaseModel, ConfigDict, Field


class Post(BaseModel):
    """A persisted blog post."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(description="Store-assigned identifier")
    title: str
    content: str
    author: str


class PostFields(BaseModel):
    """Client-supplied fields for create and full-replacement update."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    author: str = Field(min_length=1)


class Credentials(BaseModel):
    model_config = ConfigDict(frozen=True)

    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class TokenClaims(BaseModel):
    """Decoded bearer token payload."""

    username: str
    exp: int = Field(description="Expiry as a Unix timestamp")
    iat: int | None = None


class LoginResponse(BaseModel):
    message: str
    token: str


class DeletedPost(BaseModel):
    id: int


class PostResponse(BaseModel):
    message: str
    data: Post


class PostListResponse(BaseModel):
    message: str
    data: list[Post]


class DeletedPostResponse(BaseModel):
    message: str
    data: DeletedPost
