"""Pydantic schemas for categories, posts, comments and reactions."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class PageRequest(BaseModel):
    """Pagination parameters sent in the request body."""

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=5, ge=1, le=100)


class CategoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str
    community_id: int
    created_at: datetime


class CategoryPage(BaseModel):
    categories: list[CategoryResponse]
    total_pages: int


class CategoryCheckName(BaseModel):
    name: str = Field(min_length=1)
    ignore_category_id: Optional[int] = None


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1, max_length=1024)


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, min_length=1, max_length=1024)


class MigratePostsRequest(BaseModel):
    from_category_id: int
    to_category_id: int

    @model_validator(mode="after")
    def validate_distinct(self) -> "MigratePostsRequest":
        if self.from_category_id == self.to_category_id:
            raise ValueError("from_category_id and to_category_id must differ")
        return self


class MigratePostsResponse(BaseModel):
    message: str
    moved: int


class ReactionSummary(BaseModel):
    likes: int = 0
    dislikes: int = 0
    user_reaction: Optional[str] = None  # The caller's own reaction, if any


class Author(BaseModel):
    id: int
    username: str
    email: Optional[str] = None
    picture: Optional[str] = None
    role: Optional[str] = None  # Role name inside the post's community


class PostListRequest(PageRequest):
    category_id: Optional[int] = None


class PostSummary(BaseModel):
    id: int
    title: str
    category_id: int
    category_name: str
    created_at: datetime
    user: Optional[Author] = None
    reactions: ReactionSummary


class PostPage(BaseModel):
    posts: list[PostSummary]
    total_pages: int


class PostDetail(BaseModel):
    id: int
    title: str
    content: str
    category_id: int
    community_id: int
    user_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    reactions: ReactionSummary


class PostCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    body: str = Field(min_length=1)


class PostUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    body: Optional[str] = Field(default=None, min_length=1)


class CommentCreate(BaseModel):
    content: str = Field(min_length=1)


class CommentResponse(BaseModel):
    id: int
    content: str
    post_id: int
    created_at: datetime
    user: Optional[Author] = None
    reactions: ReactionSummary


class ReactionRequest(BaseModel):
    reaction_type: Literal["like", "dislike"]


class ReactionResponse(BaseModel):
    message: str
    reaction_type: Optional[str] = None  # None once the reaction was removed
