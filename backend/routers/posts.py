"""Category, post, comment and reaction endpoints inside communities."""

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from database import get_db
from schemas.auth import MessageResponse
from schemas.communities import CreatedResponse
from schemas.content import (
    CategoryCheckName,
    CategoryCreate,
    CategoryPage,
    CategoryResponse,
    CategoryUpdate,
    CommentCreate,
    CommentResponse,
    MigratePostsRequest,
    MigratePostsResponse,
    PageRequest,
    PostCreate,
    PostDetail,
    PostListRequest,
    PostPage,
    PostUpdate,
    ReactionRequest,
    ReactionResponse,
)
from services.auth import Principal, get_current_principal
from services.content_service import ContentService
from services.reactions import ReactionOutcome, ReactionResult


router = APIRouter(prefix="/communities", tags=["posts"])


def _reaction_response(result: ReactionResult, response: Response) -> ReactionResponse:
    if result.outcome == ReactionOutcome.CREATED:
        response.status_code = status.HTTP_201_CREATED
    return ReactionResponse(message=result.message, reaction_type=result.reaction_type)


# Categories


@router.post("/{community_id}/categories", response_model=CategoryPage)
def list_categories(
    community_id: int,
    payload: PageRequest | None = None,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Categories of the community, newest first. Paging comes in the body."""
    payload = payload or PageRequest()
    categories, total_pages = ContentService(db).list_categories(community_id, payload.page, payload.limit)
    return CategoryPage(
        categories=[CategoryResponse.model_validate(category) for category in categories],
        total_pages=total_pages,
    )


@router.post("/{community_id}/categories/check-name", response_model=MessageResponse)
def check_category_name(
    community_id: int,
    payload: CategoryCheckName,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    service = ContentService(db)
    if not service.category_name_available(community_id, payload.name, payload.ignore_category_id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A category with this name already exists in the community",
        )
    return MessageResponse(message="Category name available")


@router.post("/{community_id}/category/create", response_model=CreatedResponse)
def create_category(
    community_id: int,
    payload: CategoryCreate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    category = ContentService(db).create_category(principal, community_id, payload.name, payload.description)
    return CreatedResponse(message="Category created successfully", id=category.id)


@router.put("/category/posts/migrate", response_model=MigratePostsResponse)
def migrate_posts(
    payload: MigratePostsRequest,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Move every post from one category to another in the same community."""
    moved = ContentService(db).migrate_posts(principal, payload.from_category_id, payload.to_category_id)
    return MigratePostsResponse(message="Posts migrated successfully", moved=moved)


@router.put("/category/{category_id}/edit", response_model=CategoryResponse)
def edit_category(
    category_id: int,
    payload: CategoryUpdate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return ContentService(db).edit_category(
        principal,
        category_id,
        name=payload.name,
        description=payload.description,
    )


@router.delete("/category/{category_id}", response_model=MessageResponse)
def delete_category(
    category_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Delete a category together with its posts."""
    ContentService(db).delete_category(principal, category_id)
    return MessageResponse(message="Category deleted successfully")


# Posts


@router.post("/{community_id}/posts", response_model=PostPage)
def list_posts(
    community_id: int,
    payload: PostListRequest | None = None,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    payload = payload or PostListRequest()
    posts, total_pages = ContentService(db).list_posts(
        principal,
        community_id,
        category_id=payload.category_id,
        page=payload.page,
        limit=payload.limit,
    )
    return PostPage(posts=posts, total_pages=total_pages)


@router.get("/posts/{post_id}", response_model=PostDetail)
def get_post(
    post_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return ContentService(db).get_post(principal, post_id)


@router.post("/categories/{category_id}/posts/create", response_model=CreatedResponse)
def create_post(
    category_id: int,
    payload: PostCreate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    post = ContentService(db).create_post(principal, category_id, payload.title, payload.body)
    return CreatedResponse(message="Post created successfully", id=post.id)


@router.put("/posts/{post_id}/edit", response_model=MessageResponse)
def edit_post(
    post_id: int,
    payload: PostUpdate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    ContentService(db).edit_post(principal, post_id, title=payload.title, body=payload.body)
    return MessageResponse(message="Post updated successfully")


@router.delete("/posts/{post_id}", response_model=MessageResponse)
def delete_post(
    post_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    ContentService(db).delete_post(principal, post_id)
    return MessageResponse(message="Post deleted successfully")


@router.post("/posts/{post_id}/react", response_model=ReactionResponse)
def react_to_post(
    post_id: int,
    payload: ReactionRequest,
    response: Response,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Toggle the caller's like/dislike on a post. 201 when a reaction was created."""
    result = ContentService(db).react_to_post(principal, post_id, payload.reaction_type)
    return _reaction_response(result, response)


# Comments


@router.post("/posts/{post_id}/comments/create", response_model=CreatedResponse)
def create_comment(
    post_id: int,
    payload: CommentCreate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    comment = ContentService(db).create_comment(principal, post_id, payload.content)
    return CreatedResponse(message="Comment created successfully", id=comment.id)


@router.get("/{community_id}/posts/{post_id}/comments", response_model=list[CommentResponse])
def list_comments(
    community_id: int,
    post_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Comments of a post, oldest first, with reaction counts and the caller's own reaction."""
    return ContentService(db).list_comments(principal, community_id, post_id)


@router.delete("/posts/comments/{comment_id}", response_model=MessageResponse)
def delete_comment(
    comment_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    ContentService(db).delete_comment(principal, comment_id)
    return MessageResponse(message="Comment deleted successfully")


@router.post("/posts/comments/{comment_id}/react", response_model=ReactionResponse)
def react_to_comment(
    comment_id: int,
    payload: ReactionRequest,
    response: Response,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    result = ContentService(db).react_to_comment(principal, comment_id, payload.reaction_type)
    return _reaction_response(result, response)
