"""Categories, posts, comments and reactions inside communities."""

import logging
import math
from typing import Optional

from sqlalchemy.orm import Session

from models.content import Category, Comment, Post
from models.user import User
from repositories import (
    CategoryRepository,
    CommentReactionRepository,
    CommentRepository,
    CommunityRepository,
    MembershipRepository,
    PostReactionRepository,
    PostRepository,
)
from services.auth import Principal
from services.exceptions import BadRequestError, ConflictError, NotFoundError
from services.permissions import CommunityAccess
from services.reactions import ReactionResult, toggle_reaction


logger = logging.getLogger(__name__)


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


class ContentService:
    """Service for community content."""

    def __init__(self, db: Session):
        self.db = db
        self.communities = CommunityRepository(db)
        self.categories = CategoryRepository(db)
        self.posts = PostRepository(db)
        self.comments = CommentRepository(db)
        self.post_reactions = PostReactionRepository(db)
        self.comment_reactions = CommentReactionRepository(db)
        self.memberships = MembershipRepository(db)
        self.access = CommunityAccess(db)

    # Categories

    def list_categories(self, community_id: int, page: int = 1, limit: int = 5) -> tuple[list[Category], int]:
        self._community_or_404(community_id)
        categories, total = self.categories.page_for_community(community_id, page, limit)
        return categories, total_pages(total, limit)

    def category_name_available(
        self,
        community_id: int,
        name: str,
        ignore_category_id: Optional[int] = None,
    ) -> bool:
        return self.categories.by_name_ci(community_id, name, exclude_id=ignore_category_id) is None

    def create_category(self, principal: Principal, community_id: int, name: str, description: str) -> Category:
        self._community_or_404(community_id)
        self.access.require_staff(principal, community_id)
        if self.categories.by_name_ci(community_id, name):
            raise ConflictError("A category with this name already exists in the community")

        category = self.categories.add(name=name, description=description, community_id=community_id)
        self.db.commit()
        return category

    def edit_category(
        self,
        principal: Principal,
        category_id: int,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Category:
        category = self._category_or_404(category_id)
        self.access.require_staff(principal, category.community_id)

        changes = {}
        if name is not None and name != category.name:
            if self.categories.by_name_ci(category.community_id, name, exclude_id=category.id):
                raise ConflictError("A category with this name already exists in the community")
            changes["name"] = name
        if description is not None:
            changes["description"] = description

        if changes:
            self.categories.update(category, **changes)
            self.db.commit()
        return category

    def delete_category(self, principal: Principal, category_id: int) -> None:
        category = self._category_or_404(category_id)
        self.access.require_staff(principal, category.community_id)

        self.categories.delete(category)
        self.db.commit()

    def migrate_posts(self, principal: Principal, from_category_id: int, to_category_id: int) -> int:
        """Move every post of one category into another category of the same community."""
        source = self._category_or_404(from_category_id)
        target = self._category_or_404(to_category_id)
        if source.community_id != target.community_id:
            raise BadRequestError("Categories belong to different communities")
        self.access.require_staff(principal, source.community_id)

        moved = self.posts.move_to_category(source.id, target.id)
        self.db.commit()
        # Bulk update bypassed the identity map.
        self.db.expire_all()
        logger.info("Moved %s posts from category %s to %s", moved, source.id, target.id)
        return moved

    # Posts

    def list_posts(
        self,
        principal: Principal,
        community_id: int,
        category_id: Optional[int] = None,
        page: int = 1,
        limit: int = 5,
    ) -> tuple[list[dict], int]:
        """Newest-first posts of one category, or of every category in the community."""
        self._community_or_404(community_id)
        if category_id is not None:
            category = self._category_or_404(category_id)
            if category.community_id != community_id:
                raise NotFoundError("Category not found")
            category_ids = [category_id]
        else:
            category_ids = self.categories.ids_for_community(community_id)

        posts, total = self.posts.page_for_categories(category_ids, page, limit)
        post_ids = [post.id for post in posts]
        tallies = self.post_reactions.tallies(post_ids)
        own = self.post_reactions.user_reactions(principal.user_id, post_ids)
        roles = self.memberships.role_names_for(
            community_id, [post.user_id for post in posts if post.user_id is not None]
        )

        summaries = [
            {
                "id": post.id,
                "title": post.title,
                "category_id": post.category_id,
                "category_name": post.category.name,
                "created_at": post.created_at,
                "user": self._author(post.user, roles, include_email=True),
                "reactions": {**tallies[post.id], "user_reaction": own.get(post.id)},
            }
            for post in posts
        ]
        return summaries, total_pages(total, limit)

    def get_post(self, principal: Principal, post_id: int) -> dict:
        post = self._post_or_404(post_id)
        tallies = self.post_reactions.tallies([post.id])
        own = self.post_reactions.user_reactions(principal.user_id, [post.id])
        return {
            "id": post.id,
            "title": post.title,
            "content": post.content,
            "category_id": post.category_id,
            "community_id": post.category.community_id,
            "user_id": post.user_id,
            "created_at": post.created_at,
            "updated_at": post.updated_at,
            "reactions": {**tallies[post.id], "user_reaction": own.get(post.id)},
        }

    def create_post(self, principal: Principal, category_id: int, title: str, body: str) -> Post:
        self._category_or_404(category_id)
        post = self.posts.add(
            title=title,
            content=body,
            user_id=principal.user_id,
            category_id=category_id,
        )
        self.db.commit()
        return post

    def edit_post(
        self,
        principal: Principal,
        post_id: int,
        title: Optional[str] = None,
        body: Optional[str] = None,
    ) -> Post:
        post = self._post_or_404(post_id)
        self.access.require_author_or_staff(principal, post.user_id, post.category.community_id)

        changes = {}
        if title is not None:
            changes["title"] = title
        if body is not None:
            changes["content"] = body
        if changes:
            self.posts.update(post, **changes)
            self.db.commit()
        return post

    def delete_post(self, principal: Principal, post_id: int) -> None:
        post = self._post_or_404(post_id)
        self.access.require_author_or_staff(principal, post.user_id, post.category.community_id)

        self.posts.delete(post)
        self.db.commit()

    # Comments

    def create_comment(self, principal: Principal, post_id: int, content: str) -> Comment:
        self._post_or_404(post_id)
        comment = self.comments.add(content=content, post_id=post_id, user_id=principal.user_id)
        self.db.commit()
        return comment

    def list_comments(self, principal: Principal, community_id: int, post_id: int) -> list[dict]:
        post = self._post_or_404(post_id)
        if post.category.community_id != community_id:
            raise NotFoundError("Post not found")

        comments = self.comments.for_post(post_id)
        comment_ids = [comment.id for comment in comments]
        tallies = self.comment_reactions.tallies(comment_ids)
        own = self.comment_reactions.user_reactions(principal.user_id, comment_ids)
        roles = self.memberships.role_names_for(
            community_id, [comment.user_id for comment in comments if comment.user_id is not None]
        )
        return [
            {
                "id": comment.id,
                "content": comment.content,
                "post_id": comment.post_id,
                "created_at": comment.created_at,
                "user": self._author(comment.user, roles),
                "reactions": {**tallies[comment.id], "user_reaction": own.get(comment.id)},
            }
            for comment in comments
        ]

    def delete_comment(self, principal: Principal, comment_id: int) -> None:
        comment = self.comments.get(comment_id)
        if not comment:
            raise NotFoundError("Comment not found")
        self.access.require_author_or_staff(principal, comment.user_id, comment.post.category.community_id)

        self.comments.delete(comment)
        self.db.commit()

    # Reactions

    def react_to_post(self, principal: Principal, post_id: int, reaction_type: str) -> ReactionResult:
        self._post_or_404(post_id)
        return toggle_reaction(self.db, self.post_reactions, principal.user_id, post_id, reaction_type)

    def react_to_comment(self, principal: Principal, comment_id: int, reaction_type: str) -> ReactionResult:
        if not self.comments.get(comment_id):
            raise NotFoundError("Comment not found")
        return toggle_reaction(self.db, self.comment_reactions, principal.user_id, comment_id, reaction_type)

    # Helpers

    def _community_or_404(self, community_id: int) -> None:
        if not self.communities.get(community_id):
            raise NotFoundError(f"Community not found (id:{community_id})")

    def _category_or_404(self, category_id: int) -> Category:
        category = self.categories.get(category_id)
        if not category:
            raise NotFoundError("Category not found")
        return category

    def _post_or_404(self, post_id: int) -> Post:
        post = self.posts.get(post_id)
        if not post:
            raise NotFoundError("Post not found")
        return post

    @staticmethod
    def _author(user: Optional[User], roles: dict[int, str], include_email: bool = False) -> Optional[dict]:
        if user is None:
            return None
        author = {
            "id": user.id,
            "username": user.username,
            "picture": user.picture,
            "role": roles.get(user.id),
        }
        if include_email:
            author["email"] = user.email
        return author
