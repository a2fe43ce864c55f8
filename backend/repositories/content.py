from typing import Optional

from sqlalchemy import func

from models.content import Category, Comment, Post
from repositories.base import Repository


def paginate(query, page: int, limit: int) -> tuple[list, int]:
    """Return one page of ``query`` and the total row count."""
    total = query.order_by(None).count()
    rows = query.limit(limit).offset((page - 1) * limit).all()
    return rows, total


class CategoryRepository(Repository[Category]):
    model = Category

    def by_name_ci(
        self,
        community_id: int,
        name: str,
        exclude_id: Optional[int] = None,
    ) -> Optional[Category]:
        query = self.query().filter(
            Category.community_id == community_id,
            func.lower(Category.name) == name.lower(),
        )
        if exclude_id is not None:
            query = query.filter(Category.id != exclude_id)
        return query.first()

    def page_for_community(self, community_id: int, page: int, limit: int) -> tuple[list[Category], int]:
        query = (
            self.query()
            .filter(Category.community_id == community_id)
            .order_by(Category.created_at.desc(), Category.id.desc())
        )
        return paginate(query, page, limit)

    def ids_for_community(self, community_id: int) -> list[int]:
        rows = self.db.query(Category.id).filter(Category.community_id == community_id).all()
        return [row[0] for row in rows]


class PostRepository(Repository[Post]):
    model = Post

    def page_for_categories(self, category_ids: list[int], page: int, limit: int) -> tuple[list[Post], int]:
        query = (
            self.query()
            .filter(Post.category_id.in_(category_ids))
            .order_by(Post.created_at.desc(), Post.id.desc())
        )
        return paginate(query, page, limit)

    def move_to_category(self, from_category_id: int, to_category_id: int) -> int:
        moved = (
            self.query()
            .filter(Post.category_id == from_category_id)
            .update({Post.category_id: to_category_id}, synchronize_session=False)
        )
        self.db.flush()
        return moved


class CommentRepository(Repository[Comment]):
    model = Comment

    def for_post(self, post_id: int) -> list[Comment]:
        return (
            self.query()
            .filter(Comment.post_id == post_id)
            .order_by(Comment.created_at, Comment.id)
            .all()
        )
