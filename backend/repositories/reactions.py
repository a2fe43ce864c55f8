from typing import Optional

from sqlalchemy import func

from models.reactions import REACTION_DISLIKE, REACTION_LIKE, CommentReaction, PostReaction
from repositories.base import Repository


class ReactionRepository(Repository):
    """Reactions keyed by (user_id, <target_field>)."""

    target_field: str

    @property
    def target_column(self):
        return getattr(self.model, self.target_field)

    def find(self, user_id: int, target_id: int):
        return self.find_by(user_id=user_id, **{self.target_field: target_id})

    def create(self, user_id: int, target_id: int, reaction_type: str):
        return self.add(user_id=user_id, reaction_type=reaction_type, **{self.target_field: target_id})

    def count_for(self, user_id: int, target_id: int) -> int:
        return self.count(user_id=user_id, **{self.target_field: target_id})

    def tallies(self, target_ids: list[int]) -> dict[int, dict[str, int]]:
        """Map target id -> {"likes": n, "dislikes": n}; absent targets count zero."""
        tallies = {target_id: {"likes": 0, "dislikes": 0} for target_id in target_ids}
        if not target_ids:
            return tallies
        rows = (
            self.db.query(self.target_column, self.model.reaction_type, func.count(self.model.id))
            .filter(self.target_column.in_(target_ids))
            .group_by(self.target_column, self.model.reaction_type)
            .all()
        )
        for target_id, reaction_type, count in rows:
            if reaction_type == REACTION_LIKE:
                tallies[target_id]["likes"] = count
            elif reaction_type == REACTION_DISLIKE:
                tallies[target_id]["dislikes"] = count
        return tallies

    def user_reactions(self, user_id: Optional[int], target_ids: list[int]) -> dict[int, str]:
        if user_id is None or not target_ids:
            return {}
        rows = (
            self.db.query(self.target_column, self.model.reaction_type)
            .filter(self.model.user_id == user_id, self.target_column.in_(target_ids))
            .all()
        )
        return {target_id: reaction_type for target_id, reaction_type in rows}


class PostReactionRepository(ReactionRepository):
    model = PostReaction
    target_field = "post_id"


class CommentReactionRepository(ReactionRepository):
    model = CommentReaction
    target_field = "comment_id"
