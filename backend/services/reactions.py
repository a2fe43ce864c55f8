"""Like/dislike toggle shared by post and comment reactions.

For one (user, target) pair:

- no reaction yet        -> insert it          (created)
- same type resubmitted  -> delete it          (removed)
- other type submitted   -> switch it in place (updated)

so at most one reaction row exists per pair at any time.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from models.reactions import REACTION_TYPES
from repositories.reactions import ReactionRepository
from services.exceptions import BadRequestError


logger = logging.getLogger(__name__)


class ReactionOutcome(str, enum.Enum):
    CREATED = "created"
    REMOVED = "removed"
    UPDATED = "updated"


OUTCOME_MESSAGES = {
    ReactionOutcome.CREATED: "Reaction created",
    ReactionOutcome.REMOVED: "Reaction removed",
    ReactionOutcome.UPDATED: "Reaction updated",
}


@dataclass(frozen=True)
class ReactionResult:
    outcome: ReactionOutcome
    reaction_type: Optional[str]  # Type left in place, None after removal

    @property
    def message(self) -> str:
        return OUTCOME_MESSAGES[self.outcome]


def toggle_reaction(
    db: Session,
    reactions: ReactionRepository,
    user_id: int,
    target_id: int,
    reaction_type: str,
    _retry: bool = True,
) -> ReactionResult:
    """Apply the toggle and commit.

    If a concurrent request inserts the row between our lookup and our
    insert, the unique constraint rejects ours. If it deletes the row before
    our update or delete reaches it, the flush matches no row. Either way the
    toggle is re-run once against the current state.
    """
    if reaction_type not in REACTION_TYPES:
        raise BadRequestError(f"Invalid reaction type: {reaction_type}")

    existing = reactions.find(user_id, target_id)
    try:
        if existing is None:
            reactions.create(user_id, target_id, reaction_type)
            result = ReactionResult(ReactionOutcome.CREATED, reaction_type)
        elif existing.reaction_type == reaction_type:
            reactions.delete(existing)
            result = ReactionResult(ReactionOutcome.REMOVED, None)
        else:
            reactions.update(existing, reaction_type=reaction_type)
            result = ReactionResult(ReactionOutcome.UPDATED, reaction_type)
        db.commit()
    except (IntegrityError, StaleDataError):
        db.rollback()
        if not _retry:
            raise
        logger.info("Reaction race on target %s for user %s, retrying", target_id, user_id)
        return toggle_reaction(db, reactions, user_id, target_id, reaction_type, _retry=False)

    return result
