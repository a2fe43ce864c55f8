"""Role checks for privileged community operations."""

from typing import Iterable, Optional

from sqlalchemy.orm import Session

from models.community import ROLE_FOUNDER, ROLE_MODERATOR
from repositories import MembershipRepository, UserRepository
from services.auth import Principal
from services.exceptions import PermissionDeniedError


STAFF_ROLES = (ROLE_FOUNDER, ROLE_MODERATOR)


class CommunityAccess:
    """Resolves what a principal may do inside one community."""

    def __init__(self, db: Session):
        self.memberships = MembershipRepository(db)
        self.users = UserRepository(db)

    def is_system_admin(self, principal: Principal) -> bool:
        user = self.users.get(principal.user_id)
        return bool(user and user.is_admin)

    def role_of(self, principal: Principal, community_id: int) -> Optional[str]:
        return self.memberships.role_name(principal.user_id, community_id)

    def has_role(self, principal: Principal, community_id: int, roles: Iterable[str]) -> bool:
        """True when the principal holds one of ``roles`` here, or is a system administrator."""
        if self.role_of(principal, community_id) in set(roles):
            return True
        return self.is_system_admin(principal)

    def require_role(self, principal: Principal, community_id: int, roles: Iterable[str]) -> None:
        if not self.has_role(principal, community_id, roles):
            raise PermissionDeniedError()

    def require_staff(self, principal: Principal, community_id: int) -> None:
        self.require_role(principal, community_id, STAFF_ROLES)

    def require_author_or_staff(
        self,
        principal: Principal,
        author_id: Optional[int],
        community_id: int,
    ) -> None:
        if author_id is not None and author_id == principal.user_id:
            return
        self.require_staff(principal, community_id)
