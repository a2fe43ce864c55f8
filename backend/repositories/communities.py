from typing import Optional

from sqlalchemy import func

from models.community import DEFAULT_ROLES, Community, Role, UserCommunity
from models.user import User
from repositories.base import Repository


class CommunityRepository(Repository[Community]):
    model = Community

    def list_with_user_counts(self) -> list[tuple[Community, int]]:
        """Every community paired with the number of its membership rows."""
        user_count = func.count(UserCommunity.id)
        rows = (
            self.db.query(Community, user_count)
            .outerjoin(UserCommunity, UserCommunity.community_id == Community.id)
            .group_by(Community.id)
            .order_by(Community.id)
            .all()
        )
        return [(community, count) for community, count in rows]

    def user_count(self, community_id: int) -> int:
        return (
            self.db.query(func.count(UserCommunity.id))
            .filter(UserCommunity.community_id == community_id)
            .scalar()
            or 0
        )

    def name_taken(self, name: str, exclude_id: Optional[int] = None) -> bool:
        return self.exists(exclude_id=exclude_id, name=name)


class RoleRepository(Repository[Role]):
    model = Role

    def by_name(self, name: str) -> Optional[Role]:
        return self.find_by(name=name)

    def all(self) -> list[Role]:
        return self.query().order_by(Role.id).all()

    def ensure_defaults(self) -> int:
        """Insert any missing catalog role. Returns how many were added."""
        added = 0
        for role in DEFAULT_ROLES:
            if not self.by_name(role["name"]):
                self.add(**role)
                added += 1
        return added


class MembershipRepository(Repository[UserCommunity]):
    model = UserCommunity

    def find(self, user_id: int, community_id: int) -> Optional[UserCommunity]:
        return self.find_by(user_id=user_id, community_id=community_id)

    def role_name(self, user_id: int, community_id: int) -> Optional[str]:
        row = (
            self.db.query(Role.name)
            .join(UserCommunity, UserCommunity.role_id == Role.id)
            .filter(
                UserCommunity.user_id == user_id,
                UserCommunity.community_id == community_id,
            )
            .first()
        )
        return row[0] if row else None

    def role_names_for(self, community_id: int, user_ids: list[int]) -> dict[int, str]:
        """Map user id -> role name for the given users in one community."""
        if not user_ids:
            return {}
        rows = (
            self.db.query(UserCommunity.user_id, Role.name)
            .join(Role, UserCommunity.role_id == Role.id)
            .filter(
                UserCommunity.community_id == community_id,
                UserCommunity.user_id.in_(user_ids),
            )
            .all()
        )
        return {user_id: role_name for user_id, role_name in rows}

    def members(self, community_id: int) -> list[tuple[User, UserCommunity, Optional[Role]]]:
        rows = (
            self.db.query(User, UserCommunity, Role)
            .join(UserCommunity, UserCommunity.user_id == User.id)
            .outerjoin(Role, UserCommunity.role_id == Role.id)
            .filter(UserCommunity.community_id == community_id)
            .order_by(UserCommunity.created_at, User.id)
            .all()
        )
        return [(user, membership, role) for user, membership, role in rows]
