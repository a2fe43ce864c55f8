"""Community CRUD plus role assignment and membership management."""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.community import (
    MEMBERSHIP_STATUS_ACTIVE,
    ROLE_FOUNDER,
    ROLE_MEMBER,
    ROLE_MODERATOR,
    Community,
    Role,
    UserCommunity,
)
from repositories import CommunityRepository, MembershipRepository, RoleRepository, UserRepository
from services.auth import Principal
from services.exceptions import ConflictError, NotFoundError, PermissionDeniedError
from services.permissions import CommunityAccess


logger = logging.getLogger(__name__)


class CommunityService:
    """Service for community and membership operations."""

    def __init__(self, db: Session):
        self.db = db
        self.communities = CommunityRepository(db)
        self.roles = RoleRepository(db)
        self.memberships = MembershipRepository(db)
        self.users = UserRepository(db)
        self.access = CommunityAccess(db)

    def list_communities(self) -> list[dict]:
        return [
            self._summary(community, user_count)
            for community, user_count in self.communities.list_with_user_counts()
        ]

    def get_community(self, community_id: int) -> Community:
        community = self.communities.get(community_id)
        if not community:
            raise NotFoundError(f"Community not found (id:{community_id})")
        return community

    def get_detail(self, community_id: int) -> dict:
        community = self.get_community(community_id)
        detail = self._summary(community, self.communities.user_count(community_id))
        detail["created_at"] = community.created_at
        detail["updated_at"] = community.updated_at
        return detail

    def name_available(self, name: str, ignore_community_id: Optional[int] = None) -> bool:
        return not self.communities.name_taken(name, exclude_id=ignore_community_id)

    def create_community(
        self,
        principal: Principal,
        name: str,
        description: str,
        picture: str,
    ) -> Community:
        """Create a community and make the caller its founder."""
        if self.communities.name_taken(name):
            raise ConflictError("Community name already exists")

        founder_role = self._role_or_404(ROLE_FOUNDER)
        try:
            community = self.communities.add(name=name, description=description, picture=picture)
            self.memberships.add(
                user_id=principal.user_id,
                community_id=community.id,
                role_id=founder_role.id,
                status=MEMBERSHIP_STATUS_ACTIVE,
            )
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Community name already exists")

        logger.info("User %s founded community %s (id=%s)", principal.user_id, name, community.id)
        return community

    def delete_community(self, principal: Principal, community_id: int) -> None:
        community = self.get_community(community_id)
        self.access.require_role(principal, community_id, [ROLE_FOUNDER])

        self.communities.delete(community)
        self.db.commit()
        logger.info("User %s deleted community %s", principal.user_id, community_id)

    def change_image(self, principal: Principal, community_id: int, picture: str) -> Community:
        community = self.get_community(community_id)
        self.access.require_staff(principal, community_id)

        self.communities.update(community, picture=picture)
        self.db.commit()
        return community

    def list_roles(self) -> list[Role]:
        return self.roles.all()

    def give_user_community_role(
        self,
        principal: Principal,
        community_id: int,
        user_id: int,
        role_name: str,
    ) -> UserCommunity:
        """Create or update the single membership row of ``user_id`` in the community.

        Founders (and system administrators) may grant any role, moderators
        may grant the member role, and anyone may join as a member.
        """
        role = self._role_or_404(role_name)
        self.get_community(community_id)
        if not self.users.get(user_id):
            raise NotFoundError("User not found")

        existing = self.memberships.find(user_id, community_id)
        self._authorize_role_grant(principal, community_id, user_id, role.name, existing)

        try:
            membership = self._apply_role(existing, user_id, community_id, role)
        except IntegrityError:
            # A concurrent request created the membership first; judge the grant
            # against that row.
            self.db.rollback()
            existing = self.memberships.find(user_id, community_id)
            if existing is None:
                raise ConflictError("Membership changed concurrently, try again")
            self._authorize_role_grant(principal, community_id, user_id, role.name, existing)
            membership = self._apply_role(existing, user_id, community_id, role)

        logger.info(
            "User %s set role %s for user %s in community %s",
            principal.user_id, role.name, user_id, community_id,
        )
        return membership

    def get_user_role(self, community_id: int, user_id: int) -> Role:
        membership = self.memberships.find(user_id, community_id)
        if not membership:
            raise NotFoundError("This user has no role in that community")
        role = self.roles.get(membership.role_id)
        if not role:
            raise NotFoundError("Role not found")
        return role

    def get_members(self, community_id: int) -> list[dict]:
        self.get_community(community_id)
        return [
            {
                "id": user.id,
                "username": user.username,
                "picture": user.picture,
                "role": role.name if role else None,
                "role_display_name": role.display_name if role else None,
                "status": membership.status,
            }
            for user, membership, role in self.memberships.members(community_id)
        ]

    def remove_member(self, principal: Principal, community_id: int, user_id: int) -> None:
        membership = self.memberships.find(user_id, community_id)
        if not membership:
            raise NotFoundError("This user has no role in that community")

        if principal.user_id != user_id:
            target_role = membership.role.name if membership.role else None
            if target_role == ROLE_MEMBER:
                self.access.require_staff(principal, community_id)
            else:
                self.access.require_role(principal, community_id, [ROLE_FOUNDER])

        self.memberships.delete(membership)
        self.db.commit()

    def _apply_role(
        self,
        existing: Optional[UserCommunity],
        user_id: int,
        community_id: int,
        role: Role,
    ) -> UserCommunity:
        if existing:
            membership = self.memberships.update(existing, role_id=role.id)
        else:
            membership = self.memberships.add(
                user_id=user_id,
                community_id=community_id,
                role_id=role.id,
                status=MEMBERSHIP_STATUS_ACTIVE,
            )
        self.db.commit()
        return membership

    def _authorize_role_grant(
        self,
        principal: Principal,
        community_id: int,
        user_id: int,
        role_name: str,
        existing: Optional[UserCommunity],
    ) -> None:
        if self.access.has_role(principal, community_id, [ROLE_FOUNDER]):
            return
        existing_role = existing.role.name if existing and existing.role else None
        # Only founders can demote staff.
        if role_name == ROLE_MEMBER and existing_role in (None, ROLE_MEMBER):
            if self.access.role_of(principal, community_id) == ROLE_MODERATOR:
                return
            if principal.user_id == user_id and existing is None:
                return
        raise PermissionDeniedError()

    def _role_or_404(self, role_name: str) -> Role:
        role = self.roles.by_name(role_name)
        if not role:
            raise NotFoundError("Role not found")
        return role

    @staticmethod
    def _summary(community: Community, user_count: int) -> dict:
        return {
            "id": community.id,
            "name": community.name,
            "description": community.description,
            "picture": community.picture,
            "user_count": user_count,
        }
