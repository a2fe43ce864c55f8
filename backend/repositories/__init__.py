"""Per-entity repositories keeping query construction out of routers and services."""

from repositories.users import UserRepository
from repositories.communities import CommunityRepository, MembershipRepository, RoleRepository
from repositories.content import CategoryRepository, CommentRepository, PostRepository
from repositories.reactions import CommentReactionRepository, PostReactionRepository
from repositories.plants import PlantRepository, UserPlantRepository
from repositories.messages import MessageRepository

__all__ = [
    "UserRepository",
    "CommunityRepository",
    "MembershipRepository",
    "RoleRepository",
    "CategoryRepository",
    "CommentRepository",
    "PostRepository",
    "CommentReactionRepository",
    "PostReactionRepository",
    "PlantRepository",
    "UserPlantRepository",
    "MessageRepository",
]
