"""Model package exports for database initialization."""

from models.user import User
from models.community import Community, Role, UserCommunity
from models.content import Category, Post, Comment
from models.reactions import PostReaction, CommentReaction
from models.plant import Plant, user_plant
from models.message import Message

__all__ = [
    "User",
    "Community",
    "Role",
    "UserCommunity",
    "Category",
    "Post",
    "Comment",
    "PostReaction",
    "CommentReaction",
    "Plant",
    "user_plant",
    "Message",
]
