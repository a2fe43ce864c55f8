"""Communities, the fixed role catalog, and the membership join table."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from database import Base, utcnow


ROLE_FOUNDER = "community_founder"
ROLE_MODERATOR = "community_moderator"
ROLE_MEMBER = "community_member"

DEFAULT_ROLES = [
    {"name": ROLE_FOUNDER, "display_name": "Founder"},
    {"name": ROLE_MODERATOR, "display_name": "Moderator"},
    {"name": ROLE_MEMBER, "display_name": "Member"},
]

MEMBERSHIP_STATUS_ACTIVE = "active"


class Community(Base):
    __tablename__ = "communities"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, index=True, nullable=False)
    description = Column(Text, nullable=True)
    picture = Column(String(512), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # ORM cascades mirror the ON DELETE CASCADE foreign keys so deletes behave
    # the same with or without database-level enforcement.
    memberships = relationship(
        "UserCommunity",
        back_populates="community",
        cascade="all, delete-orphan",
    )
    categories = relationship(
        "Category",
        back_populates="community",
        cascade="all, delete-orphan",
    )
    messages = relationship(
        "Message",
        back_populates="community",
        cascade="all, delete-orphan",
    )


class Role(Base):
    """A fixed community role level (founder, moderator, member)."""

    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(64), unique=True, nullable=False)
    display_name = Column(String(128), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class UserCommunity(Base):
    """Membership of a user in a community, carrying their role."""

    __tablename__ = "user_community"
    __table_args__ = (
        UniqueConstraint("user_id", "community_id", name="uq_user_community"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    community_id = Column(
        Integer,
        ForeignKey("communities.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role_id = Column(
        Integer,
        ForeignKey("roles.id", ondelete="CASCADE"),
        nullable=False,
    )
    status = Column(String(32), default=MEMBERSHIP_STATUS_ACTIVE, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="memberships")
    community = relationship("Community", back_populates="memberships")
    role = relationship("Role", lazy="joined")
