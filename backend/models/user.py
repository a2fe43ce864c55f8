from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from database import Base, utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(255), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    picture = Column(String(512), nullable=True)
    is_admin = Column(Boolean, default=False, nullable=False)
    # SHA-256 digest of the emailed reset token; the raw token is never stored.
    reset_password_token_hash = Column(String(64), nullable=True, index=True)
    reset_password_expires = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    memberships = relationship(
        "UserCommunity",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    plants = relationship("Plant", secondary="user_plant", back_populates="users")
