"""Plant catalog and the user collection join table."""

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Table
from sqlalchemy.orm import relationship

from database import Base, utcnow


# Pure association: no surrogate key, no timestamps.
user_plant = Table(
    "user_plant",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("plant_id", Integer, ForeignKey("plants.id", ondelete="CASCADE"), primary_key=True),
)


class Plant(Base):
    __tablename__ = "plants"

    id = Column(Integer, primary_key=True, index=True)
    scientific_name = Column(String(255), unique=True, index=True, nullable=False)
    family = Column(String(255), nullable=False)
    images = Column(JSON, nullable=False, default=list)
    common_names = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    users = relationship("User", secondary=user_plant, back_populates="plants")
