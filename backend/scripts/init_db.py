#!/usr/bin/env python
"""
Create all tables and seed the community role catalog.

For local development; deployed databases are managed with `alembic upgrade head`.

Usage:
    cd backend
    python scripts/init_db.py
"""
import logging
import os
import sys

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database import Base, SessionLocal, engine
import models  # noqa: F401
from repositories import RoleRepository


logger = logging.getLogger(__name__)


def init_database():
    """Create tables and insert the default roles."""
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        added = RoleRepository(db).ensure_defaults()
        db.commit()
        logger.info("Seeded %s roles", added)
    finally:
        db.close()

    logger.info("Database initialization complete")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    init_database()
