"""Seed the community role catalog

Revision ID: 0002
Revises: 0001
Create Date: 2026-03-01

"""
from alembic import op
from sqlalchemy.sql import table, column
from sqlalchemy import String


# revision identifiers, used by Alembic.
revision = '0002'
down_revision = '0001'
branch_labels = None
depends_on = None


ROLES = [
    {"name": "community_founder", "display_name": "Founder"},
    {"name": "community_moderator", "display_name": "Moderator"},
    {"name": "community_member", "display_name": "Member"},
]


def upgrade():
    """Insert the three community roles."""
    roles_table = table(
        'roles',
        column('name', String),
        column('display_name', String),
    )

    op.bulk_insert(roles_table, ROLES)


def downgrade():
    """Remove seeded roles."""
    names = [r['name'] for r in ROLES]
    placeholders = ', '.join(f"'{name}'" for name in names)
    op.execute(f"DELETE FROM roles WHERE name IN ({placeholders})")
