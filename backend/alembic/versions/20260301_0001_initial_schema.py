"""Initial schema: users, communities, roles, content, reactions, plants, chat.

Revision ID: 0001
Revises:
Create Date: 2026-03-01
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = '0001'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    ]


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('hashed_password', sa.String(), nullable=False),
        sa.Column('picture', sa.String(512), nullable=True),
        sa.Column('is_admin', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('reset_password_token_hash', sa.String(64), nullable=True),
        sa.Column('reset_password_expires', sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_username', 'users', ['username'], unique=True)
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_reset_password_token_hash', 'users', ['reset_password_token_hash'])

    op.create_table(
        'communities',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('picture', sa.String(512), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_communities_id', 'communities', ['id'])
    op.create_index('ix_communities_name', 'communities', ['name'], unique=True)

    op.create_table(
        'roles',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(64), nullable=False, unique=True),
        sa.Column('display_name', sa.String(128), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_roles_id', 'roles', ['id'])

    op.create_table(
        'user_community',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('community_id', sa.Integer(), sa.ForeignKey('communities.id', ondelete='CASCADE'), nullable=False),
        sa.Column('role_id', sa.Integer(), sa.ForeignKey('roles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('status', sa.String(32), nullable=False, server_default='active'),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'community_id', name='uq_user_community'),
    )
    op.create_index('ix_user_community_id', 'user_community', ['id'])
    op.create_index('ix_user_community_user_id', 'user_community', ['user_id'])
    op.create_index('ix_user_community_community_id', 'user_community', ['community_id'])

    op.create_table(
        'categories',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.String(1024), nullable=False),
        sa.Column(
            'community_id',
            sa.Integer(),
            sa.ForeignKey('communities.id', ondelete='CASCADE', onupdate='CASCADE'),
            nullable=False,
        ),
        *_timestamps(),
    )
    op.create_index('ix_categories_id', 'categories', ['id'])
    op.create_index('ix_categories_community_id', 'categories', ['community_id'])

    op.create_table(
        'posts',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column(
            'user_id',
            sa.Integer(),
            sa.ForeignKey('users.id', ondelete='SET NULL', onupdate='CASCADE'),
            nullable=True,
        ),
        sa.Column(
            'category_id',
            sa.Integer(),
            sa.ForeignKey('categories.id', ondelete='CASCADE', onupdate='CASCADE'),
            nullable=False,
        ),
        *_timestamps(),
    )
    op.create_index('ix_posts_id', 'posts', ['id'])
    op.create_index('ix_posts_user_id', 'posts', ['user_id'])
    op.create_index('ix_posts_category_id', 'posts', ['category_id'])
    op.create_index('ix_posts_created_at', 'posts', ['created_at'])

    op.create_table(
        'comments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('post_id', sa.Integer(), sa.ForeignKey('posts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_comments_id', 'comments', ['id'])
    op.create_index('ix_comments_post_id', 'comments', ['post_id'])
    op.create_index('ix_comments_user_id', 'comments', ['user_id'])

    # One reaction per (user, target); the constraint settles racing toggles.
    op.create_table(
        'post_reactions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('post_id', sa.Integer(), sa.ForeignKey('posts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('reaction_type', sa.String(16), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'post_id', name='uq_post_user_reaction'),
    )
    op.create_index('ix_post_reactions_id', 'post_reactions', ['id'])
    op.create_index('ix_post_reactions_post_id', 'post_reactions', ['post_id'])
    op.create_index('ix_post_reactions_user_id', 'post_reactions', ['user_id'])

    op.create_table(
        'comment_reactions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('comment_id', sa.Integer(), sa.ForeignKey('comments.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('reaction_type', sa.String(16), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'comment_id', name='uq_comment_user_reaction'),
    )
    op.create_index('ix_comment_reactions_id', 'comment_reactions', ['id'])
    op.create_index('ix_comment_reactions_comment_id', 'comment_reactions', ['comment_id'])
    op.create_index('ix_comment_reactions_user_id', 'comment_reactions', ['user_id'])

    op.create_table(
        'plants',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('scientific_name', sa.String(255), nullable=False),
        sa.Column('family', sa.String(255), nullable=False),
        sa.Column('images', sa.JSON(), nullable=False),
        sa.Column('common_names', sa.JSON(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_plants_id', 'plants', ['id'])
    op.create_index('ix_plants_scientific_name', 'plants', ['scientific_name'], unique=True)

    op.create_table(
        'user_plant',
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('plant_id', sa.Integer(), sa.ForeignKey('plants.id', ondelete='CASCADE'), primary_key=True),
    )

    op.create_table(
        'messages',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('text', sa.Text(), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('community_id', sa.Integer(), sa.ForeignKey('communities.id', ondelete='CASCADE'), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_messages_id', 'messages', ['id'])
    op.create_index('ix_messages_user_id', 'messages', ['user_id'])
    op.create_index('ix_messages_community_id', 'messages', ['community_id'])
    op.create_index('ix_messages_created_at', 'messages', ['created_at'])


def downgrade():
    op.drop_table('messages')
    op.drop_table('user_plant')
    op.drop_table('plants')
    op.drop_table('comment_reactions')
    op.drop_table('post_reactions')
    op.drop_table('comments')
    op.drop_table('posts')
    op.drop_table('categories')
    op.drop_table('user_community')
    op.drop_table('roles')
    op.drop_table('communities')
    op.drop_table('users')
