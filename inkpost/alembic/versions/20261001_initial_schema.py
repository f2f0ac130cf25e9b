"""initial schema: users, profiles, assets, posts, comments

Revision ID: 1a2b3c4d5e6f
Revises:
Create Date: 2026-10-01 09:00:00.000000
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '1a2b3c4d5e6f'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('sa_orm_sentinel', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        *_audit_columns(),
        sa.Column('uuid', sa.String(length=36), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('username', sa.String(length=100), nullable=False),
        sa.Column('role', sa.String(length=32), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False),
        sa.Column('email_verified_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
        sa.UniqueConstraint('username'),
    )
    op.create_index('ix_users_uuid', 'users', ['uuid'], unique=True)

    op.create_table(
        'profiles',
        *_audit_columns(),
        sa.Column('user_uuid', sa.String(length=36), nullable=False),
        sa.Column('display_name', sa.String(length=100), nullable=False),
        sa.Column('avatar_url', sa.String(length=1024), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('website_url', sa.String(length=1024), nullable=True),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_profiles_user_uuid', 'profiles', ['user_uuid'], unique=True)

    op.create_table(
        'assets',
        *_audit_columns(),
        sa.Column('url', sa.String(length=1024), nullable=False),
        sa.Column('provider', sa.String(length=32), nullable=False),
        sa.Column('key', sa.String(length=512), nullable=False),
        sa.Column('owner_id', sa.Uuid(), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False),
        sa.Column('ref_count', sa.Integer(), nullable=False),
        sa.Column('used_by', sa.JSON(), nullable=False),
        sa.Column('mime_type', sa.String(length=128), nullable=True),
        sa.Column('size', sa.Integer(), nullable=True),
        sa.Column('width', sa.Integer(), nullable=True),
        sa.Column('height', sa.Integer(), nullable=True),
        sa.Column('format', sa.String(length=32), nullable=True),
        sa.Column('original_name', sa.String(length=255), nullable=True),
        sa.Column('orphaned_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('provider', 'key', name='uq_asset_provider_key'),
    )
    op.create_index('ix_assets_provider', 'assets', ['provider'])
    op.create_index('ix_assets_key', 'assets', ['key'])
    op.create_index('ix_assets_owner_id', 'assets', ['owner_id'])
    op.create_index('ix_assets_status', 'assets', ['status'])
    op.create_index('ix_assets_ref_count', 'assets', ['ref_count'])
    op.create_index('ix_assets_deleted_at', 'assets', ['deleted_at'])
    op.create_index('ix_asset_owner_created', 'assets', ['owner_id', 'created_at'])
    op.create_index('ix_asset_status_orphaned', 'assets', ['status', 'orphaned_at'])

    op.create_table(
        'posts',
        *_audit_columns(),
        sa.Column('author_id', sa.Uuid(), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('excerpt', sa.Text(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False),
        sa.Column('published_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cover_image_url', sa.String(length=1024), nullable=True),
        sa.Column('cover_asset_id', sa.Uuid(), nullable=True),
        sa.ForeignKeyConstraint(['author_id'], ['profiles.id']),
        sa.ForeignKeyConstraint(['cover_asset_id'], ['assets.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_posts_author_id', 'posts', ['author_id'])
    op.create_index('ix_posts_slug', 'posts', ['slug'], unique=True)
    op.create_index('ix_posts_status', 'posts', ['status'])

    op.create_table(
        'comments',
        *_audit_columns(),
        sa.Column('post_id', sa.Uuid(), nullable=False),
        sa.Column('author_id', sa.Uuid(), nullable=False),
        sa.Column('parent_id', sa.Uuid(), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False),
        sa.Column('edited_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['post_id'], ['posts.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['author_id'], ['profiles.id']),
        sa.ForeignKeyConstraint(['parent_id'], ['comments.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_comments_post_id', 'comments', ['post_id'])
    op.create_index('ix_comments_author_id', 'comments', ['author_id'])
    op.create_index('ix_comments_parent_id', 'comments', ['parent_id'])
    op.create_index('ix_comments_status', 'comments', ['status'])
    op.create_index('ix_comment_post_parent_created', 'comments', ['post_id', 'parent_id', 'created_at'])
    op.create_index('ix_comment_post_status_created', 'comments', ['post_id', 'status', 'created_at'])
    op.create_index('ix_comment_author_created', 'comments', ['author_id', 'created_at'])


def downgrade() -> None:
    op.drop_table('comments')
    op.drop_table('posts')
    op.drop_table('assets')
    op.drop_table('profiles')
    op.drop_table('users')
