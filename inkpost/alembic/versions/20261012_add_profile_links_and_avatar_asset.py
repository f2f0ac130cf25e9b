"""Add social links and avatar_asset_id to profiles.

Revision ID: 7c8d9e0f1a2b
Revises: 1a2b3c4d5e6f
Create Date: 2026-10-12
"""

from alembic import op
import sqlalchemy as sa

revision = "7c8d9e0f1a2b"
down_revision = "1a2b3c4d5e6f"
branch_labels = None
depends_on = None


def upgrade() -> None:
    with op.batch_alter_table("profiles") as batch_op:
        batch_op.add_column(sa.Column("twitter_url", sa.String(length=1024), nullable=True))
        batch_op.add_column(sa.Column("github_url", sa.String(length=1024), nullable=True))
        batch_op.add_column(sa.Column("linkedin_url", sa.String(length=1024), nullable=True))
        batch_op.add_column(sa.Column("avatar_asset_id", sa.Uuid(), nullable=True))
        batch_op.create_foreign_key(
            "fk_profiles_avatar_asset_id",
            "assets",
            ["avatar_asset_id"],
            ["id"],
            ondelete="SET NULL",
        )


def downgrade() -> None:
    with op.batch_alter_table("profiles") as batch_op:
        batch_op.drop_constraint("fk_profiles_avatar_asset_id", type_="foreignkey")
        batch_op.drop_column("avatar_asset_id")
        batch_op.drop_column("linkedin_url")
        batch_op.drop_column("github_url")
        batch_op.drop_column("twitter_url")
