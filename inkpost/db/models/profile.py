from uuid import UUID

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from inkpost.db.base import Base


class Profile(Base):
    """Public author profile, linked to its account by ``user_uuid``.

    ``avatar_url`` mirrors the URL of ``avatar_asset_id``, which holds one
    counted reference on that asset.
    """

    __tablename__ = "profiles"

    user_uuid: Mapped[str] = mapped_column(String(36), nullable=False, unique=True, index=True)

    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    avatar_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    avatar_asset_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("assets.id", ondelete="SET NULL"), nullable=True
    )
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)

    website_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)

    twitter_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    github_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    linkedin_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
