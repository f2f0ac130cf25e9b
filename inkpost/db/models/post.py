from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inkpost.db.base import Base

if TYPE_CHECKING:
    from inkpost.db.models.asset import Asset
    from inkpost.db.models.profile import Profile


class PostStatus(StrEnum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class Post(Base):
    """A blog post. Comments hang off posts; cover images are tracked assets."""

    __tablename__ = "posts"

    # Author profile
    author_id: Mapped[UUID] = mapped_column(ForeignKey("profiles.id"), nullable=False, index=True)
    author: Mapped["Profile"] = relationship("Profile", lazy="selectin")

    # Content fields
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    excerpt: Mapped[str] = mapped_column(Text, nullable=False, default="")
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Publication fields
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=PostStatus.DRAFT, index=True)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Cover image (asset reference counted)
    cover_image_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    cover_asset_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("assets.id", ondelete="SET NULL"), nullable=True
    )
    cover_asset: Mapped["Asset | None"] = relationship(
        "Asset", lazy="selectin", foreign_keys=[cover_asset_id]
    )
