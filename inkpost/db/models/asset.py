"""Asset model for uploaded media tracked by the registry."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from uuid import UUID

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from inkpost.db.base import Base


class AssetStatus(StrEnum):
    ACTIVE = "active"
    ORPHANED = "orphaned"
    PENDING_DELETE = "pending_delete"
    DELETED = "deleted"


class AssetRefKind(StrEnum):
    POST = "post"
    PROFILE = "profile"


class Asset(Base):
    """A stored image and the count of content entities embedding it.

    ``ref_count`` is the enforced number; ``used_by`` lists the referencing
    ``{kind, ref_id, field}`` entries for inspection.
    """

    __tablename__ = "assets"
    __table_args__ = (
        UniqueConstraint("provider", "key", name="uq_asset_provider_key"),
        Index("ix_asset_owner_created", "owner_id", "created_at"),
        Index("ix_asset_status_orphaned", "status", "orphaned_at"),
    )

    url: Mapped[str] = mapped_column(String(1024), nullable=False)
    provider: Mapped[str] = mapped_column(String(32), nullable=False, default="cloudinary", index=True)
    key: Mapped[str] = mapped_column(String(512), nullable=False, index=True)

    owner_id: Mapped[UUID] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)

    status: Mapped[str] = mapped_column(String(32), nullable=False, default=AssetStatus.ACTIVE, index=True)

    ref_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)
    used_by: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)

    # Provider-reported metadata
    mime_type: Mapped[str | None] = mapped_column(String(128), nullable=True)
    size: Mapped[int | None] = mapped_column(Integer, nullable=True)
    width: Mapped[int | None] = mapped_column(Integer, nullable=True)
    height: Mapped[int | None] = mapped_column(Integer, nullable=True)
    format: Mapped[str | None] = mapped_column(String(32), nullable=True)
    original_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    orphaned_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, index=True)
