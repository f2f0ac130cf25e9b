from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inkpost.db.base import Base

if TYPE_CHECKING:
    from inkpost.db.models.profile import Profile

DELETED_PLACEHOLDER = "[deleted]"


class CommentStatus(StrEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    SPAM = "spam"
    DELETED = "deleted"


class Comment(Base):
    """A comment on a post; replies point at their parent comment."""

    __tablename__ = "comments"
    __table_args__ = (
        Index("ix_comment_post_parent_created", "post_id", "parent_id", "created_at"),
        Index("ix_comment_post_status_created", "post_id", "status", "created_at"),
        Index("ix_comment_author_created", "author_id", "created_at"),
    )

    post_id: Mapped[UUID] = mapped_column(ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)

    author_id: Mapped[UUID] = mapped_column(ForeignKey("profiles.id"), nullable=False, index=True)
    author: Mapped["Profile"] = relationship("Profile", lazy="selectin")

    # Self-referential FK for replies
    parent_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("comments.id", ondelete="SET NULL"), nullable=True, index=True
    )

    content: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=CommentStatus.PENDING, index=True)
    edited_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    @property
    def is_deleted(self) -> bool:
        return self.status == CommentStatus.DELETED

    @property
    def display_content(self) -> str:
        """Content as shown to readers; deleted comments keep their text in storage."""
        if self.is_deleted:
            return DELETED_PLACEHOLDER
        return self.content
