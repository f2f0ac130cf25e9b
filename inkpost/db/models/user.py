from datetime import datetime
from uuid import uuid4

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from inkpost.auth.roles import UserRole
from inkpost.db.base import Base


def _new_public_uuid() -> str:
    return str(uuid4())


class User(Base):
    """An account. ``uuid`` is the stable public identity shared with its profile."""

    __tablename__ = "users"

    uuid: Mapped[str] = mapped_column(
        String(36), nullable=False, unique=True, index=True, default=_new_public_uuid
    )

    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)

    role: Mapped[str] = mapped_column(String(32), nullable=False, default=UserRole.READER)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="active")

    email_verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    @property
    def is_active(self) -> bool:
        return self.status == "active"
