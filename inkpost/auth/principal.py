"""The authenticated caller passed into every service operation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING
from uuid import UUID

from inkpost.auth.roles import UserRole, get_role_definition

if TYPE_CHECKING:
    from inkpost.db.models.user import User


@dataclass(frozen=True)
class Principal:
    """Caller identity: account id, stable public uuid, and role."""

    id: UUID
    uuid: str
    role: UserRole

    @property
    def is_staff(self) -> bool:
        return get_role_definition(self.role).is_staff

    def has_permission(self, permission: str) -> bool:
        return permission in get_role_definition(self.role).permissions

    @classmethod
    def from_user(cls, user: User) -> Principal:
        return cls(id=user.id, uuid=user.uuid, role=UserRole(user.role))
