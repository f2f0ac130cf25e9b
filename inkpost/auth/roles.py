"""Role definitions for the application."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class UserRole(StrEnum):
    """Closed set of account roles."""

    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    EDITOR = "editor"
    AUTHOR = "author"
    READER = "reader"


@dataclass
class RoleDefinition:
    """Definition of a role with its permissions."""

    role: UserRole
    permissions: set[str] = field(default_factory=set)
    display_name: str | None = None
    description: str | None = None
    is_staff: bool = False


def create_role(
    role: UserRole,
    *permissions: str,
    display_name: str | None = None,
    description: str | None = None,
    is_staff: bool = False,
) -> RoleDefinition:
    """Create a role definition with the given permissions.

    Args:
        role: The role being defined
        *permissions: Permission strings granted by this role
        display_name: Human-readable name for the role
        description: Description of the role's purpose
        is_staff: Whether holders may manage other users' content

    Returns:
        A RoleDefinition instance
    """
    return RoleDefinition(
        role=role,
        permissions=set(permissions),
        display_name=display_name or role.value.replace("_", " ").title(),
        description=description,
        is_staff=is_staff,
    )


# Staff roles manage any asset or comment; everyone else only their own.

SUPER_ADMIN = create_role(
    UserRole.SUPER_ADMIN,
    "manage-users",
    "moderate-comments",
    display_name="Super Administrator",
    description="Full system access",
    is_staff=True,
)

ADMIN = create_role(
    UserRole.ADMIN,
    "manage-users",
    "moderate-comments",
    display_name="Administrator",
    description="Manages users, content and media",
    is_staff=True,
)

EDITOR = create_role(
    UserRole.EDITOR,
    "moderate-comments",
    display_name="Editor",
    description="Manages all posts, media and comments",
    is_staff=True,
)

AUTHOR = create_role(
    UserRole.AUTHOR,
    display_name="Author",
    description="Writes posts and manages own media",
)

READER = create_role(
    UserRole.READER,
    display_name="Reader",
    description="Comments on posts",
)

ROLE_DEFINITIONS: dict[UserRole, RoleDefinition] = {
    definition.role: definition
    for definition in [SUPER_ADMIN, ADMIN, EDITOR, AUTHOR, READER]
}

STAFF_ROLES: frozenset[UserRole] = frozenset(
    role for role, definition in ROLE_DEFINITIONS.items() if definition.is_staff
)


def get_role_definition(role: UserRole | str) -> RoleDefinition:
    """Get the definition for a role.

    Raises:
        ValueError: If ``role`` is not a known role name.
    """
    return ROLE_DEFINITIONS[UserRole(role)]
