"""Tests for roles, principals and ownership checks."""

from uuid import uuid4

import pytest

from inkpost.auth.permissions import (
    MANAGE_USERS,
    MODERATE_COMMENTS,
    can_manage,
    can_manage_comment,
    is_profile_owner,
    is_staff,
    require_permission,
)
from inkpost.auth.principal import Principal
from inkpost.auth.roles import ROLE_DEFINITIONS, STAFF_ROLES, UserRole, get_role_definition
from inkpost.db.models import Comment
from inkpost.lib.errors import ForbiddenError


def principal(role: UserRole = UserRole.READER) -> Principal:
    return Principal(id=uuid4(), uuid=str(uuid4()), role=role)


class TestRoleDefinitions:
    """Every role has a definition and staff status is explicit."""

    @pytest.mark.parametrize("role", list(UserRole))
    def test_every_role_is_defined(self, role):
        definition = get_role_definition(role)
        assert definition.role is role
        assert definition.display_name

    def test_staff_roles(self):
        assert STAFF_ROLES == {UserRole.ADMIN, UserRole.SUPER_ADMIN, UserRole.EDITOR}

    def test_definitions_cover_enum_exactly(self):
        assert set(ROLE_DEFINITIONS) == set(UserRole)

    def test_lookup_by_string(self):
        assert get_role_definition("editor").is_staff

    def test_unknown_role_raises(self):
        with pytest.raises(ValueError):
            get_role_definition("owner")

    def test_staff_can_moderate(self):
        assert principal(UserRole.EDITOR).has_permission("moderate-comments")
        assert not principal(UserRole.AUTHOR).has_permission("moderate-comments")


class TestIsStaff:
    @pytest.mark.parametrize("role", [UserRole.ADMIN, UserRole.SUPER_ADMIN, UserRole.EDITOR])
    def test_staff(self, role):
        assert is_staff(principal(role))

    @pytest.mark.parametrize("role", [UserRole.AUTHOR, UserRole.READER])
    def test_not_staff(self, role):
        assert not is_staff(principal(role))

    def test_anonymous_is_not_staff(self):
        assert not is_staff(None)


class TestCanManage:
    def test_owner(self):
        p = principal()
        assert can_manage(p, p.id)

    def test_stranger(self):
        assert not can_manage(principal(UserRole.AUTHOR), uuid4())

    def test_staff(self):
        assert can_manage(principal(UserRole.EDITOR), uuid4())

    def test_anonymous(self):
        assert not can_manage(None, uuid4())

    def test_missing_owner(self):
        assert not can_manage(principal(), None)


class TestCommentOwnership:
    """Ownership resolves through the author profile's user uuid."""

    @pytest.mark.asyncio
    async def test_profile_owner(self, db_session, make_user):
        _, owner, profile = await make_user()
        _, other, _ = await make_user()

        assert await is_profile_owner(db_session, owner, profile.id)
        assert not await is_profile_owner(db_session, other, profile.id)
        assert not await is_profile_owner(db_session, owner, uuid4())

    @pytest.mark.asyncio
    async def test_can_manage_comment(self, db_session, make_user):
        _, owner, profile = await make_user()
        _, other, _ = await make_user()
        _, admin, _ = await make_user(role=UserRole.ADMIN)
        comment = Comment(post_id=uuid4(), author_id=profile.id, content="hi")

        assert await can_manage_comment(db_session, owner, comment)
        assert await can_manage_comment(db_session, admin, comment)
        assert not await can_manage_comment(db_session, other, comment)
        assert not await can_manage_comment(db_session, None, comment)


class TestRequirePermission:
    @pytest.mark.parametrize("role", [UserRole.ADMIN, UserRole.SUPER_ADMIN])
    def test_admins_manage_users(self, role):
        require_permission(principal(role), MANAGE_USERS)

    @pytest.mark.parametrize("role", [UserRole.EDITOR, UserRole.AUTHOR, UserRole.READER])
    def test_others_cannot_manage_users(self, role):
        with pytest.raises(ForbiddenError):
            require_permission(principal(role), MANAGE_USERS)

    def test_editor_moderates(self):
        require_permission(principal(UserRole.EDITOR), MODERATE_COMMENTS)

    def test_anonymous_is_forbidden(self):
        with pytest.raises(ForbiddenError):
            require_permission(None, MODERATE_COMMENTS)
