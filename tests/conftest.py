"""Shared pytest fixtures."""

from __future__ import annotations

import itertools
from datetime import UTC, datetime, timedelta

import pytest
import yaml
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import inkpost.db.models  # noqa: F401 - register all models on Base
from inkpost.auth.principal import Principal
from inkpost.auth.roles import UserRole
from inkpost.db.base import Base
from inkpost.db.models import Asset, AssetStatus, Comment, CommentStatus, Post, Profile, User
from inkpost.lib.hooks import hooks

from fakes import FakeObjectStore

BASE_TIME = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def store():
    return FakeObjectStore()


@pytest.fixture
def make_user(db_session):
    """Factory creating a user (and by default its profile); returns (user, principal, profile)."""
    counter = itertools.count(1)

    async def _make(role: UserRole = UserRole.READER, with_profile: bool = True, status: str = "active"):
        n = next(counter)
        user = User(email=f"user{n}@example.com", username=f"user{n}", role=role, status=status)
        db_session.add(user)
        await db_session.flush()

        profile = None
        if with_profile:
            profile = Profile(user_uuid=user.uuid, display_name=user.username)
            db_session.add(profile)

        await db_session.commit()
        await db_session.refresh(user)
        if profile is not None:
            await db_session.refresh(profile)
        return user, Principal.from_user(user), profile

    return _make


@pytest.fixture
def make_post(db_session):
    counter = itertools.count(1)

    async def _make(author: Profile, **fields):
        n = next(counter)
        post = Post(author_id=author.id, slug=f"post-{n}", title=f"Post {n}", **fields)
        db_session.add(post)
        await db_session.commit()
        await db_session.refresh(post)
        return post

    return _make


@pytest.fixture
def make_asset(db_session, store):
    """Factory for assets whose object already exists in the fake store."""
    counter = itertools.count(1)

    async def _make(owner: User, status: AssetStatus = AssetStatus.ACTIVE, ref_count: int = 0, **fields):
        key = f"inkpost/assets/seed{next(counter)}"
        url = store.put(key)
        asset = Asset(
            url=url,
            provider=store.provider,
            key=key,
            owner_id=owner.id,
            status=status,
            ref_count=ref_count,
            used_by=[],
            **fields,
        )
        db_session.add(asset)
        await db_session.commit()
        await db_session.refresh(asset)
        return asset

    return _make


@pytest.fixture
def make_comment(db_session):
    """Factory for comments with strictly increasing ``created_at``."""
    counter = itertools.count(1)

    async def _make(
        post: Post,
        author: Profile,
        parent: Comment | None = None,
        status: CommentStatus = CommentStatus.APPROVED,
        content: str | None = None,
    ):
        n = next(counter)
        comment = Comment(
            post_id=post.id,
            author_id=author.id,
            parent_id=parent.id if parent else None,
            content=content or f"Comment {n}",
            status=status,
            created_at=BASE_TIME + timedelta(minutes=n),
        )
        db_session.add(comment)
        await db_session.commit()
        await db_session.refresh(comment)
        return comment

    return _make


@pytest.fixture
def temp_app_yaml(tmp_path):
    """Create a temporary app.yaml file for testing."""
    config_path = tmp_path / "app.yaml"

    def _create_config(config: dict):
        with open(config_path, "w") as f:
            yaml.safe_dump(config, f)
        return config_path

    return _create_config


@pytest.fixture
def clean_hooks():
    """Save and restore hooks state around a test."""
    original_filters = hooks._filters.copy()
    original_actions = hooks._actions.copy()
    yield
    hooks._filters = original_filters
    hooks._actions = original_actions
