"""Request bodies for the JSON API.

Comment length limits come from ``comments.max_length`` and are checked
in the service, not here.
"""

from uuid import UUID

from pydantic import BaseModel, Field

from inkpost.db.models import CommentStatus, PostStatus


class CommentCreate(BaseModel):
    post_id: UUID
    content: str = Field(min_length=1)
    parent_id: UUID | None = None


class CommentUpdate(BaseModel):
    content: str | None = Field(default=None, min_length=1)


class CommentModerate(BaseModel):
    status: CommentStatus


class PostCreate(BaseModel):
    title: str = Field(min_length=1, max_length=500)
    content: str = ""
    excerpt: str = ""
    slug: str | None = Field(default=None, max_length=255)
    status: PostStatus = PostStatus.DRAFT
    cover_asset_id: UUID | None = None


class PostUpdate(BaseModel):
    """Partial update; an explicit ``"cover_asset_id": null`` clears the cover."""

    title: str | None = Field(default=None, min_length=1, max_length=500)
    content: str | None = None
    excerpt: str | None = None
    slug: str | None = Field(default=None, max_length=255)
    status: PostStatus | None = None
    cover_asset_id: UUID | None = None


class ProfileUpdate(BaseModel):
    """Partial update; an explicit ``"avatar_asset_id": null`` clears the avatar."""

    display_name: str | None = Field(default=None, min_length=1, max_length=80)
    bio: str | None = Field(default=None, max_length=500)
    website_url: str | None = Field(default=None, max_length=1024)
    location: str | None = Field(default=None, max_length=120)
    twitter_url: str | None = Field(default=None, max_length=1024)
    github_url: str | None = Field(default=None, max_length=1024)
    linkedin_url: str | None = Field(default=None, max_length=1024)
    avatar_asset_id: UUID | None = None


class ProfileCreate(ProfileUpdate):
    user_uuid: str = Field(min_length=1, max_length=36)
    display_name: str = Field(min_length=1, max_length=80)
