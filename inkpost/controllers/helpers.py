"""Shared helpers for the JSON API controllers."""

from typing import Any

from litestar import Response
from litestar.datastructures import State

from inkpost.config import Settings
from inkpost.db.models import Asset, Comment, Post, Profile
from inkpost.lib.storage.base import ObjectStore


def envelope(message: str, data: Any = None, status_code: int = 200) -> Response:
    """Wrap ``data`` in the success envelope every endpoint returns."""
    return Response(
        content={"success": True, "message": message, "data": data},
        status_code=status_code,
        media_type="application/json",
    )


async def provide_object_store(state: State) -> ObjectStore:
    return state.object_store


async def provide_settings(state: State) -> Settings:
    return state.settings


def serialize_asset(asset: Asset) -> dict:
    return {
        "id": asset.id,
        "url": asset.url,
        "provider": asset.provider,
        "key": asset.key,
        "owner_id": asset.owner_id,
        "status": asset.status,
        "ref_count": asset.ref_count,
        "used_by": asset.used_by,
        "mime_type": asset.mime_type,
        "size": asset.size,
        "width": asset.width,
        "height": asset.height,
        "format": asset.format,
        "original_name": asset.original_name,
        "orphaned_at": asset.orphaned_at,
        "deleted_at": asset.deleted_at,
        "created_at": asset.created_at,
        "updated_at": asset.updated_at,
    }


def serialize_comment(comment: Comment, replies_count: int | None = None) -> dict:
    author = comment.author
    data = {
        "id": comment.id,
        "post_id": comment.post_id,
        "parent_id": comment.parent_id,
        "author": {
            "id": author.id,
            "uuid": author.user_uuid,
            "display_name": author.display_name,
            "avatar_url": author.avatar_url,
        }
        if author is not None
        else None,
        "content": comment.display_content,
        "status": comment.status,
        "edited_at": comment.edited_at,
        "created_at": comment.created_at,
        "updated_at": comment.updated_at,
    }
    if replies_count is not None:
        data["replies_count"] = replies_count
    return data


def serialize_post(post: Post) -> dict:
    return {
        "id": post.id,
        "slug": post.slug,
        "title": post.title,
        "excerpt": post.excerpt,
        "content": post.content,
        "status": post.status,
        "published_at": post.published_at,
        "author_id": post.author_id,
        "cover_image_url": post.cover_image_url,
        "cover_asset_id": post.cover_asset_id,
        "created_at": post.created_at,
        "updated_at": post.updated_at,
    }


def serialize_profile(profile: Profile) -> dict:
    return {
        "id": profile.id,
        "uuid": profile.user_uuid,
        "display_name": profile.display_name,
        "avatar_url": profile.avatar_url,
        "avatar_asset_id": profile.avatar_asset_id,
        "bio": profile.bio,
        "website_url": profile.website_url,
        "location": profile.location,
        "twitter_url": profile.twitter_url,
        "github_url": profile.github_url,
        "linkedin_url": profile.linkedin_url,
        "created_at": profile.created_at,
        "updated_at": profile.updated_at,
    }
