from inkpost.db.models.asset import Asset, AssetRefKind, AssetStatus
from inkpost.db.models.comment import Comment, CommentStatus
from inkpost.db.models.post import Post, PostStatus
from inkpost.db.models.profile import Profile
from inkpost.db.models.user import User

__all__ = ["Asset", "AssetRefKind", "AssetStatus", "Comment", "CommentStatus", "Post", "PostStatus", "Profile", "User"]
