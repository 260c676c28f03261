"""SQLModel models package."""

from .comment import Comment
from .follow import Follow
from .like import CommentLike, PostLike
from .notification import Notification, NotificationKind
from .post import Post
from .user import User

__all__ = [
    "User",
    "Follow",
    "Post",
    "Comment",
    "PostLike",
    "CommentLike",
    "Notification",
    "NotificationKind",
]
