"""Builders for persisted notifications.

The builders only construct rows; callers add them to the session that also
carries the triggering write so both commit together.
"""

from __future__ import annotations

from models import Comment, Notification, Post, User
from .content import render_comment_content, render_like_content


def build_like_notification(
    *,
    recipient_id: str,
    sender: User,
    post_id: str,
    subject_content: str,
    comment_id: str | None = None,
) -> Notification | None:
    """Return the like notification for ``recipient_id`` or None on a self-like."""
    if sender.id == recipient_id:
        return None
    return Notification(
        recipient_id=recipient_id,
        sender_id=sender.id,
        post_id=post_id,
        comment_id=comment_id,
        kind="like",
        content=render_like_content(subject_content, sender.username),
    )


def build_comment_notification(
    *,
    post: Post,
    comment: Comment,
    sender: User,
) -> Notification | None:
    """Return the notification telling the post author about a new comment."""
    if sender.id == post.author_id:
        return None
    return Notification(
        recipient_id=post.author_id,
        sender_id=sender.id,
        post_id=post.id,
        comment_id=comment.id,
        kind="comment",
        content=render_comment_content(post.content, sender.username, comment.content),
    )
