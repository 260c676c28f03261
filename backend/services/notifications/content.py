"""Rendering of notification content strings."""

from __future__ import annotations

PREVIEW_LENGTH = 30
TRUNCATION_MARKER = "..."


def preview(text: str, length: int = PREVIEW_LENGTH) -> str:
    """Return the first ``length`` characters of ``text``.

    The truncation marker is appended only when something was cut off, so
    text of exactly ``length`` characters comes back unchanged.
    """
    if len(text) > length:
        return f"{text[:length]}{TRUNCATION_MARKER}"
    return text


def render_like_content(subject_content: str, sender_username: str) -> str:
    return f'"{preview(subject_content)}" liked by {sender_username}'


def render_comment_content(
    post_content: str,
    sender_username: str,
    comment_content: str,
) -> str:
    return (
        f'"{preview(post_content)}" commented by {sender_username}: '
        f'"{preview(comment_content)}"'
    )
