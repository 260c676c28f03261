"""Like membership, toggle engine and toggle debounce policy."""

from .debounce import ToggleDebouncer, get_toggle_debouncer, set_toggle_debouncer
from .membership import (
    COMMENT_LIKES,
    POST_LIKES,
    LikeableKind,
    add_member,
    delete_all_members,
    delete_user_memberships,
    is_member,
    list_members,
    remove_member,
)
from .toggle import LikeTarget, ToggleAction, ToggleResult, toggle_like

__all__ = [
    "COMMENT_LIKES",
    "POST_LIKES",
    "LikeableKind",
    "LikeTarget",
    "ToggleAction",
    "ToggleResult",
    "ToggleDebouncer",
    "add_member",
    "delete_all_members",
    "delete_user_memberships",
    "get_toggle_debouncer",
    "is_member",
    "list_members",
    "remove_member",
    "set_toggle_debouncer",
    "toggle_like",
]
