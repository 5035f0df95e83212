"""Playlists domain - user-created playlists and song membership.

This domain handles:
- Playlist CRUD operations (create, edit metadata, lookup)
- Song <-> playlist membership kept consistent on both sides
- Invariant checks for the membership relation
"""

# CRUD operations
from .crud import (
    create_playlist,
    update_playlist,
    get_playlist_by_title,
    playlist_song_count,
)

# Membership
from .membership import (
    MembershipResult,
    reconcile_membership,
    add_song_to_playlist,
    remove_song_from_playlist,
    delete_song,
    delete_playlist,
    find_membership_violations,
)

__all__ = [
    # CRUD
    "create_playlist",
    "update_playlist",
    "get_playlist_by_title",
    "playlist_song_count",
    # Membership
    "MembershipResult",
    "reconcile_membership",
    "add_song_to_playlist",
    "remove_song_from_playlist",
    "delete_song",
    "delete_playlist",
    "find_membership_violations",
]
