"""
Music library domain models.

Contains the Song and Playlist records that make up the catalog.
"""

from dataclasses import dataclass, field
from typing import Optional

DEFAULT_VOLUME = 50.0


@dataclass(eq=False)
class Song:
    """Represents a song in the catalog.

    Identity is the ``id`` field. ``playlist_ids`` is a derived cache rebuilt
    from the playlists' ``song_ids`` during reconciliation; callers should go
    through the membership operations instead of editing it directly.
    """

    id: str
    name: str
    display_index: str = ""  # Presentational 1-based ordinal ("01", "02", ...)
    playlist_ids: list[str] = field(default_factory=list)
    is_liked: bool = False
    volume: float = DEFAULT_VOLUME  # Per-song gain (0-100)
    duration: str = ""  # Cached "mm:ss", advisory only
    is_current: bool = False  # Ephemeral, never persisted

    def to_record(self) -> dict:
        """Serialize to the persisted song document shape."""
        return {
            "id": self.id,
            "index": self.display_index,
            "name": self.name,
            "playlistIds": list(self.playlist_ids),
            "isLiked": self.is_liked,
            "volume": self.volume,
            "duration": self.duration,
        }


@dataclass(eq=False)
class Playlist:
    """Represents a user-created playlist.

    ``song_ids`` is the source of truth for membership and its order is the
    display order. ``legacy_song_names`` only ever comes from old files and is
    cleared once migrated.
    """

    id: str
    title: str = ""
    description: str = ""
    icon_path: Optional[str] = None
    is_private: bool = False
    song_ids: list[str] = field(default_factory=list)
    legacy_song_names: Optional[list[str]] = None

    def to_record(self) -> dict:
        """Serialize to the persisted playlist document shape."""
        record = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "iconPath": self.icon_path,
            "isPrivate": self.is_private,
            "songIds": list(self.song_ids),
        }
        if self.legacy_song_names is not None:
            record["songNames"] = list(self.legacy_song_names)
        return record
