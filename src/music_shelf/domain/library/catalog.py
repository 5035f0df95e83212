"""
In-memory catalog of songs and playlists.

The catalog is the reconciled whole produced by the normalizer. Membership
changes that touch both songs and playlists live in
``music_shelf.domain.playlists.membership``; this module covers lookups and
single-entity edits.
"""

from dataclasses import dataclass, field
from typing import Callable, Optional

from loguru import logger

from .exceptions import DuplicateSongError
from .identity import clamp_volume, format_display_index, generate_id
from .models import DEFAULT_VOLUME, Playlist, Song

SORT_MODES = ("alphabetical", "modified")


@dataclass
class Catalog:
    """Songs and playlists kept mutually consistent.

    Attributes:
        songs: All songs in catalog (display) order
        playlists: All playlists in sidebar order
    """

    songs: list[Song] = field(default_factory=list)
    playlists: list[Playlist] = field(default_factory=list)

    # --- Lookups ---

    def song_by_id(self, song_id: Optional[str]) -> Optional[Song]:
        if not song_id:
            return None
        for song in self.songs:
            if song.id == song_id:
                return song
        return None

    def song_by_name(self, name: Optional[str]) -> Optional[Song]:
        """Find a song by name, ignoring case and surrounding whitespace."""
        wanted = (name or "").strip().casefold()
        if not wanted:
            return None
        for song in self.songs:
            if song.name.strip().casefold() == wanted:
                return song
        return None

    def playlist_by_id(self, playlist_id: Optional[str]) -> Optional[Playlist]:
        if not playlist_id:
            return None
        for playlist in self.playlists:
            if playlist.id == playlist_id:
                return playlist
        return None

    def playlist_songs(self, playlist: Playlist) -> list[Song]:
        """Resolve a playlist's songs in playlist order, skipping unknown IDs."""
        by_id = {song.id: song for song in self.songs}
        return [by_id[song_id] for song_id in playlist.song_ids if song_id in by_id]

    def liked_songs(self) -> list[Song]:
        """Get liked songs in catalog order."""
        return [song for song in self.songs if song.is_liked]

    def claimed_song_ids(self) -> set[str]:
        return {song.id for song in self.songs}

    def claimed_playlist_ids(self) -> set[str]:
        return {playlist.id for playlist in self.playlists}

    # --- Song edits ---

    def update_display_indexes(self) -> None:
        """Renumber display indexes (01, 02, ...) from current song order."""
        for position, song in enumerate(self.songs, start=1):
            song.display_index = format_display_index(position)

    def ensure_unique_name(self, name: str, exclude: Optional[Song] = None) -> None:
        """Raise DuplicateSongError if another song already uses this name."""
        existing = self.song_by_name(name)
        if existing is not None and (exclude is None or existing.id != exclude.id):
            raise DuplicateSongError(name)

    def add_song(
        self, name: str, duration: str = "", volume: float = DEFAULT_VOLUME
    ) -> Song:
        """Add a newly imported song with a fresh ID.

        Raises:
            ValueError: If name is blank
            DuplicateSongError: If another song already has this name
        """
        name = (name or "").strip()
        if not name:
            raise ValueError("Song name cannot be empty")
        self.ensure_unique_name(name)

        song = Song(
            id=generate_id(self.claimed_song_ids()),
            name=name,
            duration=duration or "",
            volume=clamp_volume(volume),
        )
        self.songs.append(song)
        self.update_display_indexes()
        logger.debug(f"Added song '{name}' ({song.id})")
        return song

    def rename_song(self, song: Song, new_name: str) -> bool:
        """Rename a song, keeping names unique (case-insensitive).

        Returns:
            True if renamed, False if the name is unchanged

        Raises:
            ValueError: If new name is blank
            DuplicateSongError: If another song already has the name
        """
        new_name = (new_name or "").strip()
        if not new_name:
            raise ValueError("Song name cannot be empty")
        if new_name == song.name:
            return False

        self.ensure_unique_name(new_name, exclude=song)
        logger.info(f"Renamed song '{song.name}' -> '{new_name}'")
        song.name = new_name
        return True

    def toggle_like(self, song: Song) -> bool:
        """Flip the liked flag and return the new value."""
        song.is_liked = not song.is_liked
        return song.is_liked

    def set_volume(self, song: Song, value: float) -> float:
        """Set per-song volume using the same rule applied on load."""
        song.volume = clamp_volume(value)
        return song.volume

    def sort_songs(
        self,
        mode: str,
        mtime_lookup: Optional[Callable[[Song], Optional[float]]] = None,
    ) -> None:
        """Reorder songs and refresh display indexes.

        Args:
            mode: 'alphabetical' (by name) or 'modified' (newest file first)
            mtime_lookup: Returns a song's file modification time, or None when
                the file is missing. Required for 'modified'.

        Raises:
            ValueError: If mode is unknown or mtime_lookup is missing
        """
        if mode == "alphabetical":
            self.songs.sort(key=lambda song: song.name.casefold())
        elif mode == "modified":
            if mtime_lookup is None:
                raise ValueError("Sorting by modification date needs an mtime lookup")

            # Missing files sink to the bottom
            def newest_first(song: Song) -> float:
                mtime = mtime_lookup(song)
                return float("-inf") if mtime is None else mtime

            self.songs.sort(key=newest_first, reverse=True)
        else:
            raise ValueError(
                f"Invalid sort mode: {mode}. Must be one of {', '.join(SORT_MODES)}"
            )

        self.update_display_indexes()
