"""
Playback coordination for music-shelf

Tracks which song list the transport controls walk, resolves the current
song within a list, computes previous/next with wraparound and detects
double activations of a song row.

All methods are expected to run on the single UI/event thread; nothing here
blocks or schedules timers.
"""

from typing import Optional, Sequence

from music_shelf.domain.library.models import Song

DEFAULT_DOUBLE_CLICK_MS = 300


class PlaybackCoordinator:
    """Holds the active playback list and row double-click tracking state.

    The active playback list can differ from whatever list is being shown,
    so playback keeps going when the user switches views.
    """

    def __init__(
        self, double_click_threshold_ms: int = DEFAULT_DOUBLE_CLICK_MS
    ) -> None:
        self.double_click_threshold_ms = double_click_threshold_ms
        self._playback_list: Optional[Sequence[Song]] = None
        self._last_clicked_song: Optional[Song] = None
        self._last_click_ms: int = 0

    @property
    def playback_list(self) -> Optional[Sequence[Song]]:
        return self._playback_list

    def set_playback_list(self, playback_list: Optional[Sequence[Song]]) -> None:
        """Set the list that next/previous navigate (None to clear)."""
        self._playback_list = playback_list

    @staticmethod
    def is_current_song(current: Optional[Song], candidate: Optional[Song]) -> bool:
        """Check whether candidate is the current song.

        Matches the same instance, or falls back to equal names for songs that
        were reloaded and lost reference identity. The name fallback is kept
        for compatibility; two different songs sharing a name will match.
        """
        if current is None or candidate is None:
            return False
        return current is candidate or current.name == candidate.name

    def index_of(self, songs: Sequence[Song], song: Optional[Song]) -> int:
        """
        Get the position of a song in a list using the current-song rule.

        Returns:
            0-based index, or -1 if song is None or not in the list
        """
        if song is None:
            return -1
        for i, candidate in enumerate(songs):
            if self.is_current_song(song, candidate):
                return i
        return -1

    def previous(self, songs: Sequence[Song], current: Optional[Song]) -> Optional[Song]:
        """
        Get the song before current, wrapping from the first to the last.

        An unknown current song anchors at the start of the list.

        Returns:
            Previous song, or None if the list is empty
        """
        if not songs:
            return None
        index = max(self.index_of(songs, current), 0)
        return songs[(index - 1 + len(songs)) % len(songs)]

    def next(self, songs: Sequence[Song], current: Optional[Song]) -> Optional[Song]:
        """
        Get the song after current, wrapping from the last to the first.

        An unknown current song anchors at the start of the list.

        Returns:
            Next song, or None if the list is empty
        """
        if not songs:
            return None
        index = max(self.index_of(songs, current), 0)
        return songs[(index + 1) % len(songs)]

    def is_double_click(
        self, song: Song, now_ms: int, threshold_ms: Optional[int] = None
    ) -> bool:
        """
        Check whether this click completes a double click on the same song.

        Every call re-arms tracking with this click, whatever the result, so a
        third click only counts against the second.

        Args:
            song: Song whose row was clicked
            now_ms: Click timestamp in milliseconds
            threshold_ms: Maximum gap between the two clicks (default: the
                coordinator's configured threshold)

        Returns:
            True if the previous click was on the same song within threshold
        """
        if threshold_ms is None:
            threshold_ms = self.double_click_threshold_ms
        same_song = self.is_current_song(self._last_clicked_song, song)
        within_threshold = now_ms - self._last_click_ms <= threshold_ms

        self._last_clicked_song = song
        self._last_click_ms = now_ms

        return same_song and within_threshold

    def reset_tracking(self) -> None:
        """Forget the last click, e.g. when focus moves off the song rows."""
        self._last_clicked_song = None
        self._last_click_ms = 0

    def sync_current_flags(self, songs: Sequence[Song], current: Optional[Song]) -> int:
        """
        Set each song's ``is_current`` flag, writing only when it changes.

        Returns:
            Number of songs whose flag changed
        """
        changed = 0
        for song in songs:
            is_current = self.is_current_song(current, song)
            if song.is_current != is_current:
                song.is_current = is_current
                changed += 1
        return changed
