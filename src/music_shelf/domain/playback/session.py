"""
Playback session: transport controls driven by explicit events.

Engine events can be posted from any thread; they are only applied when
``drain()`` runs on the owning thread, so the session never needs a lock.
"""

import queue
from typing import Callable, Optional, Sequence

from loguru import logger

from music_shelf.domain.library.metadata import format_time
from music_shelf.domain.library.models import Song

from .coordinator import PlaybackCoordinator
from .events import (
    MediaEnded,
    MediaOpened,
    PlaybackEngine,
    PlaybackEvent,
    PositionChanged,
)


class PlaybackSession:
    """Current song, transport state and progress for one player.

    Args:
        coordinator: Resolves current/next/previous within the active list
        engine: Media control used to actually play files
        resolve_path: Maps a song to its audio file, or None if missing
    """

    def __init__(
        self,
        coordinator: PlaybackCoordinator,
        engine: PlaybackEngine,
        resolve_path: Callable[[Song], Optional[str]],
    ) -> None:
        self.coordinator = coordinator
        self.engine = engine
        self._resolve_path = resolve_path
        self._events: "queue.Queue[PlaybackEvent]" = queue.Queue()

        self.current_song: Optional[Song] = None
        # Song whose media the engine currently holds
        self._loaded_song: Optional[Song] = None
        self.is_playing = False
        self.is_seeking = False
        self.position_seconds = 0.0
        self.duration_seconds = 0.0

    # --- Progress ---

    @property
    def current_time_text(self) -> str:
        return format_time(self.position_seconds)

    @property
    def total_time_text(self) -> str:
        return format_time(self.duration_seconds)

    @property
    def progress(self) -> float:
        """Position as a 0-1 ratio of the duration."""
        if self.duration_seconds <= 0:
            return 0.0
        return min(max(self.position_seconds / self.duration_seconds, 0.0), 1.0)

    # --- Transport ---

    def _sync_flags(self) -> None:
        songs = self.coordinator.playback_list
        if songs is not None:
            self.coordinator.sync_current_flags(songs, self.current_song)

    def play_song(
        self, song: Song, playback_list: Optional[Sequence[Song]] = None
    ) -> bool:
        """
        Start playing a song.

        If the song's file is missing, the song still becomes current (so
        next/previous continue from it) but whatever the engine had loaded is
        paused and will not be resumed for it.

        Args:
            song: Song to play
            playback_list: If given, becomes the list next/previous walk

        Returns:
            True if playback started, False if the song's file is missing
        """
        if playback_list is not None:
            self.coordinator.set_playback_list(playback_list)

        self.current_song = song
        self._sync_flags()
        self.engine.volume = song.volume

        path = self._resolve_path(song)
        if path is None:
            logger.warning(f"No audio file for '{song.name}', not playing")
            if self.is_playing:
                self.engine.pause()
            self.is_playing = False
            self.position_seconds = 0.0
            return False

        self.engine.open(path)
        self._loaded_song = song
        self.engine.play()
        self.is_playing = True
        self.position_seconds = 0.0
        logger.debug(f"Playing '{song.name}' from {path}")
        return True

    def toggle_play(self) -> bool:
        """
        Pause if playing, otherwise resume (or start the current song).

        Returns:
            New playing state
        """
        if self.is_playing:
            self.engine.pause()
            self.is_playing = False
        elif self.engine.has_audio and self._loaded_song is self.current_song:
            self.engine.play()
            self.is_playing = True
        elif self.current_song is not None:
            self.play_song(self.current_song)
        return self.is_playing

    def begin_seek(self) -> None:
        """Stop applying position updates while the user drags the slider."""
        self.is_seeking = True

    def seek(self, position_seconds: float) -> None:
        """Jump to an absolute position and resume position updates."""
        self.engine.seek(position_seconds)
        self.position_seconds = position_seconds
        self.is_seeking = False

    def play_next(self) -> Optional[Song]:
        """Play the next song in the active list, wrapping at the end."""
        songs = self.coordinator.playback_list or []
        song = self.coordinator.next(songs, self.current_song)
        if song is not None:
            self.play_song(song)
        return song

    def play_previous(self) -> Optional[Song]:
        """Play the previous song in the active list, wrapping at the start."""
        songs = self.coordinator.playback_list or []
        song = self.coordinator.previous(songs, self.current_song)
        if song is not None:
            self.play_song(song)
        return song

    def apply_volume(self, song: Song) -> None:
        """Push a song's volume to the engine if it is the one playing."""
        if self.current_song is not None and self.current_song.id == song.id:
            self.engine.volume = song.volume

    def forget_song(self, song: Song) -> None:
        """Drop the current song after it was deleted from the catalog."""
        if self.current_song is not None and self.current_song.id == song.id:
            self.current_song = None
            self.is_playing = False
            self._sync_flags()

    # --- Events ---

    def post(self, event: PlaybackEvent) -> None:
        """Queue an engine event. Safe to call from any thread."""
        self._events.put(event)

    def drain(self) -> int:
        """
        Apply all queued events on the calling (owning) thread.

        Returns:
            Number of events handled
        """
        handled = 0
        while True:
            try:
                event = self._events.get_nowait()
            except queue.Empty:
                return handled
            self.dispatch(event)
            handled += 1

    def dispatch(self, event: PlaybackEvent) -> None:
        """Apply a single engine event."""
        match event:
            case MediaOpened(duration_seconds=duration):
                self.duration_seconds = max(duration, 0.0)
            case PositionChanged(position_seconds=position):
                # Slider is being dragged; don't snap it back
                if not self.is_seeking:
                    self.position_seconds = position
            case MediaEnded():
                if self.play_next() is None:
                    self.is_playing = False
            case _:
                logger.warning(f"Ignoring unknown playback event: {event!r}")
