"""Playback domain - navigation and transport state.

This domain handles:
- Active playback list and current-song matching
- Previous/next navigation with wraparound
- Song row double-click detection
- Engine events consumed by a single-threaded session
"""

# Coordination
from .coordinator import PlaybackCoordinator

# Engine contract and events
from .events import (
    MediaOpened,
    MediaEnded,
    PositionChanged,
    PlaybackEvent,
    PlaybackEngine,
)

# Session
from .session import PlaybackSession

__all__ = [
    # Coordination
    "PlaybackCoordinator",
    # Events
    "MediaOpened",
    "MediaEnded",
    "PositionChanged",
    "PlaybackEvent",
    "PlaybackEngine",
    # Session
    "PlaybackSession",
]
