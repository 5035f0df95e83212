"""
Playback engine contract and the events it reports.

The media engine is a black box (decoding and output happen elsewhere). It
reports progress as discrete event objects which are queued and consumed
on the single UI/event thread by ``PlaybackSession``.
"""

from dataclasses import dataclass
from typing import Protocol, Union


@dataclass(frozen=True)
class MediaOpened:
    """Media finished loading and its duration is known."""

    duration_seconds: float


@dataclass(frozen=True)
class MediaEnded:
    """Playback reached the end of the loaded media."""


@dataclass(frozen=True)
class PositionChanged:
    """Periodic position update while playing."""

    position_seconds: float


PlaybackEvent = Union[MediaOpened, MediaEnded, PositionChanged]


class PlaybackEngine(Protocol):
    """Interface of the platform media control.

    Implementations post ``MediaOpened``, ``MediaEnded`` and
    ``PositionChanged`` to the session instead of calling back into it.
    """

    volume: float  # 0-100

    @property
    def has_audio(self) -> bool:
        """Whether a media file is currently loaded."""
        ...

    @property
    def position(self) -> float:
        """Current position in seconds."""
        ...

    @property
    def duration(self) -> float:
        """Duration of loaded media in seconds (0 when unknown)."""
        ...

    def open(self, path: str) -> None:
        ...

    def play(self) -> None:
        ...

    def pause(self) -> None:
        ...

    def seek(self, position: float) -> None:
        ...
