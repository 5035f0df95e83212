"""Application context for explicit state passing.

AppContext bundles the configuration, the catalog store and the loaded
catalog so command handlers receive everything they need as one argument
instead of reaching for module-level state.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from loguru import logger
from rich.console import Console

from music_shelf.core.config import (
    Config,
    get_audio_dir,
    get_playlists_path,
    get_songs_path,
)
from music_shelf.domain.library.catalog import Catalog
from music_shelf.domain.library.exceptions import EntityNotFoundError
from music_shelf.domain.library.models import Playlist, Song
from music_shelf.domain.library.normalizer import NormalizationReport
from music_shelf.domain.library.scanner import resolve_song_path
from music_shelf.domain.library.store import (
    CatalogStore,
    JsonCatalogStore,
    load_catalog,
    save_catalog,
)
from music_shelf.domain.playback.coordinator import PlaybackCoordinator
from music_shelf.domain.playlists.crud import get_playlist_by_title


@dataclass
class AppContext:
    """Application state shared by command handlers.

    Attributes:
        config: Application configuration
        store: Backend the catalog is loaded from and saved to
        catalog: Normalized songs and playlists
        report: Repairs made while normalizing the last load
        coordinator: Playback list and double-click tracking
        console: Rich Console for formatted output
    """

    config: Config
    store: CatalogStore
    catalog: Catalog
    report: NormalizationReport = field(default_factory=NormalizationReport)
    coordinator: PlaybackCoordinator = field(default_factory=PlaybackCoordinator)
    console: Optional[Console] = None

    @classmethod
    def create(
        cls,
        config: Config,
        store: Optional[CatalogStore] = None,
        console: Optional[Console] = None,
    ) -> "AppContext":
        """Load the catalog and build the initial context.

        Args:
            config: Application configuration
            store: Catalog store (default: JSON files from the data dir)
            console: Optional Rich Console instance
        """
        if store is None:
            store = JsonCatalogStore(get_songs_path(config), get_playlists_path(config))

        catalog, report = load_catalog(store)
        if report.has_repairs():
            logger.info(f"Catalog repaired on load: {report.summary()}")

        return cls(
            config=config,
            store=store,
            catalog=catalog,
            report=report,
            coordinator=PlaybackCoordinator(
                double_click_threshold_ms=config.playback.double_click_threshold_ms
            ),
            console=console,
        )

    @property
    def audio_dir(self) -> Path:
        return get_audio_dir(self.config)

    @property
    def supported_formats(self) -> list[str]:
        return self.config.library.supported_formats

    def song_path(self, song: Song) -> Optional[Path]:
        """Audio file for a song, or None if it is missing."""
        return resolve_song_path(self.audio_dir, song, self.supported_formats)

    def resolve_song(self, reference: str) -> Song:
        """Find a song by ID, then by name (case-insensitive).

        Raises:
            EntityNotFoundError: If nothing matches
        """
        reference = (reference or "").strip()
        song = self.catalog.song_by_id(reference) or self.catalog.song_by_name(reference)
        if song is None:
            raise EntityNotFoundError("song", reference)
        return song

    def resolve_playlist(self, reference: str) -> Playlist:
        """Find a playlist by ID, then by title (case-insensitive).

        Raises:
            EntityNotFoundError: If nothing matches
        """
        reference = (reference or "").strip()
        playlist = self.catalog.playlist_by_id(reference) or get_playlist_by_title(
            self.catalog, reference
        )
        if playlist is None:
            raise EntityNotFoundError("playlist", reference)
        return playlist

    def save(self) -> None:
        """Persist the catalog. OSError propagates to the caller."""
        save_catalog(self.store, self.catalog)
