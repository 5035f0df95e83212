"""
Flat-file persistence for the catalog.

Songs and playlists are two independent JSON documents, each an array of
records. Loading returns raw records only; they become a catalog through
``normalize_catalog`` so callers never see pre-normalized data.
"""

import json
import shutil
from pathlib import Path
from typing import Any, Iterable, Protocol

from loguru import logger

from .catalog import Catalog
from .models import Playlist, Song
from .normalizer import NormalizationReport, normalize_catalog


class CatalogStore(Protocol):
    """Storage backend for the song and playlist documents."""

    def load_songs(self) -> list[dict[str, Any]]:
        ...

    def save_songs(self, songs: Iterable[Song]) -> None:
        ...

    def load_playlists(self) -> list[dict[str, Any]]:
        ...

    def save_playlists(self, playlists: Iterable[Playlist]) -> None:
        ...


def _backup_path(path: Path) -> Path:
    return path.with_suffix(path.suffix + ".bak")


def _read_array(path: Path) -> list | None:
    """Read a JSON array document, returning None if missing or unusable."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning(f"Could not read {path}: {e}")
        return None

    if not isinstance(data, list):
        logger.warning(f"Expected a JSON array in {path}, got {type(data).__name__}")
        return None
    return data


def _atomic_write(path: Path, data: Any) -> None:
    """Write data as UTF-8 JSON atomically and keep a .bak copy of the old file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
    # Refresh backup before replacing
    if path.exists():
        shutil.copy2(path, _backup_path(path))
    tmp.replace(path)


class JsonCatalogStore:
    """Catalog store backed by two JSON files.

    A missing file loads as an empty list. A corrupt file falls back to its
    ``.bak`` copy, and to an empty list if that is unusable too.
    """

    def __init__(self, songs_path: Path, playlists_path: Path) -> None:
        self.songs_path = Path(songs_path)
        self.playlists_path = Path(playlists_path)

    def _load(self, path: Path) -> list[dict[str, Any]]:
        if not path.exists():
            return []

        data = _read_array(path)
        if data is None:
            backup = _backup_path(path)
            data = _read_array(backup)
            if data is None:
                logger.warning(f"No usable data in {path} or its backup, starting empty")
                return []
            logger.warning(f"Recovered {path.name} from backup {backup.name}")
        return data

    def load_songs(self) -> list[dict[str, Any]]:
        return self._load(self.songs_path)

    def save_songs(self, songs: Iterable[Song]) -> None:
        records = [song.to_record() for song in songs]
        _atomic_write(self.songs_path, records)
        logger.debug(f"Saved {len(records)} songs to {self.songs_path}")

    def load_playlists(self) -> list[dict[str, Any]]:
        return self._load(self.playlists_path)

    def save_playlists(self, playlists: Iterable[Playlist]) -> None:
        records = [playlist.to_record() for playlist in playlists]
        _atomic_write(self.playlists_path, records)
        logger.debug(f"Saved {len(records)} playlists to {self.playlists_path}")


def load_catalog(store: CatalogStore) -> tuple[Catalog, NormalizationReport]:
    """Load and normalize the catalog from a store."""
    return normalize_catalog(store.load_songs(), store.load_playlists())


def save_catalog(store: CatalogStore, catalog: Catalog) -> None:
    """Refresh display indexes and persist both documents."""
    catalog.update_display_indexes()
    store.save_songs(catalog.songs)
    store.save_playlists(catalog.playlists)
