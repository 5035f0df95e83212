"""
Load-time normalization of persisted songs and playlists.

Raw records come from flat files that may be old, hand-edited or partially
corrupt. This pass repairs them into a catalog that satisfies every identity
and membership rule:

1. Song pass - IDs assigned/regenerated, volume clamped, lookups built
2. Playlist pass - IDs assigned/regenerated, song IDs deduped
3. Legacy migration - name-based membership converted to IDs (one way)
4. Reference pruning - song IDs that no longer exist are dropped
5. Cross-reconciliation - song-side playlist lists rebuilt from playlists

It is a best-effort repair, not a validator: nothing here raises for bad
input, each bad field falls back to a safe default.
"""

import re
from dataclasses import dataclass, fields
from typing import Any, Iterable, Optional

from loguru import logger

from music_shelf.domain.playlists.membership import reconcile_membership

from .catalog import Catalog
from .identity import clamp_volume, dedupe_ids, generate_id, is_valid_id
from .models import Playlist, Song


@dataclass
class NormalizationReport:
    """Counts of repairs made while normalizing a load."""

    skipped_records: int = 0
    ids_assigned: int = 0
    ids_regenerated: int = 0
    volumes_repaired: int = 0
    dangling_refs_pruned: int = 0
    legacy_names_migrated: int = 0
    legacy_names_dropped: int = 0
    legacy_playlists_migrated: int = 0

    def has_repairs(self) -> bool:
        return any(getattr(self, f.name) for f in fields(self))

    def summary(self) -> str:
        parts = [
            f"{f.name.replace('_', ' ')}={getattr(self, f.name)}"
            for f in fields(self)
            if getattr(self, f.name)
        ]
        return ", ".join(parts) if parts else "no repairs"


def _snake_case(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def _get(record: dict, name: str, default: Any = None) -> Any:
    """Read a field by its camelCase name, also accepting PascalCase and snake_case."""
    for key in (name, name[:1].upper() + name[1:], _snake_case(name)):
        if key in record:
            return record[key]
    return default


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _flag(value: Any) -> bool:
    return value if isinstance(value, bool) else False


def _as_number(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _claim_id(
    raw_id: Any, claimed: set[str], kind: str, report: NormalizationReport
) -> str:
    """Keep a loaded ID when usable, otherwise generate one that is unclaimed."""
    if not is_valid_id(raw_id):
        new_id = generate_id(claimed)
        report.ids_assigned += 1
        logger.debug(f"Assigned id {new_id} to {kind} without an id")
    elif raw_id in claimed:
        new_id = generate_id(claimed)
        report.ids_regenerated += 1
        logger.debug(f"Regenerated duplicate {kind} id {raw_id} -> {new_id}")
    else:
        new_id = raw_id
    claimed.add(new_id)
    return new_id


def normalize_songs(
    raw_songs: Iterable[Any], report: NormalizationReport
) -> list[Song]:
    """Song pass: identities, volume and provisional playlist IDs."""
    songs = []
    claimed: set[str] = set()

    for raw in raw_songs:
        if not isinstance(raw, dict):
            report.skipped_records += 1
            logger.debug(f"Skipped malformed song record: {raw!r}")
            continue

        raw_volume = _get(raw, "volume")
        volume = clamp_volume(raw_volume)
        if (
            raw_volume is None
            or isinstance(raw_volume, bool)
            or volume != _as_number(raw_volume)
        ):
            report.volumes_repaired += 1

        songs.append(
            Song(
                id=_claim_id(_get(raw, "id"), claimed, "song", report),
                name=_text(_get(raw, "name")),
                display_index=_text(_get(raw, "index")),
                # Provisional - rebuilt by cross-reconciliation
                playlist_ids=dedupe_ids(_get(raw, "playlistIds")),
                is_liked=_flag(_get(raw, "isLiked")),
                volume=volume,
                duration=_text(_get(raw, "duration")),
            )
        )

    return songs


def _legacy_names(raw: dict) -> Optional[list[str]]:
    names = _get(raw, "legacySongNames")
    if names is None:
        names = _get(raw, "songNames")
    if not isinstance(names, list):
        return None
    return [name for name in names if isinstance(name, str) and name.strip()]


def normalize_playlists(
    raw_playlists: Iterable[Any], report: NormalizationReport
) -> list[Playlist]:
    """Playlist pass: identities and deduped song IDs."""
    playlists = []
    claimed: set[str] = set()

    for raw in raw_playlists:
        if not isinstance(raw, dict):
            report.skipped_records += 1
            logger.debug(f"Skipped malformed playlist record: {raw!r}")
            continue

        icon_path = _get(raw, "iconPath")
        playlists.append(
            Playlist(
                id=_claim_id(_get(raw, "id"), claimed, "playlist", report),
                title=_text(_get(raw, "title")),
                description=_text(_get(raw, "description")),
                icon_path=icon_path if is_valid_id(icon_path) else None,
                is_private=_flag(_get(raw, "isPrivate")),
                song_ids=dedupe_ids(_get(raw, "songIds")),
                legacy_song_names=_legacy_names(raw),
            )
        )

    return playlists


def build_name_lookup(songs: Iterable[Song]) -> dict[str, Song]:
    """Case-insensitive name -> song lookup; the first song with a name wins."""
    lookup: dict[str, Song] = {}
    for song in songs:
        if song.name:
            lookup.setdefault(song.name.casefold(), song)
    return lookup


def migrate_legacy_membership(
    playlists: Iterable[Playlist],
    songs_by_name: dict[str, Song],
    report: NormalizationReport,
) -> None:
    """Convert name-based membership into ID-based membership.

    Only playlists with no song IDs are migrated. Names that match no song
    belong to songs deleted since the old save and are dropped. Legacy names
    are cleared afterwards on every playlist so migration never runs twice.
    """
    for playlist in playlists:
        if playlist.legacy_song_names is None:
            continue

        if not playlist.song_ids:
            for name in playlist.legacy_song_names:
                song = songs_by_name.get(name.casefold())
                if song is None:
                    report.legacy_names_dropped += 1
                    continue
                if song.id not in playlist.song_ids:
                    playlist.song_ids.append(song.id)
                    report.legacy_names_migrated += 1
            report.legacy_playlists_migrated += 1
            logger.debug(
                f"Migrated legacy membership for playlist {playlist.id}: "
                f"{len(playlist.song_ids)} songs"
            )

        playlist.legacy_song_names = None


def prune_dangling_references(
    playlists: Iterable[Playlist],
    songs_by_id: dict[str, Song],
    report: NormalizationReport,
) -> None:
    """Drop song IDs that do not refer to a song in the catalog."""
    for playlist in playlists:
        kept = [song_id for song_id in playlist.song_ids if song_id in songs_by_id]
        pruned = len(playlist.song_ids) - len(kept)
        if pruned:
            report.dangling_refs_pruned += pruned
            logger.debug(f"Pruned {pruned} dangling song ids from playlist {playlist.id}")
        playlist.song_ids = kept


def normalize_catalog(
    raw_songs: Optional[Iterable[Any]],
    raw_playlists: Optional[Iterable[Any]],
) -> tuple[Catalog, NormalizationReport]:
    """Build a consistent catalog from raw persisted records.

    Args:
        raw_songs: Song records as loaded from storage
        raw_playlists: Playlist records as loaded from storage

    Returns:
        Tuple of (catalog, report of repairs made)
    """
    report = NormalizationReport()

    songs = normalize_songs(raw_songs or [], report)
    songs_by_id = {song.id: song for song in songs}
    songs_by_name = build_name_lookup(songs)

    playlists = normalize_playlists(raw_playlists or [], report)
    migrate_legacy_membership(playlists, songs_by_name, report)
    prune_dangling_references(playlists, songs_by_id, report)
    reconcile_membership(songs, playlists)

    catalog = Catalog(songs=songs, playlists=playlists)
    catalog.update_display_indexes()

    if report.has_repairs():
        logger.info(f"Normalized catalog with repairs: {report.summary()}")
    logger.debug(f"Catalog loaded: {len(songs)} songs, {len(playlists)} playlists")

    return catalog, report
