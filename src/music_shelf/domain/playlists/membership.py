"""
Song <-> playlist membership reconciliation.

Playlist ``song_ids`` are the source of truth. Every song's ``playlist_ids``
is a derived cache that is rebuilt from the playlists, never merge-patched.
Mutations below update both sides in the same call so the catalog never
sits half-updated.
"""

from enum import Enum
from typing import Iterable

from loguru import logger

from music_shelf.domain.library.catalog import Catalog
from music_shelf.domain.library.exceptions import EntityNotFoundError
from music_shelf.domain.library.identity import MAX_VOLUME, MIN_VOLUME, is_valid_id
from music_shelf.domain.library.models import Playlist, Song


class MembershipResult(Enum):
    """Outcome of adding a song to a playlist."""

    ADDED = "added"
    ALREADY_MEMBER = "already_member"


def reconcile_membership(songs: Iterable[Song], playlists: Iterable[Playlist]) -> None:
    """Rebuild every song's ``playlist_ids`` from the playlists' ``song_ids``.

    Song-side lists are discarded and recomputed in playlist order, so stale
    or hand-edited values can never survive a reconciliation pass.
    """
    songs = list(songs)
    by_id = {song.id: song for song in songs}
    rebuilt: dict[str, list[str]] = {song.id: [] for song in songs}

    for playlist in playlists:
        for song_id in playlist.song_ids:
            if song_id in by_id and playlist.id not in rebuilt[song_id]:
                rebuilt[song_id].append(playlist.id)

    for song in songs:
        song.playlist_ids = rebuilt[song.id]


def _resolve_song(catalog: Catalog, song: Song) -> Song:
    # Callers may hold a reconstructed copy; the catalog instance is authoritative
    resolved = catalog.song_by_id(song.id)
    if resolved is None:
        raise EntityNotFoundError("song", song.id)
    return resolved


def _resolve_playlist(catalog: Catalog, playlist: Playlist) -> Playlist:
    resolved = catalog.playlist_by_id(playlist.id)
    if resolved is None:
        raise EntityNotFoundError("playlist", playlist.id)
    return resolved


def add_song_to_playlist(
    catalog: Catalog, song: Song, playlist: Playlist
) -> MembershipResult:
    """Add a song to a playlist, updating both sides.

    Any leftover ``legacy_song_names`` on the playlist is cleared since the
    playlist now carries ID-based membership.

    Returns:
        MembershipResult.ADDED, or MembershipResult.ALREADY_MEMBER if the song
        was already listed (nothing is changed in that case)

    Raises:
        EntityNotFoundError: If the song or playlist is not in the catalog
    """
    song = _resolve_song(catalog, song)
    playlist = _resolve_playlist(catalog, playlist)

    if song.id in playlist.song_ids:
        return MembershipResult.ALREADY_MEMBER

    playlist.song_ids.append(song.id)
    if playlist.id not in song.playlist_ids:
        song.playlist_ids.append(playlist.id)
    playlist.legacy_song_names = None

    logger.debug(f"Added song {song.id} to playlist {playlist.id}")
    return MembershipResult.ADDED


def remove_song_from_playlist(catalog: Catalog, song: Song, playlist: Playlist) -> bool:
    """Remove a song from a playlist without deleting it from the library.

    Returns:
        True if the song was removed, False if it was not a member

    Raises:
        EntityNotFoundError: If the song or playlist is not in the catalog
    """
    song = _resolve_song(catalog, song)
    playlist = _resolve_playlist(catalog, playlist)

    if song.id not in playlist.song_ids:
        return False

    playlist.song_ids = [song_id for song_id in playlist.song_ids if song_id != song.id]
    song.playlist_ids = [pid for pid in song.playlist_ids if pid != playlist.id]

    logger.debug(f"Removed song {song.id} from playlist {playlist.id}")
    return True


def delete_song(catalog: Catalog, song: Song) -> bool:
    """Delete a song from the catalog and from every playlist listing it.

    Returns:
        True if the song was deleted, False if it was not in the catalog
    """
    target = catalog.song_by_id(song.id)
    if target is None:
        return False

    for playlist in catalog.playlists:
        if target.id in playlist.song_ids:
            playlist.song_ids = [sid for sid in playlist.song_ids if sid != target.id]

    target.playlist_ids = []
    catalog.songs = [s for s in catalog.songs if s is not target]
    catalog.update_display_indexes()

    logger.info(f"Deleted song '{target.name}' ({target.id})")
    return True


def delete_playlist(catalog: Catalog, playlist: Playlist) -> bool:
    """Delete a playlist and strip its ID from every song.

    Returns:
        True if the playlist was deleted, False if it was not in the catalog
    """
    target = catalog.playlist_by_id(playlist.id)
    if target is None:
        return False

    for song in catalog.songs:
        if target.id in song.playlist_ids:
            song.playlist_ids = [pid for pid in song.playlist_ids if pid != target.id]

    catalog.playlists = [p for p in catalog.playlists if p is not target]

    logger.info(f"Deleted playlist '{target.title}' ({target.id})")
    return True


def find_membership_violations(catalog: Catalog) -> list[str]:
    """Describe every catalog invariant that does not hold.

    Checks ID validity and uniqueness, dangling playlist references,
    duplicate entries, the bidirectional membership rule and volume range.

    Returns:
        List of human-readable violations (empty when consistent)
    """
    violations = []

    song_ids = [song.id for song in catalog.songs]
    playlist_ids = [playlist.id for playlist in catalog.playlists]

    for kind, ids in (("song", song_ids), ("playlist", playlist_ids)):
        seen = set()
        for entity_id in ids:
            if not is_valid_id(entity_id):
                violations.append(f"{kind} has invalid id {entity_id!r}")
            elif entity_id in seen:
                violations.append(f"duplicate {kind} id {entity_id}")
            seen.add(entity_id)

    known_songs = set(song_ids)
    known_playlists = set(playlist_ids)

    for playlist in catalog.playlists:
        if len(set(playlist.song_ids)) != len(playlist.song_ids):
            violations.append(f"playlist {playlist.id} lists a song more than once")
        for song_id in playlist.song_ids:
            if song_id not in known_songs:
                violations.append(f"playlist {playlist.id} references missing song {song_id}")

    for song in catalog.songs:
        if len(set(song.playlist_ids)) != len(song.playlist_ids):
            violations.append(f"song {song.id} lists a playlist more than once")
        if not MIN_VOLUME <= song.volume <= MAX_VOLUME:
            violations.append(f"song {song.id} volume {song.volume} out of range")
        for playlist_id in song.playlist_ids:
            if playlist_id not in known_playlists:
                violations.append(f"song {song.id} references missing playlist {playlist_id}")

    for song in catalog.songs:
        for playlist in catalog.playlists:
            in_playlist = song.id in playlist.song_ids
            in_song = playlist.id in song.playlist_ids
            if in_playlist != in_song:
                violations.append(
                    f"asymmetric membership: song {song.id} / playlist {playlist.id}"
                )

    return violations
