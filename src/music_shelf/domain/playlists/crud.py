"""
Playlist management for music-shelf
Create, edit and look up playlists in a catalog
"""

from typing import Optional

from loguru import logger

from music_shelf.domain.library.catalog import Catalog
from music_shelf.domain.library.exceptions import EntityNotFoundError
from music_shelf.domain.library.identity import generate_id
from music_shelf.domain.library.models import Playlist


def _clean_title(title: Optional[str]) -> str:
    cleaned = (title or "").strip()
    if not cleaned:
        raise ValueError("Playlist name cannot be empty.")
    return cleaned


def create_playlist(
    catalog: Catalog,
    title: str,
    description: str = "",
    icon_path: Optional[str] = None,
) -> Playlist:
    """
    Create a new, empty playlist and append it to the catalog.

    Args:
        catalog: Catalog to add the playlist to
        title: Playlist name (surrounding whitespace is stripped)
        description: Optional description
        icon_path: Optional path to an icon image (not validated)

    Returns:
        The new playlist

    Raises:
        ValueError: If title is blank
    """
    playlist = Playlist(
        id=generate_id(catalog.claimed_playlist_ids()),
        title=_clean_title(title),
        description=description or "",
        icon_path=icon_path or None,
        song_ids=[],
        legacy_song_names=None,
    )
    catalog.playlists.append(playlist)
    logger.info(f"Created playlist '{playlist.title}' ({playlist.id})")
    return playlist


def update_playlist(
    catalog: Catalog,
    playlist: Playlist,
    title: Optional[str] = None,
    description: Optional[str] = None,
    icon_path: Optional[str] = None,
) -> Playlist:
    """
    Edit playlist metadata. Fields left as None are unchanged.

    Args:
        catalog: Catalog holding the playlist
        playlist: Playlist to edit
        title: New title (must not be blank)
        description: New description
        icon_path: New icon path

    Returns:
        The catalog's playlist instance after the edit

    Raises:
        ValueError: If title is given but blank
        EntityNotFoundError: If the playlist is not in the catalog
    """
    target = catalog.playlist_by_id(playlist.id)
    if target is None:
        raise EntityNotFoundError("playlist", playlist.id)

    if title is not None:
        target.title = _clean_title(title)
    if description is not None:
        target.description = description
    if icon_path is not None:
        target.icon_path = icon_path or None

    logger.debug(f"Updated playlist {target.id}")
    return target


def get_playlist_by_title(catalog: Catalog, title: str) -> Optional[Playlist]:
    """
    Find a playlist by title, ignoring case.

    Returns:
        First matching playlist or None
    """
    wanted = (title or "").strip().casefold()
    if not wanted:
        return None
    for playlist in catalog.playlists:
        if playlist.title.casefold() == wanted:
            return playlist
    return None


def playlist_song_count(playlist: Playlist) -> int:
    """Number of songs in a playlist, falling back to unmigrated legacy names."""
    if playlist.song_ids:
        return len(playlist.song_ids)
    return len(playlist.legacy_song_names or [])
