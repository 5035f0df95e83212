"""
Managed audio folder handling.

Songs are stored as ``<name><ext>`` files in one folder. This module keeps
the catalog in step with that folder (new files become songs, vanished files
take their songs with them) and handles file-level rename/delete.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from loguru import logger

from music_shelf.domain.playlists.membership import delete_song

from .catalog import Catalog
from .exceptions import DuplicateSongError
from .metadata import get_duration_str
from .models import DEFAULT_VOLUME, Song


@dataclass
class LibrarySyncResult:
    """What a folder sync changed or noticed (song names / file names)."""

    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    durations_filled: list[str] = field(default_factory=list)
    ignored_files: list[str] = field(default_factory=list)
    shadowed_files: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed or self.durations_filled)


def is_supported_format(local_path: Path, supported_formats: list[str]) -> bool:
    """Check if file format is supported."""
    return local_path.suffix.lower() in supported_formats


def _format_rank(local_path: Path, supported_formats: list[str]) -> int:
    return supported_formats.index(local_path.suffix.lower())


def song_key(name: str) -> str:
    """Matching key shared by song names and file stems.

    Song names are stored stripped, so stems match ignoring surrounding
    whitespace as well as case.
    """
    return (name or "").strip().casefold()


def scan_audio_folder(
    audio_dir: Path, supported_formats: list[str]
) -> tuple[dict[str, Path], list[str], list[str]]:
    """Collect the audio file to use for each song name in a folder.

    When a name exists in more than one supported format, the format listed
    first in ``supported_formats`` wins and the others are reported as
    shadowed.

    Files whose stem is blank cannot name a song and are reported as ignored
    along with unsupported formats.

    Returns:
        Tuple of (song key -> file, ignored file names, shadowed file names)
    """
    chosen: dict[str, Path] = {}
    ignored = []
    shadowed = []

    for local_path in sorted(audio_dir.iterdir()):
        if not local_path.is_file():
            continue
        key = song_key(local_path.stem)
        if not key or not is_supported_format(local_path, supported_formats):
            ignored.append(local_path.name)
            continue

        existing = chosen.get(key)
        if existing is None:
            chosen[key] = local_path
        elif _format_rank(local_path, supported_formats) < _format_rank(
            existing, supported_formats
        ):
            shadowed.append(existing.name)
            chosen[key] = local_path
        else:
            shadowed.append(local_path.name)

    return chosen, ignored, shadowed


def find_song_files(
    audio_dir: Path, name: str, supported_formats: list[str]
) -> list[Path]:
    """Every audio file stored for a song name, in format preference order.

    Stems are matched with ``song_key``, so a file named " Intro .mp3" belongs
    to the song "Intro".
    """
    key = song_key(name)
    if not key or not audio_dir.is_dir():
        return []

    matches = [
        local_path
        for local_path in sorted(audio_dir.iterdir())
        if local_path.is_file()
        and is_supported_format(local_path, supported_formats)
        and song_key(local_path.stem) == key
    ]
    return sorted(matches, key=lambda p: _format_rank(p, supported_formats))


def resolve_song_path(
    audio_dir: Path, song: Song, supported_formats: list[str]
) -> Optional[Path]:
    """Get the song's audio file in format preference order, or None if missing."""
    files = find_song_files(audio_dir, song.name, supported_formats)
    return files[0] if files else None


def song_mtime(
    audio_dir: Path, song: Song, supported_formats: list[str]
) -> Optional[float]:
    """Modification time of the song's audio file, or None if missing."""
    path = resolve_song_path(audio_dir, song, supported_formats)
    return path.stat().st_mtime if path is not None else None


def sync_library_folder(
    catalog: Catalog,
    audio_dir: Path,
    supported_formats: list[str],
    progress_callback: Optional[Callable[[str, str], None]] = None,
    default_volume: float = DEFAULT_VOLUME,
) -> LibrarySyncResult:
    """Reconcile the catalog with the audio files in a folder.

    - Unsupported or unnamed files are reported, never deleted
    - Named songs whose file is gone are deleted (playlist membership included)
    - New files become songs with their duration read from the file
    - Songs with no cached duration get it filled in

    Args:
        catalog: Catalog to update in place
        audio_dir: Managed audio folder
        supported_formats: Extensions in preference order (e.g. [".mp3", ".wav"])
        progress_callback: Optional callback(action, song_name)
        default_volume: Volume given to newly imported songs

    Returns:
        LibrarySyncResult describing the changes
    """
    result = LibrarySyncResult()

    if not audio_dir.is_dir():
        logger.warning(f"Audio folder does not exist: {audio_dir}")
        return result

    files, result.ignored_files, result.shadowed_files = scan_audio_folder(
        audio_dir, supported_formats
    )

    for name in result.ignored_files:
        logger.warning(f"Ignoring unsupported or unnamed file in audio folder: {name}")
    for name in result.shadowed_files:
        logger.info(f"Duplicate format ignored in favour of preferred format: {name}")

    for song in list(catalog.songs):
        if song_key(song.name) and song_key(song.name) not in files:
            delete_song(catalog, song)
            result.removed.append(song.name)
            if progress_callback:
                progress_callback("removed", song.name)

    for local_path in files.values():
        existing = catalog.song_by_name(local_path.stem.strip())
        if existing is not None:
            if not existing.duration.strip():
                existing.duration = get_duration_str(str(local_path))
                if existing.duration:
                    result.durations_filled.append(existing.name)
            continue

        song = catalog.add_song(
            local_path.stem,
            duration=get_duration_str(str(local_path)),
            volume=default_volume,
        )
        result.added.append(song.name)
        if progress_callback:
            progress_callback("added", song.name)

    catalog.update_display_indexes()
    logger.info(
        f"Library sync complete: {len(result.added)} added, "
        f"{len(result.removed)} removed, {len(result.durations_filled)} durations filled"
    )
    return result


def rename_song_files(
    audio_dir: Path, old_name: str, new_name: str, supported_formats: list[str]
) -> list[Path]:
    """Rename every audio file of a song to a new name.

    Raises:
        DuplicateSongError: If a different file with the new name already exists

    Returns:
        New paths of the renamed files
    """
    moves = []
    for source in find_song_files(audio_dir, old_name, supported_formats):
        target = audio_dir / f"{new_name}{source.suffix}"
        # Case-only renames point at the same file on case-insensitive filesystems
        if target.exists() and not target.samefile(source):
            raise DuplicateSongError(new_name)
        moves.append((source, target))

    renamed = []
    for source, target in moves:
        source.rename(target)
        renamed.append(target)
        logger.debug(f"Renamed {source.name} -> {target.name}")
    return renamed


def delete_song_files(
    audio_dir: Path, name: str, supported_formats: list[str]
) -> list[Path]:
    """Delete every audio file stored for a song name.

    Returns:
        Paths that were deleted
    """
    deleted = []
    for path in find_song_files(audio_dir, name, supported_formats):
        path.unlink()
        deleted.append(path)
        logger.debug(f"Deleted {path}")
    return deleted
