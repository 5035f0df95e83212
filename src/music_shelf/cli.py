"""
Command-line interface for music-shelf.

Every command loads the catalog (normalizing it on the way in), applies one
operation and saves the catalog again when something changed.
"""

import argparse
import sys
from pathlib import Path
from typing import Callable, Optional, Sequence

from loguru import logger

from music_shelf.context import AppContext
from music_shelf.core.config import (
    Config,
    ensure_directories,
    get_config_path,
    get_data_dir,
    load_config,
    save_config,
)
from music_shelf.core.console import get_console, print_error, print_table, safe_print
from music_shelf.core.output import LOG_FILE_NAME, log, setup_loguru
from music_shelf.domain.library.catalog import SORT_MODES
from music_shelf.domain.library.exceptions import MusicShelfError
from music_shelf.domain.library.models import Song
from music_shelf.domain.library.scanner import (
    delete_song_files,
    rename_song_files,
    song_mtime,
    sync_library_folder,
)
from music_shelf.domain.playlists.crud import create_playlist, playlist_song_count
from music_shelf.domain.playlists.membership import (
    MembershipResult,
    add_song_to_playlist,
    delete_playlist,
    delete_song,
    find_membership_violations,
    remove_song_from_playlist,
)

# Handlers return True when the catalog changed and must be saved
Handler = Callable[[AppContext, argparse.Namespace], bool]


def _format_volume(volume: float) -> str:
    return f"{volume:g}"


def _print_songs(
    songs: Sequence[Song], title: str, show_ids: bool = False, numbered: bool = False
) -> None:
    columns = ["#", "Title", "Liked", "Vol", "Time", "Playlists"]
    if show_ids:
        columns.append("ID")

    rows = []
    for position, song in enumerate(songs, start=1):
        row = [
            f"{position:02d}" if numbered else song.display_index,
            song.name,
            "♥" if song.is_liked else "",
            _format_volume(song.volume),
            song.duration or "--:--",
            str(len(song.playlist_ids)),
        ]
        if show_ids:
            row.append(song.id)
        rows.append(row)

    if not rows:
        safe_print(f"{title}: no songs", style="dim")
        return
    print_table(columns, rows, title=title, justify={"Vol": "right", "Time": "right"})


# --- Read-only commands ---


def cmd_songs(ctx: AppContext, args: argparse.Namespace) -> bool:
    _print_songs(ctx.catalog.songs, "Songs", show_ids=args.ids)
    return False


def cmd_liked(ctx: AppContext, args: argparse.Namespace) -> bool:
    _print_songs(ctx.catalog.liked_songs(), "Liked Songs", show_ids=args.ids)
    return False


def cmd_playlists(ctx: AppContext, args: argparse.Namespace) -> bool:
    if not ctx.catalog.playlists:
        safe_print(
            "No playlists yet. Create one with: music-shelf create-playlist <title>",
            style="dim",
        )
        return False

    rows = []
    for playlist in ctx.catalog.playlists:
        row = [playlist.title, str(playlist_song_count(playlist)), playlist.description]
        if args.ids:
            row.append(playlist.id)
        rows.append(row)

    columns = ["Title", "Songs", "Description"]
    if args.ids:
        columns.append("ID")
    print_table(columns, rows, title="Playlists", justify={"Songs": "right"})
    return False


def cmd_show(ctx: AppContext, args: argparse.Namespace) -> bool:
    playlist = ctx.resolve_playlist(args.playlist)
    if playlist.description:
        safe_print(playlist.description, style="italic")
    _print_songs(
        ctx.catalog.playlist_songs(playlist),
        playlist.title,
        show_ids=args.ids,
        numbered=True,
    )
    return False


def cmd_check(ctx: AppContext, args: argparse.Namespace) -> bool:
    if ctx.report.has_repairs():
        safe_print(f"Stored data needed repairs: {ctx.report.summary()}", style="yellow")
    else:
        safe_print("Stored data is consistent.", style="green")

    violations = find_membership_violations(ctx.catalog)
    for violation in violations:
        print_error(violation)
    if violations:
        # Normalization should never leave violations behind
        raise MusicShelfError(f"{len(violations)} catalog invariant violation(s)")

    if args.fix and ctx.report.has_repairs():
        log("Saving repaired catalog", level="info")
        return True
    return False


# --- Song commands ---


def cmd_like(ctx: AppContext, args: argparse.Namespace) -> bool:
    song = ctx.resolve_song(args.song)
    liked = ctx.catalog.toggle_like(song)
    safe_print(f"{'Liked' if liked else 'Unliked'}: {song.name}", style="green")
    return True


def cmd_volume(ctx: AppContext, args: argparse.Namespace) -> bool:
    song = ctx.resolve_song(args.song)
    volume = ctx.catalog.set_volume(song, args.value)
    safe_print(f"Volume for {song.name}: {_format_volume(volume)}", style="green")
    return True


def cmd_rename(ctx: AppContext, args: argparse.Namespace) -> bool:
    song = ctx.resolve_song(args.song)
    new_name = (args.new_name or "").strip()
    if not new_name:
        raise ValueError("Song name cannot be empty")
    if new_name == song.name:
        safe_print("Name unchanged.", style="dim")
        return False

    # Validate against the catalog before touching any files
    ctx.catalog.ensure_unique_name(new_name, exclude=song)
    old_name = song.name
    rename_song_files(ctx.audio_dir, old_name, new_name, ctx.supported_formats)
    ctx.catalog.rename_song(song, new_name)
    safe_print(f"Renamed: {old_name} → {new_name}", style="green")
    return True


def cmd_delete_song(ctx: AppContext, args: argparse.Namespace) -> bool:
    song = ctx.resolve_song(args.song)
    delete_song(ctx.catalog, song)
    if not args.keep_files:
        delete_song_files(ctx.audio_dir, song.name, ctx.supported_formats)
    safe_print(f"Deleted song: {song.name}", style="green")
    return True


def cmd_sort(ctx: AppContext, args: argparse.Namespace) -> bool:
    ctx.catalog.sort_songs(
        args.mode,
        mtime_lookup=lambda song: song_mtime(ctx.audio_dir, song, ctx.supported_formats),
    )
    safe_print(f"Sorted {len(ctx.catalog.songs)} songs ({args.mode})", style="green")
    return True


def cmd_scan(ctx: AppContext, args: argparse.Namespace) -> bool:
    def progress(action: str, name: str) -> None:
        marker = "+" if action == "added" else "-"
        safe_print(f"  {marker} {name}", style="green" if action == "added" else "red")

    safe_print(f"Scanning {ctx.audio_dir}...", style="cyan")
    result = sync_library_folder(
        ctx.catalog,
        ctx.audio_dir,
        ctx.supported_formats,
        progress_callback=progress,
        default_volume=ctx.config.playback.default_volume,
    )

    for name in result.ignored_files:
        safe_print(f"  ignored (unsupported format or blank name): {name}", style="yellow")
    for name in result.shadowed_files:
        safe_print(f"  ignored (duplicate format): {name}", style="yellow")

    safe_print(
        f"✓ {len(result.added)} added, {len(result.removed)} removed, "
        f"{len(result.durations_filled)} durations filled",
        style="green",
    )
    return result.changed


# --- Playlist commands ---


def cmd_create_playlist(ctx: AppContext, args: argparse.Namespace) -> bool:
    playlist = create_playlist(ctx.catalog, args.title, description=args.description)
    safe_print(f"Created playlist: {playlist.title}", style="green")
    return True


def cmd_add(ctx: AppContext, args: argparse.Namespace) -> bool:
    song = ctx.resolve_song(args.song)
    playlist = ctx.resolve_playlist(args.playlist)
    result = add_song_to_playlist(ctx.catalog, song, playlist)
    if result is MembershipResult.ALREADY_MEMBER:
        safe_print(f"{song.name} is already in {playlist.title}", style="yellow")
        return False
    safe_print(f"Added {song.name} to {playlist.title}", style="green")
    return True


def cmd_remove(ctx: AppContext, args: argparse.Namespace) -> bool:
    song = ctx.resolve_song(args.song)
    playlist = ctx.resolve_playlist(args.playlist)
    if not remove_song_from_playlist(ctx.catalog, song, playlist):
        safe_print(f"{song.name} is not in {playlist.title}", style="yellow")
        return False
    safe_print(f"Removed {song.name} from {playlist.title}", style="green")
    return True


def cmd_delete_playlist(ctx: AppContext, args: argparse.Namespace) -> bool:
    playlist = ctx.resolve_playlist(args.playlist)
    delete_playlist(ctx.catalog, playlist)
    safe_print(f"Deleted playlist: {playlist.title}", style="green")
    return True


COMMANDS: dict[str, Handler] = {
    "songs": cmd_songs,
    "liked": cmd_liked,
    "playlists": cmd_playlists,
    "show": cmd_show,
    "check": cmd_check,
    "like": cmd_like,
    "volume": cmd_volume,
    "rename": cmd_rename,
    "delete-song": cmd_delete_song,
    "sort": cmd_sort,
    "scan": cmd_scan,
    "create-playlist": cmd_create_playlist,
    "add": cmd_add,
    "remove": cmd_remove,
    "delete-playlist": cmd_delete_playlist,
}


def run_command(ctx: AppContext, args: argparse.Namespace) -> int:
    """
    Run one catalog command and save if it changed anything.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    handler = COMMANDS[args.command]
    try:
        changed = handler(ctx, args)
        if changed:
            ctx.save()
        return 0

    except (MusicShelfError, ValueError) as e:
        logger.warning(f"{args.command} failed: {e}")
        print_error(str(e))
        return 1
    except OSError as e:
        logger.exception(f"{args.command} failed with a file error")
        print_error(str(e))
        return 1


def init_config(config: Config, path: Optional[Path], force: bool) -> int:
    """Write the given configuration as TOML, refusing to overwrite unless forced."""
    config_path = path or get_config_path()
    if config_path.exists() and not force:
        print_error(f"{config_path} already exists (use --force to overwrite)")
        return 1
    if not save_config(config, config_path):
        return 1
    safe_print(f"Wrote configuration to {config_path}", style="green")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="music-shelf",
        description="music-shelf - local song library and playlist manager",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", type=Path, help="Path to config.toml")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Listing
    for name, help_text in (
        ("songs", "List all songs"),
        ("liked", "List liked songs"),
        ("playlists", "List playlists"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--ids", action="store_true", help="Show IDs")

    show_parser = subparsers.add_parser("show", help="List the songs in a playlist")
    show_parser.add_argument("playlist", help="Playlist ID or title")
    show_parser.add_argument("--ids", action="store_true", help="Show song IDs")

    # Playlists
    create_parser = subparsers.add_parser("create-playlist", help="Create a playlist")
    create_parser.add_argument("title", help="Playlist title")
    create_parser.add_argument("--description", default="", help="Playlist description")

    add_parser = subparsers.add_parser("add", help="Add a song to a playlist")
    add_parser.add_argument("song", help="Song ID or name")
    add_parser.add_argument("playlist", help="Playlist ID or title")

    remove_parser = subparsers.add_parser("remove", help="Remove a song from a playlist")
    remove_parser.add_argument("song", help="Song ID or name")
    remove_parser.add_argument("playlist", help="Playlist ID or title")

    delete_playlist_parser = subparsers.add_parser(
        "delete-playlist", help="Delete a playlist (songs are kept)"
    )
    delete_playlist_parser.add_argument("playlist", help="Playlist ID or title")

    # Songs
    like_parser = subparsers.add_parser("like", help="Toggle a song's liked flag")
    like_parser.add_argument("song", help="Song ID or name")

    rename_parser = subparsers.add_parser("rename", help="Rename a song and its files")
    rename_parser.add_argument("song", help="Song ID or name")
    rename_parser.add_argument("new_name", help="New song name")

    volume_parser = subparsers.add_parser("volume", help="Set a song's volume (0-100)")
    volume_parser.add_argument("song", help="Song ID or name")
    volume_parser.add_argument("value", type=float, help="Volume 0-100")

    delete_song_parser = subparsers.add_parser(
        "delete-song", help="Delete a song and its audio files"
    )
    delete_song_parser.add_argument("song", help="Song ID or name")
    delete_song_parser.add_argument(
        "--keep-files", action="store_true", help="Keep the audio files on disk"
    )

    sort_parser = subparsers.add_parser("sort", help="Reorder the song list")
    sort_parser.add_argument("mode", choices=SORT_MODES)

    # Maintenance
    subparsers.add_parser("scan", help="Sync the catalog with the audio folder")

    check_parser = subparsers.add_parser("check", help="Check catalog consistency")
    check_parser.add_argument(
        "--fix", action="store_true", help="Save the repaired catalog"
    )

    init_parser = subparsers.add_parser("init-config", help="Write config.toml")
    init_parser.add_argument("--path", type=Path, help="Where to write the file")
    init_parser.add_argument("--force", action="store_true", help="Overwrite")

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the music-shelf command."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    config = load_config(args.config)

    log_file = (
        Path(config.logging.log_file)
        if config.logging.log_file
        else get_data_dir(config) / LOG_FILE_NAME
    )
    setup_loguru(
        log_file,
        level=config.logging.level,
        max_file_size_mb=config.logging.max_file_size_mb,
        backup_count=config.logging.backup_count,
        console_output=config.logging.console_output,
    )

    if args.command == "init-config":
        return init_config(config, args.path, args.force)

    ensure_directories(config)
    ctx = AppContext.create(config, console=get_console())
    return run_command(ctx, args)


if __name__ == "__main__":
    sys.exit(main())
