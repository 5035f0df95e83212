"""
Audio file metadata utilities.

Reads durations from audio files using Mutagen and formats times for
display.
"""

from typing import Optional

from loguru import logger
from mutagen import File as MutagenFile
from mutagen import MutagenError


def format_time(seconds: float) -> str:
    """Format time in seconds to MM:SS format."""
    if seconds < 0:
        return "00:00"

    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{minutes:02d}:{secs:02d}"


def read_duration_seconds(local_path: str) -> Optional[float]:
    """Read the audio duration of a file.

    Returns:
        Duration in seconds, or None if the file cannot be read
    """
    try:
        audio = MutagenFile(local_path)
    except (MutagenError, OSError) as e:
        logger.debug(f"Could not read metadata from {local_path}: {e}")
        return None

    if audio is None or audio.info is None:
        return None

    length = getattr(audio.info, "length", None)
    return float(length) if length else None


def get_duration_str(local_path: str) -> str:
    """Get a file's duration as MM:SS, or an empty string when unknown."""
    duration = read_duration_seconds(local_path)
    if duration is None:
        return ""
    return format_time(duration)
