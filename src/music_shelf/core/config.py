"""
Configuration management for music-shelf
"""

import math
import os
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import List, Optional


@dataclass
class LibraryConfig:
    """Configuration for catalog storage and the managed audio folder."""

    data_dir: Optional[str] = None  # Default: ~/.local/share/music-shelf
    audio_dir: Optional[str] = None  # Default: <data_dir>/songs
    songs_file: str = "songs.json"
    playlists_file: str = "playlists.json"
    # Preference order: first format wins when a song exists in several
    supported_formats: List[str] = field(default_factory=lambda: [".mp3", ".wav"])

    def validate(self) -> None:
        """Validate library configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if not isinstance(self.supported_formats, list) or not all(
            isinstance(ext, str) for ext in self.supported_formats
        ):
            raise ValueError("supported_formats must be a list of extensions")
        if not self.supported_formats:
            raise ValueError("supported_formats must list at least one extension")
        invalid = [
            ext
            for ext in self.supported_formats
            if not ext.startswith(".") or ext != ext.lower()
        ]
        if invalid:
            raise ValueError(
                f"Invalid audio formats: {invalid}. "
                "Formats must be lowercase extensions like '.mp3'"
            )


@dataclass
class PlaybackConfig:
    """Configuration for playback behaviour."""

    double_click_threshold_ms: int = 300
    default_volume: int = 50


# Minimum widths for the song list columns (pixels)
INDEX_MIN_WIDTH = 40
TITLE_MIN_WIDTH = 80
LIKED_MIN_WIDTH = 48
VOLUME_MIN_WIDTH = 32
TIME_MIN_WIDTH = 62

# Row margins + padding around the fixed columns
HORIZONTAL_CHROME = 52


@dataclass
class LayoutConfig:
    """Persisted song list column widths, independent of the catalog."""

    index_width: float = 50
    title_width: float = 350
    liked_width: float = 68
    volume_width: float = 36
    time_width: float = 64

    def validate(self) -> None:
        """Raise any width below its column minimum up to that minimum."""
        self.index_width = max(self.index_width, INDEX_MIN_WIDTH)
        self.title_width = max(self.title_width, TITLE_MIN_WIDTH)
        self.liked_width = max(self.liked_width, LIKED_MIN_WIDTH)
        self.volume_width = max(self.volume_width, VOLUME_MIN_WIDTH)
        self.time_width = max(self.time_width, TIME_MIN_WIDTH)

    def title_width_for(self, viewport_width: float) -> float:
        """Title column width that fills the viewport after the fixed columns."""
        if viewport_width <= 0:
            return self.title_width
        fixed = self.index_width + self.liked_width + self.time_width + self.volume_width
        return max(TITLE_MIN_WIDTH, viewport_width - fixed - HORIZONTAL_CHROME)


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file: Optional[str] = (
        None  # Custom log file path (default: ~/.local/share/music-shelf/music-shelf.log)
    )
    max_file_size_mb: int = 10  # Maximum log file size before rotation
    backup_count: int = 5  # Number of backup files to keep
    console_output: bool = False  # Also output to console (for debugging)


@dataclass
class Config:
    """Main configuration object."""

    library: LibraryConfig = field(default_factory=LibraryConfig)
    playback: PlaybackConfig = field(default_factory=PlaybackConfig)
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "music-shelf"
    return Path.home() / ".config" / "music-shelf"


def _find_project_config() -> Optional[Path]:
    """Find config.toml in project root by looking for pyproject.toml.

    Used during development so the project's config file is picked up even
    when the working directory changes.

    Returns:
        Path to config.toml in project root, or None if not found
    """
    current = Path(__file__).resolve().parent
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            config_path = parent / "config.toml"
            if config_path.exists():
                return config_path
            # Found project root but no config.toml there
            return None
    return None


def get_config_path() -> Path:
    """Get the main configuration file path.

    Checks for config.toml in the following order:
    1. Project root (detected via pyproject.toml) - for development
    2. Current working directory
    3. XDG_CONFIG_HOME/music-shelf (or ~/.config/music-shelf)
    """
    project_config = _find_project_config()
    if project_config:
        return project_config

    local_config = Path.cwd() / "config.toml"
    if local_config.exists():
        return local_config

    return get_config_dir() / "config.toml"


def get_data_dir(config: Optional[Config] = None) -> Path:
    """Get the data directory path.

    Precedence: MUSIC_SHELF_DATA_DIR, then ``[library] data_dir``, then
    XDG_DATA_HOME/music-shelf (or ~/.local/share/music-shelf).
    """
    env_dir = os.environ.get("MUSIC_SHELF_DATA_DIR")
    if env_dir:
        return Path(env_dir).expanduser()

    if config is not None and config.library.data_dir:
        return Path(config.library.data_dir).expanduser()

    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / "music-shelf"
    return Path.home() / ".local" / "share" / "music-shelf"


def get_audio_dir(config: Config) -> Path:
    """Get the managed audio folder."""
    if config.library.audio_dir:
        return Path(config.library.audio_dir).expanduser()
    return get_data_dir(config) / "songs"


def get_songs_path(config: Config) -> Path:
    return get_data_dir(config) / config.library.songs_file


def get_playlists_path(config: Config) -> Path:
    return get_data_dir(config) / config.library.playlists_file


def create_default_config() -> str:
    """Create a default configuration TOML content."""
    return """
# music-shelf Configuration

[library]
# Where songs.json / playlists.json are kept (default: ~/.local/share/music-shelf)
# data_dir = "~/.local/share/music-shelf"

# Managed audio folder (default: <data_dir>/songs)
# audio_dir = "~/Music/shelf"

songs_file = "songs.json"
playlists_file = "playlists.json"

# Supported audio formats, in preference order
supported_formats = [".mp3", ".wav"]

[playback]
# Maximum gap between two clicks on the same song row (milliseconds)
double_click_threshold_ms = 300

# Volume given to newly imported songs (0-100)
default_volume = 50

[layout]
# Song list column widths (pixels)
index_width = 50
title_width = 350
liked_width = 68
volume_width = 36
time_width = 64

[logging]
# Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
level = "INFO"

# Custom log file path (default: ~/.local/share/music-shelf/music-shelf.log)
# log_file = "/path/to/custom/music-shelf.log"

# Maximum log file size in MB before rotation
max_file_size_mb = 10

# Number of backup log files to keep
backup_count = 5

# Also output logs to console (useful for debugging)
console_output = false
""".strip()


def _number(
    section: dict, key: str, default: float, section_name: str, kind: type = float
) -> float:
    """Read a numeric setting, falling back to the default when unusable."""
    value = section.get(key, default)
    try:
        if isinstance(value, bool):
            raise TypeError("booleans are not numbers")
        number = kind(value)
        if math.isnan(number):
            raise ValueError("NaN")
        return number
    except (TypeError, ValueError, OverflowError):
        print(f"Warning: Invalid {section_name} configuration: {key} = {value!r}")
        print(f"Using default {key}.")
        return default


def parse_config(toml_data: dict) -> Config:
    """Build a Config from parsed TOML, keeping defaults for missing keys."""
    config = Config()

    if "library" in toml_data:
        library_data = toml_data["library"]
        config.library = LibraryConfig(
            data_dir=library_data.get("data_dir"),
            audio_dir=library_data.get("audio_dir"),
            songs_file=library_data.get("songs_file", config.library.songs_file),
            playlists_file=library_data.get(
                "playlists_file", config.library.playlists_file
            ),
            supported_formats=library_data.get(
                "supported_formats", config.library.supported_formats
            ),
        )
        try:
            config.library.validate()
        except ValueError as e:
            print(f"Warning: Invalid library configuration: {e}")
            print("Using default supported formats.")
            config.library.supported_formats = LibraryConfig().supported_formats

    if "playback" in toml_data:
        playback_data = toml_data["playback"]
        config.playback = PlaybackConfig(
            double_click_threshold_ms=_number(
                playback_data,
                "double_click_threshold_ms",
                config.playback.double_click_threshold_ms,
                "playback",
                int,
            ),
            default_volume=_number(
                playback_data,
                "default_volume",
                config.playback.default_volume,
                "playback",
                int,
            ),
        )

    if "layout" in toml_data:
        layout_data = toml_data["layout"]
        defaults = LayoutConfig()
        config.layout = LayoutConfig(
            **{
                f.name: _number(layout_data, f.name, getattr(defaults, f.name), "layout")
                for f in fields(LayoutConfig)
            }
        )
        config.layout.validate()

    if "logging" in toml_data:
        logging_data = toml_data["logging"]
        log_file = logging_data.get("log_file")
        if log_file:
            log_file = str(Path(log_file).expanduser())
        config.logging = LoggingConfig(
            level=logging_data.get("level", config.logging.level).upper(),
            log_file=log_file,
            max_file_size_mb=logging_data.get(
                "max_file_size_mb", config.logging.max_file_size_mb
            ),
            backup_count=logging_data.get("backup_count", config.logging.backup_count),
            console_output=logging_data.get(
                "console_output", config.logging.console_output
            ),
        )

    return config


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file or create default.

    A ``.env`` file in the config directory is loaded first, so
    MUSIC_SHELF_DATA_DIR can be set there.
    """
    from dotenv import load_dotenv

    env_path = get_config_dir() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    config_path = config_path or get_config_path()

    if not config_path.exists():
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            f.write(create_default_config())
        print(f"Created default configuration at: {config_path}")
        return Config()

    try:
        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)
        return parse_config(toml_data)

    except (OSError, tomllib.TOMLDecodeError) as e:
        print(f"Error loading configuration from {config_path}: {e}")
        print("Using default configuration.")
        return Config()


def save_config(config: Config, config_path: Optional[Path] = None) -> bool:
    """Save configuration to file."""
    config_path = config_path or get_config_path()

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)

        toml_content = f"""# music-shelf Configuration

[library]
songs_file = "{config.library.songs_file}"
playlists_file = "{config.library.playlists_file}"
supported_formats = {config.library.supported_formats!r}"""

        if config.library.data_dir:
            toml_content += f'\ndata_dir = "{config.library.data_dir}"'
        if config.library.audio_dir:
            toml_content += f'\naudio_dir = "{config.library.audio_dir}"'

        toml_content += f"""

[playback]
double_click_threshold_ms = {config.playback.double_click_threshold_ms}
default_volume = {config.playback.default_volume}

[layout]
index_width = {config.layout.index_width}
title_width = {config.layout.title_width}
liked_width = {config.layout.liked_width}
volume_width = {config.layout.volume_width}
time_width = {config.layout.time_width}

[logging]
level = "{config.logging.level}"
max_file_size_mb = {config.logging.max_file_size_mb}
backup_count = {config.logging.backup_count}
console_output = {str(config.logging.console_output).lower()}"""

        if config.logging.log_file:
            toml_content += f'\nlog_file = "{config.logging.log_file}"'

        toml_content += "\n"

        with open(config_path, "w", encoding="utf-8") as f:
            f.write(toml_content)

        return True

    except OSError as e:
        print(f"Error saving configuration to {config_path}: {e}")
        return False


def ensure_directories(config: Optional[Config] = None) -> None:
    """Ensure all necessary directories exist."""
    get_config_dir().mkdir(parents=True, exist_ok=True)
    get_data_dir(config).mkdir(parents=True, exist_ok=True)
    if config is not None:
        get_audio_dir(config).mkdir(parents=True, exist_ok=True)
