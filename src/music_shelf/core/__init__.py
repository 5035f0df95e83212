"""Core infrastructure layer - no business logic dependencies.

This module provides foundation-level services:
- Configuration management (TOML)
- Logging setup (Loguru)
- Console management (Rich)

Clean architecture principle: The core layer has no dependencies on
domain or application layers.
"""

# Configuration
from .config import (
    Config,
    LibraryConfig,
    PlaybackConfig,
    LayoutConfig,
    LoggingConfig,
    load_config,
    parse_config,
    save_config,
    get_config_dir,
    get_config_path,
    get_data_dir,
    get_audio_dir,
    get_songs_path,
    get_playlists_path,
    create_default_config,
    ensure_directories,
)

# Output
from .output import LOG_FILE_NAME, setup_loguru, log

# Console
from .console import get_console, safe_print, print_error, build_table, print_table

__all__ = [
    # Config
    "Config",
    "LibraryConfig",
    "PlaybackConfig",
    "LayoutConfig",
    "LoggingConfig",
    "load_config",
    "parse_config",
    "save_config",
    "get_config_dir",
    "get_config_path",
    "get_data_dir",
    "get_audio_dir",
    "get_songs_path",
    "get_playlists_path",
    "create_default_config",
    "ensure_directories",
    # Output
    "LOG_FILE_NAME",
    "setup_loguru",
    "log",
    # Console
    "get_console",
    "safe_print",
    "print_error",
    "build_table",
    "print_table",
]
