"""Tests for configuration parsing, loading and saving."""

from pathlib import Path

import pytest

from music_shelf.core.config import (
    Config,
    LayoutConfig,
    TITLE_MIN_WIDTH,
    get_audio_dir,
    get_data_dir,
    get_playlists_path,
    get_songs_path,
    load_config,
    parse_config,
    save_config,
)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep config/data lookups away from the real home directory."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config-home"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data-home"))
    monkeypatch.delenv("MUSIC_SHELF_DATA_DIR", raising=False)


class TestParseConfig:
    """Tests for parse_config."""

    def test_defaults(self):
        config = parse_config({})
        assert config.library.supported_formats == [".mp3", ".wav"]
        assert config.library.songs_file == "songs.json"
        assert config.playback.double_click_threshold_ms == 300
        assert config.playback.default_volume == 50
        assert config.layout.title_width == 350
        assert config.logging.level == "INFO"
        assert config.logging.max_file_size_mb == 10
        assert config.logging.backup_count == 5

    def test_sections_override_defaults(self):
        config = parse_config(
            {
                "library": {"data_dir": "/srv/shelf", "supported_formats": [".wav"]},
                "playback": {"double_click_threshold_ms": 500},
                "logging": {"level": "debug"},
            }
        )
        assert config.library.data_dir == "/srv/shelf"
        assert config.library.supported_formats == [".wav"]
        assert config.library.playlists_file == "playlists.json"
        assert config.playback.double_click_threshold_ms == 500
        assert config.playback.default_volume == 50
        assert config.logging.level == "DEBUG"

    def test_invalid_formats_fall_back(self):
        config = parse_config({"library": {"supported_formats": ["MP3"]}})
        assert config.library.supported_formats == [".mp3", ".wav"]

    def test_layout_widths_clamped_to_minimums(self):
        config = parse_config({"layout": {"index_width": 5, "title_width": 10}})
        assert config.layout.index_width == 40
        assert config.layout.title_width == TITLE_MIN_WIDTH
        assert config.layout.time_width == 64

    def test_invalid_layout_values_fall_back(self, capsys):
        config = parse_config(
            {"layout": {"index_width": "wide", "title_width": "420", "time_width": True}}
        )

        assert config.layout.index_width == 50
        assert config.layout.title_width == 420.0
        assert config.layout.time_width == 64
        assert "Invalid layout configuration: index_width" in capsys.readouterr().out

    def test_invalid_playback_values_fall_back(self):
        config = parse_config(
            {"playback": {"double_click_threshold_ms": "slow", "default_volume": "30"}}
        )
        assert config.playback.double_click_threshold_ms == 300
        assert config.playback.default_volume == 30

    def test_non_list_formats_fall_back(self):
        config = parse_config({"library": {"supported_formats": 3}})
        assert config.library.supported_formats == [".mp3", ".wav"]


class TestLayoutConfig:
    """Tests for LayoutConfig."""

    def test_title_fills_viewport(self):
        layout = LayoutConfig()
        # 1000 - (50 + 68 + 64 + 36) - 52
        assert layout.title_width_for(1000) == 730

    def test_title_never_below_minimum(self):
        assert LayoutConfig().title_width_for(100) == TITLE_MIN_WIDTH

    def test_unknown_viewport_keeps_saved_width(self):
        assert LayoutConfig(title_width=400).title_width_for(0) == 400


class TestLoadAndSave:
    """Tests for load_config/save_config."""

    def test_missing_file_created_with_defaults(self, tmp_path):
        config_path = tmp_path / "config.toml"

        config = load_config(config_path)

        assert config_path.exists()
        assert config == Config()
        # The written default file must itself be valid
        assert load_config(config_path) == Config()

    def test_invalid_toml_falls_back_to_defaults(self, tmp_path):
        config_path = tmp_path / "config.toml"
        config_path.write_text("[library\nbroken = ", encoding="utf-8")
        assert load_config(config_path) == Config()

    def test_wrongly_typed_values_do_not_abort_load(self, tmp_path):
        config_path = tmp_path / "config.toml"
        config_path.write_text(
            '[layout]\nindex_width = "wide"\n\n[playback]\ndefault_volume = "loud"\n',
            encoding="utf-8",
        )

        config = load_config(config_path)

        assert config.layout.index_width == 50
        assert config.playback.default_volume == 50

    def test_save_and_reload(self, tmp_path):
        config = Config()
        config.library.data_dir = str(tmp_path / "data")
        config.playback.double_click_threshold_ms = 450
        config.layout.title_width = 500
        config.logging.console_output = True
        config_path = tmp_path / "out" / "config.toml"

        assert save_config(config, config_path) is True
        reloaded = load_config(config_path)

        assert reloaded.library.data_dir == str(tmp_path / "data")
        assert reloaded.playback.double_click_threshold_ms == 450
        assert reloaded.layout.title_width == 500
        assert reloaded.logging.console_output is True

    def test_dotenv_sets_data_dir(self, tmp_path, monkeypatch):
        # Register the variable with monkeypatch so the value load_dotenv sets is undone
        monkeypatch.setenv("MUSIC_SHELF_DATA_DIR", "placeholder")
        monkeypatch.delenv("MUSIC_SHELF_DATA_DIR")
        env_dir = tmp_path / "config-home" / "music-shelf"
        env_dir.mkdir(parents=True)
        (env_dir / ".env").write_text(
            f"MUSIC_SHELF_DATA_DIR={tmp_path / 'from-env'}\n", encoding="utf-8"
        )

        config = load_config(tmp_path / "config.toml")

        assert get_data_dir(config) == tmp_path / "from-env"


class TestPaths:
    """Tests for data/audio path resolution."""

    def test_env_overrides_config(self, tmp_path, monkeypatch):
        config = parse_config({"library": {"data_dir": str(tmp_path / "cfg")}})
        assert get_data_dir(config) == tmp_path / "cfg"

        monkeypatch.setenv("MUSIC_SHELF_DATA_DIR", str(tmp_path / "env"))
        assert get_data_dir(config) == tmp_path / "env"

    def test_xdg_default(self, tmp_path):
        assert get_data_dir() == tmp_path / "data-home" / "music-shelf"

    def test_catalog_and_audio_paths(self, tmp_path):
        config = parse_config({"library": {"data_dir": str(tmp_path)}})
        assert get_songs_path(config) == tmp_path / "songs.json"
        assert get_playlists_path(config) == tmp_path / "playlists.json"
        assert get_audio_dir(config) == tmp_path / "songs"

        config.library.audio_dir = str(tmp_path / "elsewhere")
        assert get_audio_dir(config) == Path(tmp_path / "elsewhere")
