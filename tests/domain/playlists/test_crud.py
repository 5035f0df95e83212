"""Tests for playlist create/edit/lookup."""

import pytest

from music_shelf.domain.library.catalog import Catalog
from music_shelf.domain.library.exceptions import EntityNotFoundError
from music_shelf.domain.library.models import Playlist
from music_shelf.domain.playlists.crud import (
    create_playlist,
    get_playlist_by_title,
    playlist_song_count,
    update_playlist,
)


@pytest.fixture
def catalog():
    return Catalog(playlists=[Playlist(id="p1", title="Chill")])


class TestCreatePlaylist:
    """Tests for create_playlist."""

    def test_creates_empty_playlist(self, catalog):
        playlist = create_playlist(catalog, "  Road Trip ", description="Summer")

        assert playlist.title == "Road Trip"
        assert playlist.description == "Summer"
        assert playlist.song_ids == []
        assert playlist.legacy_song_names is None
        assert playlist.id != "p1"
        assert catalog.playlists[-1] is playlist

    def test_blank_title_rejected(self, catalog):
        with pytest.raises(ValueError, match="cannot be empty"):
            create_playlist(catalog, "   ")
        assert len(catalog.playlists) == 1

    def test_empty_icon_path_stored_as_none(self, catalog):
        assert create_playlist(catalog, "Icons", icon_path="").icon_path is None


class TestUpdatePlaylist:
    """Tests for update_playlist."""

    def test_updates_given_fields_only(self, catalog):
        playlist = catalog.playlist_by_id("p1")
        update_playlist(catalog, playlist, description="Lo-fi")
        assert playlist.title == "Chill"
        assert playlist.description == "Lo-fi"

        update_playlist(catalog, playlist, title=" Calm ", icon_path="/icons/calm.png")
        assert playlist.title == "Calm"
        assert playlist.icon_path == "/icons/calm.png"

    def test_blank_title_rejected(self, catalog):
        with pytest.raises(ValueError):
            update_playlist(catalog, catalog.playlist_by_id("p1"), title="")

    def test_unknown_playlist_rejected(self, catalog):
        detached = Playlist(id="px", title="Elsewhere")

        with pytest.raises(EntityNotFoundError):
            update_playlist(catalog, detached, title="Renamed")

        assert detached.title == "Elsewhere"
        assert [p.id for p in catalog.playlists] == ["p1"]


class TestLookup:
    """Tests for title lookup and song counts."""

    def test_title_lookup_ignores_case(self, catalog):
        assert get_playlist_by_title(catalog, "CHILL").id == "p1"
        assert get_playlist_by_title(catalog, "missing") is None
        assert get_playlist_by_title(catalog, "") is None

    def test_song_count(self):
        assert playlist_song_count(Playlist(id="p", song_ids=["a", "b"])) == 2
        assert playlist_song_count(Playlist(id="p", legacy_song_names=["x"])) == 1
        assert playlist_song_count(Playlist(id="p")) == 0
