"""Tests for load-time normalization and legacy migration."""

import random

import pytest

from music_shelf.domain.library.normalizer import (
    NormalizationReport,
    build_name_lookup,
    normalize_catalog,
)
from music_shelf.domain.library.models import Song
from music_shelf.domain.playlists.membership import find_membership_violations


def song_record(song_id, name, playlist_ids=None, volume=50, **extra):
    record = {
        "id": song_id,
        "name": name,
        "playlistIds": playlist_ids or [],
        "isLiked": False,
        "volume": volume,
        "duration": "03:00",
    }
    record.update(extra)
    return record


def playlist_record(playlist_id, title, song_ids=None, **extra):
    record = {"id": playlist_id, "title": title, "songIds": song_ids or []}
    record.update(extra)
    return record


class TestLegacyMigration:
    """Tests for converting name-based playlists to ID-based membership."""

    def test_legacy_names_become_ids(self):
        raw_songs = [
            song_record("s1", "A"),
            song_record("s2", "B"),
            song_record("s3", "C"),
        ]
        raw_playlists = [playlist_record("p1", "Old", songNames=["A", "B"])]

        catalog, report = normalize_catalog(raw_songs, raw_playlists)

        playlist = catalog.playlist_by_id("p1")
        assert playlist.song_ids == ["s1", "s2"]
        assert playlist.legacy_song_names is None
        assert catalog.song_by_id("s1").playlist_ids == ["p1"]
        assert catalog.song_by_id("s2").playlist_ids == ["p1"]
        assert catalog.song_by_id("s3").playlist_ids == []
        assert report.legacy_playlists_migrated == 1
        assert report.legacy_names_migrated == 2

    def test_unknown_legacy_names_are_dropped(self):
        raw_playlists = [playlist_record("p1", "Old", songNames=["A", "Deleted Song"])]

        catalog, report = normalize_catalog([song_record("s1", "A")], raw_playlists)

        assert catalog.playlist_by_id("p1").song_ids == ["s1"]
        assert report.legacy_names_dropped == 1

    def test_legacy_names_ignored_when_ids_present(self):
        """Playlists that already carry IDs never get name-based entries added."""
        raw_songs = [song_record("s1", "A"), song_record("s2", "B")]
        raw_playlists = [playlist_record("p1", "New", ["s1"], songNames=["B"])]

        catalog, report = normalize_catalog(raw_songs, raw_playlists)

        playlist = catalog.playlist_by_id("p1")
        assert playlist.song_ids == ["s1"]
        assert playlist.legacy_song_names is None
        assert report.legacy_playlists_migrated == 0

    def test_legacy_names_match_case_insensitively(self):
        raw_playlists = [playlist_record("p1", "Old", songNames=["my song"])]
        catalog, _ = normalize_catalog([song_record("s1", "My Song")], raw_playlists)
        assert catalog.playlist_by_id("p1").song_ids == ["s1"]

    def test_migrated_playlist_serializes_without_names(self):
        raw_playlists = [playlist_record("p1", "Old", songNames=["A"])]
        catalog, _ = normalize_catalog([song_record("s1", "A")], raw_playlists)
        assert "songNames" not in catalog.playlist_by_id("p1").to_record()


class TestReferenceRepair:
    """Tests for ID repair, pruning and cross-reconciliation."""

    def test_dangling_song_ids_pruned(self):
        raw_playlists = [playlist_record("p1", "Mix", ["s1", "s404"])]

        catalog, report = normalize_catalog([song_record("s1", "A")], raw_playlists)

        assert catalog.playlist_by_id("p1").song_ids == ["s1"]
        assert report.dangling_refs_pruned == 1

    def test_song_side_lists_are_rebuilt(self):
        """Stale song-side playlist IDs never survive a load."""
        raw_songs = [song_record("s1", "A", ["p1", "p-gone"]), song_record("s2", "B")]
        raw_playlists = [playlist_record("p1", "Mix", ["s2"])]

        catalog, _ = normalize_catalog(raw_songs, raw_playlists)

        assert catalog.song_by_id("s1").playlist_ids == []
        assert catalog.song_by_id("s2").playlist_ids == ["p1"]

    def test_duplicate_song_ids_in_playlist_removed(self):
        raw_playlists = [playlist_record("p1", "Mix", ["s1", "s1", "s1"])]
        catalog, _ = normalize_catalog([song_record("s1", "A")], raw_playlists)
        assert catalog.playlist_by_id("p1").song_ids == ["s1"]

    def test_missing_ids_assigned(self):
        raw_songs = [{"name": "No Id"}, song_record("", "Blank Id")]
        catalog, report = normalize_catalog(raw_songs, [{"title": "No Id"}])

        assert all(len(song.id) == 32 for song in catalog.songs)
        assert len(catalog.playlists[0].id) == 32
        assert report.ids_assigned == 3

    def test_duplicate_ids_regenerated(self):
        raw_songs = [song_record("dup", "A"), song_record("dup", "B")]
        raw_playlists = [playlist_record("p1", "Mix", ["dup"])]

        catalog, report = normalize_catalog(raw_songs, raw_playlists)

        first, second = catalog.songs
        assert first.id == "dup"
        assert second.id != "dup"
        assert report.ids_regenerated == 1
        # References keep pointing at the first claimant
        assert catalog.playlist_by_id("p1").song_ids == ["dup"]
        assert second.playlist_ids == []

    def test_volume_repaired(self):
        raw_songs = [
            song_record("s1", "A", volume=150),
            song_record("s2", "B", volume=-5),
            song_record("s3", "C", volume=73),
            {"id": "s4", "name": "D"},
        ]

        catalog, report = normalize_catalog(raw_songs, [])

        assert [s.volume for s in catalog.songs] == [100.0, 50.0, 73.0, 50.0]
        assert report.volumes_repaired == 3

    def test_malformed_records_skipped(self):
        catalog, report = normalize_catalog(["junk", None, song_record("s1", "A")], [42])
        assert [s.id for s in catalog.songs] == ["s1"]
        assert catalog.playlists == []
        assert report.skipped_records == 3

    def test_pascal_and_snake_case_keys_accepted(self):
        raw_songs = [
            {"Id": "s1", "Name": "A", "IsLiked": True, "Volume": 20},
            {"id": "s2", "name": "B", "is_liked": True},
        ]
        raw_playlists = [{"Id": "p1", "Title": "Mix", "SongIds": ["s1", "s2"]}]

        catalog, _ = normalize_catalog(raw_songs, raw_playlists)

        assert [s.is_liked for s in catalog.songs] == [True, True]
        assert catalog.song_by_id("s1").volume == 20.0
        assert catalog.playlist_by_id("p1").title == "Mix"
        assert catalog.song_by_id("s2").playlist_ids == ["p1"]

    def test_none_inputs_give_empty_catalog(self):
        catalog, report = normalize_catalog(None, None)
        assert catalog.songs == []
        assert catalog.playlists == []
        assert not report.has_repairs()
        assert report.summary() == "no repairs"


def _random_raw(rng: random.Random):
    song_ids = [f"s{i}" for i in range(rng.randint(0, 8))]
    playlist_ids = [f"p{i}" for i in range(rng.randint(0, 5))]
    pool_songs = song_ids + ["s-ghost", ""]
    pool_playlists = playlist_ids + ["p-ghost"]

    raw_songs = [
        song_record(
            rng.choice(song_ids + [""]) if rng.random() < 0.2 else song_id,
            f"Song {rng.randint(0, 5)}",
            rng.sample(pool_playlists, rng.randint(0, len(pool_playlists))),
            volume=rng.choice([-10, 0, 50, 99, 150, None, "x"]),
        )
        for song_id in song_ids
    ]
    raw_playlists = []
    for playlist_id in playlist_ids:
        record = playlist_record(
            playlist_id,
            playlist_id.upper(),
            [rng.choice(pool_songs) for _ in range(rng.randint(0, 6))],
        )
        if rng.random() < 0.3:
            record["songIds"] = []
            record["songNames"] = [f"Song {rng.randint(0, 7)}" for _ in range(3)]
        raw_playlists.append(record)
    return raw_songs, raw_playlists


class TestNormalizationProperties:
    """Invariants that hold for any input."""

    @pytest.mark.parametrize("seed", range(25))
    def test_membership_is_bidirectional(self, seed):
        raw_songs, raw_playlists = _random_raw(random.Random(seed))

        catalog, _ = normalize_catalog(raw_songs, raw_playlists)

        assert find_membership_violations(catalog) == []
        for playlist in catalog.playlists:
            assert playlist.legacy_song_names is None
            for song_id in playlist.song_ids:
                assert playlist.id in catalog.song_by_id(song_id).playlist_ids

    @pytest.mark.parametrize("seed", range(25))
    def test_normalization_is_idempotent(self, seed):
        raw_songs, raw_playlists = _random_raw(random.Random(seed))
        catalog, _ = normalize_catalog(raw_songs, raw_playlists)

        songs_out = [song.to_record() for song in catalog.songs]
        playlists_out = [playlist.to_record() for playlist in catalog.playlists]
        again, report = normalize_catalog(songs_out, playlists_out)

        assert [song.to_record() for song in again.songs] == songs_out
        assert [playlist.to_record() for playlist in again.playlists] == playlists_out
        assert not report.has_repairs()


class TestReport:
    """Tests for NormalizationReport."""

    def test_summary_lists_nonzero_counters(self):
        report = NormalizationReport(ids_assigned=2, volumes_repaired=1)
        assert report.has_repairs()
        assert report.summary() == "ids assigned=2, volumes repaired=1"


def test_build_name_lookup_first_song_wins():
    first = Song(id="s1", name="Same")
    second = Song(id="s2", name="same")
    lookup = build_name_lookup([first, second, Song(id="s3", name="")])
    assert lookup == {"same": first}
