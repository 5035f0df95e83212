"""Tests for ID, volume and display index rules."""

import pytest

from music_shelf.domain.library.identity import (
    clamp_volume,
    dedupe_ids,
    format_display_index,
    generate_id,
    is_valid_id,
)


class TestClampVolume:
    """Tests for clamp_volume."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            (150, 100.0),
            (-5, 50.0),
            (73, 73.0),
            (0, 0.0),
            (100, 100.0),
            ("73", 73.0),
            (12.5, 12.5),
        ],
    )
    def test_numeric_values(self, raw, expected):
        assert clamp_volume(raw) == expected

    @pytest.mark.parametrize("raw", [None, "loud", float("nan"), True, False, [], {}])
    def test_unreadable_values_reset_to_default(self, raw):
        """Anything that isn't a number falls back to 50."""
        assert clamp_volume(raw) == 50.0

    def test_infinity_clamps_to_max(self):
        assert clamp_volume(float("inf")) == 100.0


class TestIds:
    """Tests for ID validity and generation."""

    def test_valid_ids(self):
        assert is_valid_id("abc")
        assert not is_valid_id("")
        assert not is_valid_id("   ")
        assert not is_valid_id(None)
        assert not is_valid_id(42)

    def test_generate_id_is_hex(self):
        new_id = generate_id()
        assert len(new_id) == 32
        int(new_id, 16)

    def test_generate_id_avoids_claimed(self, monkeypatch):
        """A colliding candidate is rejected and another is drawn."""
        candidates = iter(["a" * 32, "b" * 32])

        class FakeUUID:
            def __init__(self, hex_value):
                self.hex = hex_value

        monkeypatch.setattr(
            "music_shelf.domain.library.identity.uuid.uuid4",
            lambda: FakeUUID(next(candidates)),
        )
        assert generate_id({"a" * 32}) == "b" * 32

    def test_display_index(self):
        assert format_display_index(1) == "01"
        assert format_display_index(9) == "09"
        assert format_display_index(123) == "123"


class TestDedupeIds:
    """Tests for dedupe_ids."""

    def test_keeps_first_seen_order(self):
        assert dedupe_ids(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]

    def test_drops_blank_and_non_string(self):
        assert dedupe_ids(["a", "", None, 3, " ", "b"]) == ["a", "b"]

    def test_non_list_is_empty(self):
        assert dedupe_ids(None) == []
        assert dedupe_ids("abc") == []
        assert dedupe_ids({"a": 1}) == []
