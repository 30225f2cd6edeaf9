"""Tests for the agents' text extraction helpers."""

from __future__ import annotations

import pytest

from switchboard.agents._text import (
    extract_destination,
    extract_location,
    extract_number,
    extract_pickup,
    extract_price,
    extract_time,
    keyword_pattern,
)


class TestKeywordPattern:
    def test_matches_word_prefix_case_insensitive(self) -> None:
        pattern = keyword_pattern(["book", "ola"])
        assert pattern.search("Booking a ride")
        assert pattern.search("OLA please")
        assert not pattern.search("chocolate")

    def test_multi_word_phrases(self) -> None:
        assert keyword_pattern(["take me to"]).search("please take me to work")


class TestPlaces:
    @pytest.mark.parametrize(
        ("message", "expected"),
        [
            ("find me a cab to the airport", "airport"),
            ("I want to go to the railway station", "railway station"),
            ("take me to MG Road by 5pm", "MG Road"),
            ("drop me at Indiranagar, please", "Indiranagar"),
            ("book a cab", None),
        ],
    )
    def test_destination(self, message: str, expected: str | None) -> None:
        assert extract_destination(message) == expected

    def test_pickup(self) -> None:
        assert extract_pickup("cab from Koramangala to the airport") == "Koramangala"
        assert extract_pickup("cab to the airport") is None

    def test_location_prefers_pickup(self) -> None:
        assert extract_location("from HSR Layout near the lake") == "HSR Layout"
        assert extract_location("pizza near Koramangala") == "Koramangala"
        assert extract_location("pizza please") is None


class TestValues:
    @pytest.mark.parametrize(
        ("message", "expected"),
        [
            ("pick me up at 5:30 pm", "5:30 pm"),
            ("by 7pm", "7pm"),
            ("tomorrow morning", "tomorrow"),
            ("now", None),
        ],
    )
    def test_time(self, message: str, expected: str | None) -> None:
        assert extract_time(message) == expected

    @pytest.mark.parametrize(
        ("message", "expected"),
        [
            ("something for ₹250", 250),
            ("under 1,500", 1500),
            ("budget of rs 300", 300),
            ("cheap food", None),
        ],
    )
    def test_price(self, message: str, expected: int | None) -> None:
        assert extract_price(message) == expected

    def test_number(self) -> None:
        assert extract_number("add 3 naan") == 3
        assert extract_number("add naan") is None
