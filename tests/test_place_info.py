"""Tests for voting place info window text."""

from datetime import datetime

import pytest

from vote_finder.place_info import ElectionText, format_info
from vote_finder.places import PlaceKind, PlaceLocation, PlaceRecord


def make_record(location=True, notes=None, formatted="Mon, Oct 21: 7:00am - 7:00pm") -> PlaceRecord:
    return PlaceRecord(
        id="F1",
        kind=PlaceKind.EARLY_FIXED,
        location=PlaceLocation(
            name="Randalls & Co",
            street="2025 W Ben White Blvd",
            city="Austin",
            state="TX",
            zip="78704",
            latitude=30.23,
            longitude=-97.79,
        )
        if location
        else None,
        precinct=None,
        schedule_id="FIX",
        schedule_formatted=formatted,
        opens=datetime(2024, 10, 21, 7),
        closes=datetime(2024, 11, 1, 19),
        notes=notes,
    )


class TestElectionText:
    """Tests for ElectionText.from_definitions()."""

    def test_from_definitions(self):
        text = ElectionText.from_definitions(
            {"ELECTION_DESCRIPTION": "General Election", "ELECTION_INFO": "<b>Bring ID</b>"}
        )
        assert text.description == "General Election"
        assert text.info == "<b>Bring ID</b>"

    def test_missing_definitions_are_blank(self):
        text = ElectionText.from_definitions({})
        assert text == ElectionText()


class TestFormatInfo:
    """Tests for format_info()."""

    def test_title_and_address(self):
        info = format_info(make_record(), "Early voting location", ElectionText())
        lines = info.split("\n")
        assert lines[0] == "<b>Early voting location</b>"
        assert "Randalls &amp; Co</a>" in lines[1]
        assert lines[2] == "2025 W Ben White Blvd"
        assert lines[3] == "Austin, TX 78704"

    def test_directions_link_is_url_encoded(self):
        info = format_info(make_record(), "Early voting location", ElectionText())
        assert "http://maps.google.com/?daddr=Randalls%20%26%20Co%2C%202025" in info

    def test_schedule_lines_bulleted(self):
        record = make_record(
            formatted="Mon, Oct 21: 7:00am - 7:00pm\nTue, Oct 22: 7:00am - 7:00pm"
        )
        info = format_info(record, "Early voting location", ElectionText())
        assert "Hours of operation:\n• Mon, Oct 21: 7:00am - 7:00pm\n• Tue, Oct 22" in info

    def test_description_escaped_and_info_verbatim(self):
        election = ElectionText(
            description="City <Bond> Election", info='<a href="https://x.org">More</a>'
        )
        info = format_info(make_record(), "Early voting location", election)
        assert "<i>City &lt;Bond&gt; Election</i>" in info
        assert info.endswith('<a href="https://x.org">More</a>')

    def test_notes_included(self):
        info = format_info(make_record(notes="Use north entrance"), "Title", ElectionText())
        assert "\nUse north entrance" in info

    def test_no_location_rejected(self):
        with pytest.raises(ValueError, match="no location"):
            format_info(make_record(location=False), "Title", ElectionText())
