"""Tests for schedule open/closed evaluation."""

from datetime import datetime

import pytest

from vote_finder.schedule import OpenRule, ScheduleEntry, evaluate, has_opened, is_open


@pytest.fixture
def two_days() -> list[ScheduleEntry]:
    """Two daily entries, 7am to 7pm."""
    return [
        ScheduleEntry(opens=datetime(2024, 10, 21, 7), closes=datetime(2024, 10, 21, 19)),
        ScheduleEntry(opens=datetime(2024, 10, 22, 7), closes=datetime(2024, 10, 22, 19)),
    ]


class TestScheduleEntry:
    """Tests for ScheduleEntry."""

    def test_contains_opening_instant(self):
        entry = ScheduleEntry(opens=datetime(2024, 11, 5, 7), closes=datetime(2024, 11, 5, 19))
        assert entry.contains(datetime(2024, 11, 5, 7))

    def test_closing_instant_is_closed(self):
        entry = ScheduleEntry(opens=datetime(2024, 11, 5, 7), closes=datetime(2024, 11, 5, 19))
        assert not entry.contains(datetime(2024, 11, 5, 19))
        assert entry.contains(datetime(2024, 11, 5, 18, 59, 59))

    def test_closes_before_opens_rejected(self):
        with pytest.raises(ValueError, match="before it opens"):
            ScheduleEntry(opens=datetime(2024, 11, 5, 19), closes=datetime(2024, 11, 5, 7))

    def test_empty_entry_is_never_open(self):
        moment = datetime(2024, 11, 5, 7)
        assert not ScheduleEntry(opens=moment, closes=moment).contains(moment)


class TestIntervalRule:
    """Tests for the interval rule used by election day and fixed places."""

    def test_open_inside_any_entry(self, two_days):
        assert is_open(two_days, datetime(2024, 10, 22, 12))
        assert evaluate(OpenRule.INTERVAL, two_days, datetime(2024, 10, 21, 8))

    def test_closed_between_entries(self, two_days):
        assert not evaluate(OpenRule.INTERVAL, two_days, datetime(2024, 10, 21, 22))

    def test_closed_before_and_after(self, two_days):
        assert not evaluate(OpenRule.INTERVAL, two_days, datetime(2024, 10, 20, 12))
        assert not evaluate(OpenRule.INTERVAL, two_days, datetime(2024, 10, 23, 12))

    def test_no_entries_is_closed(self):
        assert not evaluate(OpenRule.INTERVAL, [], datetime(2024, 10, 21, 12))


class TestThresholdRule:
    """Tests for the threshold rule used by mobile places."""

    def test_open_once_opened(self, two_days):
        assert evaluate(OpenRule.THRESHOLD, two_days, datetime(2024, 10, 21, 7))

    def test_open_between_entries(self, two_days):
        # Only the first opening matters
        assert evaluate(OpenRule.THRESHOLD, two_days, datetime(2024, 10, 21, 22))

    def test_not_yet_opened(self, two_days):
        assert not evaluate(OpenRule.THRESHOLD, two_days, datetime(2024, 10, 21, 6, 59))

    def test_no_entries_is_closed(self):
        assert not evaluate(OpenRule.THRESHOLD, [], datetime(2024, 10, 21, 12))

    def test_has_opened_boundary(self):
        opens = datetime(2024, 10, 25, 9)
        assert has_opened(opens, opens)
        assert not has_opened(opens, datetime(2024, 10, 25, 8, 59))
