"""Tests for the jurisdiction election calendar."""

from datetime import date

import pytest

from vote_finder.election_calendar import (
    SearchMode,
    branch_for,
    format_election_date,
    is_historical,
)
from vote_finder.places import Jurisdiction


@pytest.fixture
def travis() -> Jurisdiction:
    return Jurisdiction(
        key="TRAVIS",
        name="Travis County",
        early_voting_end_date=date(2024, 11, 1),
        election_day_date=date(2024, 11, 5),
    )


class TestBranchFor:
    """Tests for branch_for()."""

    def test_last_day_of_early_voting_uses_early_voting(self, travis):
        assert branch_for(travis, date(2024, 11, 1)) is SearchMode.EARLY_VOTING

    def test_day_after_early_voting_uses_election_day(self, travis):
        assert branch_for(travis, date(2024, 11, 2)) is SearchMode.ELECTION_DAY

    def test_before_early_voting_starts_uses_early_voting(self, travis):
        assert branch_for(travis, date(2024, 9, 1)) is SearchMode.EARLY_VOTING

    def test_election_day_and_after(self, travis):
        assert branch_for(travis, date(2024, 11, 5)) is SearchMode.ELECTION_DAY
        assert branch_for(travis, date(2025, 1, 1)) is SearchMode.ELECTION_DAY


class TestIsHistorical:
    """Tests for is_historical()."""

    def test_election_day_is_not_historical(self, travis):
        assert not is_historical(travis, date(2024, 11, 5))

    def test_day_after_election_is_historical(self, travis):
        assert is_historical(travis, date(2024, 11, 6))

    def test_before_election_is_not_historical(self, travis):
        assert not is_historical(travis, date(2024, 11, 2))


def test_format_election_date(travis):
    assert format_election_date(travis) == "Nov 05, 2024"
