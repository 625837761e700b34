"""Tests for the PostGIS geodata provider.

Queries run against a mocked Session; these tests cover result conversion
and error handling rather than the spatial SQL itself.
"""

from datetime import date, datetime
from types import SimpleNamespace
from unittest.mock import Mock, patch

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from vote_finder.errors import GeodataProviderError
from vote_finder.geodata.providers.postgis import PostGISGeodataProvider, row_to_place_record
from vote_finder.places import DistrictKind, Location, PlaceKind

from conftest import ORIGIN


def place_row(**overrides) -> SimpleNamespace:
    row = dict(
        id="F1",
        place_type="EARLY_FIXED",
        precinct=None,
        schedule_id="FIX",
        notes=None,
        name="City Hall",
        street="301 W 2nd St",
        city="Austin",
        state="TX",
        zip="78701",
        latitude=30.265,
        longitude=-97.747,
        schedule_formatted="Mon, Oct 21: 7:00am - 7:00pm",
        opens=datetime(2024, 10, 21, 7),
        closes=datetime(2024, 11, 1, 19),
        distance=3.2,
    )
    row.update(overrides)
    return SimpleNamespace(**row)


@pytest.fixture
def mock_session() -> Mock:
    return Mock(spec=Session)


@pytest.fixture
def postgis(mock_session):
    with patch(
        "vote_finder.geodata.providers.postgis.get_session", return_value=mock_session
    ):
        yield PostGISGeodataProvider(None, engine=Mock())


class TestRowConversion:
    """Tests for row_to_place_record()."""

    def test_full_row(self):
        record = row_to_place_record(place_row())

        assert record.id == "F1"
        assert record.kind is PlaceKind.EARLY_FIXED
        assert record.location.street == "301 W 2nd St"
        assert record.location.latitude == 30.265
        assert record.distance == 3.2
        assert record.opens == datetime(2024, 10, 21, 7)

    def test_row_without_geometry(self):
        record = row_to_place_record(place_row(latitude=None, longitude=None))
        assert record.location is None

    def test_row_without_distance(self):
        row = place_row()
        del row.distance
        assert row_to_place_record(row).distance is None

    def test_missing_formatted_schedule(self):
        assert row_to_place_record(place_row(schedule_formatted=None)).schedule_formatted == ""


class TestQueries:
    """Tests for provider methods against a mocked session."""

    def test_jurisdiction(self, postgis, mock_session):
        mock_session.get.return_value = SimpleNamespace(
            key="TRAVIS",
            name="Travis County",
            date_early_voting_ends=date(2024, 11, 1),
            date_election_day=date(2024, 11, 5),
            sample_ballot_url=None,
        )

        juris = postgis.jurisdiction("TRAVIS")
        assert juris.name == "Travis County"
        assert juris.election_day_date == date(2024, 11, 5)
        mock_session.close.assert_called_once()

    def test_unknown_jurisdiction(self, postgis, mock_session):
        mock_session.get.return_value = None
        assert postgis.jurisdiction("NOPE") is None

    def test_contains(self, postgis, mock_session):
        mock_session.execute.return_value.first.return_value = SimpleNamespace(
            district_id="101", name="Precinct 101", region='{"type": "Polygon"}'
        )

        district = postgis.contains("TRAVIS", ORIGIN, DistrictKind.PRECINCT)
        assert district.id == "101"
        assert district.kind is DistrictKind.PRECINCT
        assert district.region == '{"type": "Polygon"}'

    def test_contains_no_match(self, postgis, mock_session):
        mock_session.execute.return_value.first.return_value = None
        assert postgis.contains("TRAVIS", Location(0, 0), DistrictKind.PRECINCT) is None

    def test_nearest(self, postgis, mock_session):
        mock_session.execute.return_value.first.return_value = place_row()

        record = postgis.nearest("TRAVIS", ORIGIN, PlaceKind.EARLY_FIXED, 12.0)
        assert record.id == "F1"
        assert record.distance == 3.2

    def test_within(self, postgis, mock_session):
        mock_session.execute.return_value.all.return_value = [
            place_row(id="M2", place_type="EARLY_MOBILE", distance=2.0),
            place_row(id="M3", place_type="EARLY_MOBILE", distance=1.0),
        ]

        records = postgis.within(
            "TRAVIS", ORIGIN, PlaceKind.EARLY_MOBILE, 4.5, order_by=("opens", "distance")
        )
        assert [r.id for r in records] == ["M2", "M3"]

    def test_within_rejects_unknown_sort_key(self, postgis, mock_session):
        with pytest.raises(ValueError, match="Unknown order_by"):
            postgis.within("TRAVIS", ORIGIN, PlaceKind.EARLY_MOBILE, 4.5, order_by=("zip",))
        mock_session.execute.assert_not_called()

    def test_schedule_entries(self, postgis, mock_session):
        mock_session.execute.return_value.all.return_value = [
            SimpleNamespace(opens=datetime(2024, 10, 21, 7), closes=datetime(2024, 10, 21, 19)),
        ]

        entries = postgis.schedule_entries("FIX")
        assert entries[0].schedule_id == "FIX"
        assert entries[0].contains(datetime(2024, 10, 21, 12))

    def test_election_definitions_skip_null_values(self, postgis, mock_session):
        mock_session.execute.return_value.all.return_value = [
            SimpleNamespace(name="ELECTION_DESCRIPTION", value="General Election"),
            SimpleNamespace(name="ELECTION_INFO", value=None),
        ]
        assert postgis.election_definitions() == {"ELECTION_DESCRIPTION": "General Election"}

    def test_database_error_wrapped(self, postgis, mock_session):
        mock_session.execute.side_effect = OperationalError("SELECT", {}, Exception("down"))

        with pytest.raises(GeodataProviderError) as exc_info:
            postgis.election_day_place("TRAVIS", "101")
        assert exc_info.value.provider_name == "postgis"
        mock_session.close.assert_called_once()
