"""Voting place selection for election day and early voting."""

from datetime import datetime

from loguru import logger

from vote_finder.errors import PlaceNotFoundError
from vote_finder.geodata.base import GeodataProvider
from vote_finder.place_info import ElectionText, format_info
from vote_finder.places import (
    DistrictKind,
    Location,
    Place,
    PlaceKind,
    PlaceRecord,
    PlaceType,
)
from vote_finder.schedule import OpenRule, ScheduleEntry, evaluate

# Mobile places must lie within this multiple of the nearest fixed place's
# distance
MOBILE_RADIUS_FACTOR = 1.5

TITLES = {
    PlaceType.EARLY_VOTING_FIXED: "Early voting location",
    PlaceType.EARLY_VOTING_MOBILE: "Mobile early voting location",
}


class PlaceSelector:
    """Selects and ranks voting places for one jurisdiction.

    Holds no per-search state; one selector can serve concurrent searches.
    """

    def __init__(
        self,
        provider: GeodataProvider,
        jurisdiction_key: str,
        election: ElectionText | None = None,
    ):
        self.provider = provider
        self.jurisdiction_key = jurisdiction_key
        self.election = election or ElectionText()

    def _build(
        self, record: PlaceRecord, place_type: PlaceType, title: str, is_open: bool
    ) -> Place:
        return Place(
            id=record.id,
            type=place_type,
            title=title,
            location=record.location,
            is_open=is_open,
            info=format_info(record, title, self.election),
        )

    # ----- Election day -----

    def find_election_day_place(self, precinct_id: str, reference_time: datetime) -> Place:
        """Return the election day voting place for a precinct.

        Raises:
            PlaceNotFoundError: If the precinct has no voting place, or the
                voting place has no location
        """
        record = self.provider.election_day_place(self.jurisdiction_key, precinct_id)
        if record is None:
            raise PlaceNotFoundError(
                f'cannot find election day voting place for precinct "{precinct_id}"'
            )
        if record.location is None:
            raise PlaceNotFoundError(
                f'cannot find election day voting location for precinct "{precinct_id}"'
            )

        is_open = evaluate(
            OpenRule.INTERVAL,
            [ScheduleEntry(opens=record.opens, closes=record.closes)],
            reference_time,
        )
        return self._build(
            record,
            PlaceType.ELECTION_DAY,
            f"Voting place for precinct {precinct_id}",
            is_open,
        )

    def find_election_day_place_by_location(
        self, origin: Location, reference_time: datetime
    ) -> Place | None:
        """Return the election day voting place for the precinct containing ``origin``.

        Returns None if no precinct contains the location.
        """
        precinct = self.provider.contains(self.jurisdiction_key, origin, DistrictKind.PRECINCT)
        if precinct is None:
            return None
        return self.find_election_day_place(precinct.id, reference_time)

    def search_election_day_places(
        self, origin: Location, reference_time: datetime
    ) -> list[Place]:
        """Return all election day voting places for a location."""
        place = self.find_election_day_place_by_location(origin, reference_time)
        return [place] if place is not None else []

    # ----- Early voting -----

    def find_early_voting_places(
        self,
        origin: Location,
        reference_time: datetime,
        max_distance: float,
        max_places: int,
    ) -> list[Place]:
        """Return early voting places for a location.

        The list holds the fixed early voting place closest to the location,
        followed by up to ``max_places - 1`` mobile early voting places that
        are within 1.5 times the fixed place's distance and have not finally
        closed for this election. Mobile places are ordered by opening time,
        then distance.

        Args:
            origin: Search location
            reference_time: The time treated as "now"
            max_distance: Ignore fixed places further than this (miles)
            max_places: Maximum number of places returned, at least 1

        Returns:
            Ordered places; empty if no fixed place is within range
        """
        fixed = self.provider.nearest(
            self.jurisdiction_key, origin, PlaceKind.EARLY_FIXED, max_distance
        )
        if fixed is None:
            logger.debug("No fixed early voting place within {} miles", max_distance)
            return []

        entries = self.provider.schedule_entries(fixed.schedule_id)
        places = [
            self._build(
                fixed,
                PlaceType.EARLY_VOTING_FIXED,
                TITLES[PlaceType.EARLY_VOTING_FIXED],
                evaluate(OpenRule.INTERVAL, entries, reference_time),
            )
        ]

        mobile_limit = max_places - 1
        if mobile_limit < 1:
            return places

        # Zero distance gives a zero radius, which admits no mobile places
        radius = MOBILE_RADIUS_FACTOR * fixed.distance
        candidates = self.provider.within(
            self.jurisdiction_key,
            origin,
            PlaceKind.EARLY_MOBILE,
            radius,
            order_by=("opens", "distance"),
        )
        selected = [r for r in candidates if r.closes > reference_time][:mobile_limit]
        logger.debug(
            "{} of {} mobile places within {:.2f} miles selected",
            len(selected),
            len(candidates),
            radius,
        )

        for record in selected:
            is_open = evaluate(
                OpenRule.THRESHOLD,
                [ScheduleEntry(opens=record.opens, closes=record.closes)],
                reference_time,
            )
            places.append(
                self._build(
                    record,
                    PlaceType.EARLY_VOTING_MOBILE,
                    TITLES[PlaceType.EARLY_VOTING_MOBILE],
                    is_open,
                )
            )

        return places
