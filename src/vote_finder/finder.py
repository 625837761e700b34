"""Voting place search.

Example usage:

    finder = build_finder(get_settings())
    result = finder.search(Location(30.2672, -97.7431), "TRAVIS")
    payload = result.to_dict(finder.defaults.max_region_on_search)
"""

from datetime import datetime
from enum import Enum
from typing import Any, Callable, Mapping

from loguru import logger

from vote_finder.config import SearchDefaults, Settings
from vote_finder.election_calendar import (
    SearchMode,
    branch_for,
    format_election_date,
    is_historical,
)
from vote_finder.errors import JurisdictionNotFoundError, PlaceNotFoundError
from vote_finder.geodata import GeodataProvider, GeodataProviderRegistry
from vote_finder.options import SearchOptions, resolve_options
from vote_finder.place_info import ElectionText
from vote_finder.places import DistrictKind, Jurisdiction, Location
from vote_finder.response import SearchResult
from vote_finder.selector import PlaceSelector


class SearchState(Enum):
    """Stages a search passes through, logged for tracing."""

    INIT = "init"
    DISTRICT_RESOLVED = "district_resolved"
    NO_PRECINCT = "no_precinct"
    BRANCH_SELECTED = "branch_selected"
    ELECTION_DAY_RESULT = "election_day_result"
    EARLY_VOTING_RESULT = "early_voting_result"
    DONE = "done"
    ERROR_DONE = "error_done"


def _trace(state: SearchState, **context: Any) -> None:
    logger.debug("search {} {}", state.value, context)


class VotingPlaceFinder:
    """Finds voting places for a location.

    Loads the election description once at construction; searches share no
    other state and may run concurrently.
    """

    def __init__(
        self,
        provider: GeodataProvider,
        defaults: SearchDefaults | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """Construct a finder.

        Args:
            provider: Geodata provider answering spatial queries
            defaults: Default max_distance/max_places, overridable per search
            clock: Source of the current time
        """
        self.provider = provider
        self.defaults = defaults or SearchDefaults()
        self.clock = clock
        self.election = ElectionText.from_definitions(provider.election_definitions())

    def search(
        self,
        location: Location,
        jurisdiction_key: str,
        options: SearchOptions | Mapping[str, Any] | None = None,
    ) -> SearchResult:
        """Search for voting places near a location.

        Args:
            location: Where the voter is
            jurisdiction_key: Jurisdiction identifier, such as "TRAVIS"
            options: ``max_distance``, ``max_places`` and ``time`` overrides

        Returns:
            SearchResult with places in display order

        Raises:
            ConfigurationError: For unknown options or an unknown jurisdiction
            GeodataProviderError: If a geodata query fails
            PlaceNotFoundError: On election day, if the precinct has no
                usable voting place
        """
        opts = resolve_options(options)
        juris = self.provider.jurisdiction(jurisdiction_key)
        if juris is None:
            raise JurisdictionNotFoundError(jurisdiction_key)

        with logger.contextualize(jurisdiction=juris.key):
            return self._search(location, juris, opts)

    def _search(self, location: Location, juris: Jurisdiction, opts: SearchOptions) -> SearchResult:
        now = opts.time or self.clock()
        max_distance = (
            opts.max_distance if opts.max_distance is not None else self.defaults.max_distance
        )
        max_places = opts.max_places if opts.max_places is not None else self.defaults.max_places
        _trace(SearchState.INIT, jurisdiction=juris.key, time=now.isoformat())

        result = SearchResult(jurisdiction=juris)

        council_district = self.provider.contains(juris.key, location, DistrictKind.COUNCIL)
        if council_district is not None:
            result.add_district(council_district)

        precinct = self.provider.contains(juris.key, location, DistrictKind.PRECINCT)
        if precinct is None:
            _trace(SearchState.NO_PRECINCT)
            result.error(
                f"The location you selected is outside the {juris.name} election jurisdiction."
            )
            _trace(SearchState.ERROR_DONE)
            return result

        result.add_district(precinct)
        _trace(SearchState.DISTRICT_RESOLVED, precinct=precinct.id)

        sample_ballot_url = juris.sample_ballot_url_for(precinct.id)
        if sample_ballot_url:
            result.add_additional("sample_ballot_url", sample_ballot_url)

        selector = PlaceSelector(self.provider, juris.key, self.election)
        today = now.date()
        mode = branch_for(juris, today)
        _trace(SearchState.BRANCH_SELECTED, mode=mode.value)

        if mode is SearchMode.ELECTION_DAY:
            for place in selector.search_election_day_places(location, now):
                result.add_place(place)

            if is_historical(juris, today):
                result.warning(
                    "You are viewing historical data, for the election that was held "
                    f"{format_election_date(juris)}."
                )
            _trace(SearchState.ELECTION_DAY_RESULT, places=len(result.places))

        else:
            try:
                result.add_place(selector.find_election_day_place(precinct.id, now))
            except PlaceNotFoundError as e:
                logger.warning("Election day place unavailable during early voting: {}", str(e))

            for place in selector.find_early_voting_places(
                location, now, max_distance, max_places
            ):
                result.add_place(place)
            _trace(SearchState.EARLY_VOTING_RESULT, places=len(result.places))

        _trace(SearchState.DONE)
        return result

    def region(self, jurisdiction_key: str, kind: DistrictKind, district_id: str) -> str | None:
        """Return the full GeoJSON region of a district withheld from a search."""
        return self.provider.region(jurisdiction_key, kind, district_id)


def build_finder(settings: Settings, clock: Callable[[], datetime] = datetime.now) -> VotingPlaceFinder:
    """Create a finder using the provider named in settings."""
    # Importing the providers package registers them
    from vote_finder.geodata import providers  # noqa: F401

    logger.debug("Using geodata provider: {}", settings.geodata_provider)
    provider = GeodataProviderRegistry.get_provider(settings.geodata_provider, settings)
    return VotingPlaceFinder(provider, defaults=settings.search, clock=clock)
