"""Abstract base class for geodata providers."""

from abc import ABC, abstractmethod
from typing import Sequence

from vote_finder.places import (
    District,
    DistrictKind,
    Jurisdiction,
    Location,
    PlaceKind,
    PlaceRecord,
)
from vote_finder.schedule import ScheduleEntry

# Keys accepted by GeodataProvider.within(order_by=...)
ORDER_KEYS = ("opens", "distance")


class GeodataProvider(ABC):
    """Spatial and schedule queries the place finder relies on.

    Distances are in miles. Implementations must be safe to call from
    several searches at once.
    """

    def __init__(self, config):
        """Initialize the provider with configuration.

        Args:
            config: Settings object containing provider configuration
        """
        self.config = config

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Unique identifier for this provider."""
        pass

    @abstractmethod
    def jurisdiction(self, key: str) -> Jurisdiction | None:
        """Look up a jurisdiction by key."""
        pass

    @abstractmethod
    def contains(
        self, jurisdiction_key: str, point: Location, kind: DistrictKind
    ) -> District | None:
        """Return the district of ``kind`` whose boundary contains ``point``."""
        pass

    @abstractmethod
    def nearest(
        self,
        jurisdiction_key: str,
        point: Location,
        kind: PlaceKind,
        max_distance: float,
    ) -> PlaceRecord | None:
        """Return the closest place of ``kind`` no more than ``max_distance`` away.

        The returned record carries its distance.
        """
        pass

    @abstractmethod
    def within(
        self,
        jurisdiction_key: str,
        point: Location,
        kind: PlaceKind,
        max_distance: float,
        order_by: Sequence[str] = ("distance",),
    ) -> list[PlaceRecord]:
        """Return places of ``kind`` strictly closer than ``max_distance``.

        Args:
            jurisdiction_key: Jurisdiction to search
            point: Search origin
            kind: Kind of place to return
            max_distance: Exclusive distance bound in miles
            order_by: Sort keys, each one of ORDER_KEYS, all ascending

        Returns:
            Records carrying their distance, in ``order_by`` order
        """
        pass

    @abstractmethod
    def election_day_place(self, jurisdiction_key: str, precinct_id: str) -> PlaceRecord | None:
        """Return the election day place assigned to a precinct."""
        pass

    @abstractmethod
    def schedule_entries(self, schedule_id: str) -> list[ScheduleEntry]:
        """Return the entries of a voting schedule ordered by opening time."""
        pass

    @abstractmethod
    def region(self, jurisdiction_key: str, kind: DistrictKind, district_id: str) -> str | None:
        """Return the GeoJSON boundary of a district, or None if unknown."""
        pass

    @abstractmethod
    def election_definitions(self) -> dict[str, str]:
        """Return election-wide name/value definitions (description, info)."""
        pass


def check_order_by(order_by: Sequence[str]) -> None:
    """Raise ValueError for sort keys a provider does not support."""
    unknown = [key for key in order_by if key not in ORDER_KEYS]
    if unknown:
        raise ValueError(
            f"Unknown order_by key(s): {', '.join(unknown)}. Valid keys: {', '.join(ORDER_KEYS)}"
        )
