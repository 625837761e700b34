"""Value types shared by the selector, the providers and the search result."""

import json
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional


class PlaceType(Enum):
    """Kind of voting place reported in a search result."""

    ELECTION_DAY = "ELECTION_DAY"
    EARLY_VOTING_FIXED = "EARLY_VOTING_FIXED"
    EARLY_VOTING_MOBILE = "EARLY_VOTING_MOBILE"


class PlaceKind(Enum):
    """Kind of voting place as stored in the voting_places table."""

    ELECTION_DAY = "ELECTION_DAY"
    EARLY_FIXED = "EARLY_FIXED"
    EARLY_MOBILE = "EARLY_MOBILE"


class DistrictKind(Enum):
    """Kinds of district resolved for a search origin."""

    COUNCIL = "council"
    PRECINCT = "precinct"


@dataclass(frozen=True)
class Location:
    """A point on the map, in degrees (WGS84)."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not (-90 <= self.latitude <= 90):
            msg = f"latitude must be between -90 and 90, got {self.latitude}"
            raise ValueError(msg)
        if not (-180 <= self.longitude <= 180):
            msg = f"longitude must be between -180 and 180, got {self.longitude}"
            raise ValueError(msg)


@dataclass(frozen=True)
class Jurisdiction:
    """An election authority and its calendar."""

    key: str
    name: str
    early_voting_end_date: date
    election_day_date: date
    sample_ballot_url: Optional[str] = None  # Template with a {precinct} placeholder

    def __post_init__(self) -> None:
        if self.early_voting_end_date > self.election_day_date:
            raise ValueError(
                f"early voting for {self.key} ends {self.early_voting_end_date}, "
                f"after election day {self.election_day_date}"
            )

    def sample_ballot_url_for(self, precinct_id: str) -> Optional[str]:
        """Return the sample ballot URL for a precinct, if the jurisdiction has one."""
        if not self.sample_ballot_url:
            return None
        # Other braces in the URL are left alone
        return self.sample_ballot_url.replace("{precinct}", precinct_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "name": self.name,
            "early_voting_ends": self.early_voting_end_date.isoformat(),
            "election_day": self.election_day_date.isoformat(),
        }


@dataclass(frozen=True)
class District:
    """A council district or precinct that contains a search origin."""

    id: str
    kind: DistrictKind
    name: Optional[str] = None
    region: Optional[str] = None  # GeoJSON text

    def to_dict(self, max_region: int) -> dict[str, Any]:
        """Serialize the district, withholding regions longer than ``max_region``.

        A withheld region is reported as ``True`` so the caller knows to fetch
        it separately by district id.
        """
        if self.region is None:
            region: Any = None
        elif len(self.region) > max_region:
            region = True
        else:
            region = json.loads(self.region)
        return {
            "id": self.id,
            "name": self.name,
            "region": region,
        }


@dataclass(frozen=True)
class PlaceLocation:
    """Street address and coordinates of a voting place."""

    name: str
    street: str
    city: str
    state: str
    zip: str
    latitude: float
    longitude: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "address": self.street,
            "city": self.city,
            "state": self.state,
            "zip": self.zip,
            "latitude": self.latitude,
            "longitude": self.longitude,
        }


@dataclass(frozen=True)
class PlaceRecord:
    """A stored voting place as returned by a geodata provider.

    ``opens`` and ``closes`` span all of the place's schedule entries. For an
    election day place that is its single entry; for a mobile place it is the
    whole period the site operates. ``distance`` (miles) is set only by
    queries that measured it.
    """

    id: str
    kind: PlaceKind
    location: Optional[PlaceLocation]
    precinct: Optional[str]
    schedule_id: str
    schedule_formatted: str
    opens: datetime
    closes: datetime
    notes: Optional[str] = None
    distance: Optional[float] = None


@dataclass(frozen=True)
class Place:
    """A voting place selected for a search result.

    ``type`` is fixed when the place is built and drives how callers
    present it.
    """

    id: str
    type: PlaceType
    title: str
    location: PlaceLocation
    is_open: bool
    info: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "title": self.title,
            "location": self.location.to_dict(),
            "is_open": self.is_open,
            "info": self.info,
        }
