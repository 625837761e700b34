"""In-memory geodata provider using Shapely geometries.

Loads jurisdictions, district boundaries, voting places and schedules from a
JSON fixture. Useful for demos, tests and small jurisdictions without a
PostGIS database.

Fixture layout::

    {
      "jurisdictions": [{"key", "name", "early_voting_ends", "election_day",
                         "sample_ballot_url"}],
      "districts": [{"jurisdiction", "kind", "id", "name", "geometry"}],
      "places": [{"id", "jurisdiction", "type", "precinct", "name", "street",
                  "city", "state", "zip", "latitude", "longitude",
                  "schedule_id", "notes"}],
      "schedules": {"<schedule_id>": {"formatted": "...",
                                      "entries": [{"opens", "closes"}]}},
      "election_definitions": {"ELECTION_DESCRIPTION": "..."}
    }

Dates and times are ISO 8601 strings; times with a UTC offset are converted
to naive local wall-clock time, matching search times. Geometries are GeoJSON.
"""

import json
import math
from dataclasses import replace
from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional, Sequence

from loguru import logger
from shapely.geometry import Point, mapping, shape

from vote_finder.config import Settings
from vote_finder.errors import ConfigurationError
from vote_finder.places import (
    District,
    DistrictKind,
    Jurisdiction,
    Location,
    PlaceKind,
    PlaceLocation,
    PlaceRecord,
)
from vote_finder.schedule import ScheduleEntry

from ..base import GeodataProvider, check_order_by
from ..registry import GeodataProviderRegistry

EARTH_RADIUS_MILES = 3958.8


def haversine_miles(a: Location, b: Location) -> float:
    """Compute great-circle distance in miles."""
    lat1, lon1 = math.radians(a.latitude), math.radians(a.longitude)
    lat2, lon2 = math.radians(b.latitude), math.radians(b.longitude)
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_MILES * math.asin(math.sqrt(h))


def _parse_time(value: str) -> datetime:
    """Parse an ISO 8601 time to naive local wall-clock time."""
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


@GeodataProviderRegistry.register
class MemoryGeodataProvider(GeodataProvider):
    """Answers geodata queries from data held in memory."""

    def __init__(self, config: Optional[Settings], data: Optional[dict[str, Any]] = None):
        """Initialize the provider.

        Args:
            config: Application settings; ``fixture_file`` is read when
                ``data`` is not given
            data: Fixture document already loaded

        Raises:
            ConfigurationError: If neither data nor a fixture file is available
        """
        super().__init__(config)
        if data is None:
            fixture = config.fixture_file if config is not None else None
            if not fixture:
                raise ConfigurationError("memory geodata provider requires a fixture_file")
            data = self._read_fixture(Path(fixture))
        self._load(data)

    @property
    def provider_name(self) -> str:
        """Unique identifier for this provider."""
        return "memory"

    @classmethod
    def from_fixture(cls, path: Path, config: Optional[Settings] = None) -> "MemoryGeodataProvider":
        """Build a provider from a JSON fixture file."""
        return cls(config, data=cls._read_fixture(path))

    @staticmethod
    def _read_fixture(path: Path) -> dict[str, Any]:
        if not path.exists():
            raise ConfigurationError(f"fixture file not found: {path}")
        logger.info("Loading geodata fixture: {}", path)
        with open(path) as f:
            return json.load(f)

    def _load(self, data: dict[str, Any]) -> None:
        self._jurisdictions: dict[str, Jurisdiction] = {}
        for item in data.get("jurisdictions", []):
            juris = Jurisdiction(
                key=item["key"],
                name=item["name"],
                early_voting_end_date=date.fromisoformat(item["early_voting_ends"]),
                election_day_date=date.fromisoformat(item["election_day"]),
                sample_ballot_url=item.get("sample_ballot_url"),
            )
            self._jurisdictions[juris.key] = juris

        # (jurisdiction, kind) -> [(district_id, name, shapely geometry)]
        self._districts: dict[tuple[str, str], list[tuple[str, Optional[str], Any]]] = {}
        for item in data.get("districts", []):
            key = (item["jurisdiction"], item["kind"])
            geom = shape(item["geometry"])
            self._districts.setdefault(key, []).append((str(item["id"]), item.get("name"), geom))

        self._schedules: dict[str, list[ScheduleEntry]] = {}
        self._schedule_text: dict[str, str] = {}
        for schedule_id, item in data.get("schedules", {}).items():
            entries = [
                ScheduleEntry(
                    opens=_parse_time(e["opens"]),
                    closes=_parse_time(e["closes"]),
                    schedule_id=schedule_id,
                )
                for e in item.get("entries", [])
            ]
            self._schedules[schedule_id] = sorted(entries, key=lambda e: e.opens)
            self._schedule_text[schedule_id] = item.get("formatted", "")

        self._places: list[tuple[str, PlaceRecord]] = []
        for item in data.get("places", []):
            record = self._to_record(item)
            if record is not None:
                self._places.append((item["jurisdiction"], record))

        self._definitions: dict[str, str] = dict(data.get("election_definitions", {}))

        logger.debug(
            "Memory geodata loaded: {} jurisdictions, {} district sets, {} places",
            len(self._jurisdictions),
            len(self._districts),
            len(self._places),
        )

    def _to_record(self, item: dict[str, Any]) -> PlaceRecord | None:
        schedule_id = str(item["schedule_id"])
        entries = self._schedules.get(schedule_id)
        if not entries:
            logger.warning("Voting place {} has no schedule entries, skipping", item["id"])
            return None

        location = None
        if item.get("latitude") is not None and item.get("longitude") is not None:
            location = PlaceLocation(
                name=item["name"],
                street=item["street"],
                city=item["city"],
                state=item["state"],
                zip=str(item["zip"]),
                latitude=float(item["latitude"]),
                longitude=float(item["longitude"]),
            )

        return PlaceRecord(
            id=str(item["id"]),
            kind=PlaceKind(item["type"]),
            location=location,
            precinct=item.get("precinct"),
            schedule_id=schedule_id,
            schedule_formatted=self._schedule_text.get(schedule_id, ""),
            opens=min(e.opens for e in entries),
            closes=max(e.closes for e in entries),
            notes=item.get("notes"),
        )

    def _measured(
        self, jurisdiction_key: str, point: Location, kind: PlaceKind
    ) -> list[PlaceRecord]:
        """Places of ``kind`` with a location, carrying their distance from ``point``."""
        measured = []
        for juris_key, record in self._places:
            if juris_key != jurisdiction_key or record.kind is not kind or record.location is None:
                continue
            where = Location(record.location.latitude, record.location.longitude)
            measured.append(replace(record, distance=haversine_miles(point, where)))
        return measured

    def jurisdiction(self, key: str) -> Jurisdiction | None:
        return self._jurisdictions.get(key)

    def contains(
        self, jurisdiction_key: str, point: Location, kind: DistrictKind
    ) -> District | None:
        target = Point(point.longitude, point.latitude)
        for district_id, name, geom in self._districts.get((jurisdiction_key, kind.value), []):
            if geom.contains(target):
                return District(
                    id=district_id,
                    kind=kind,
                    name=name,
                    region=json.dumps(mapping(geom)),
                )
        return None

    def nearest(
        self,
        jurisdiction_key: str,
        point: Location,
        kind: PlaceKind,
        max_distance: float,
    ) -> PlaceRecord | None:
        candidates = [
            r for r in self._measured(jurisdiction_key, point, kind) if r.distance <= max_distance
        ]
        if not candidates:
            return None
        return min(candidates, key=lambda r: r.distance)

    def within(
        self,
        jurisdiction_key: str,
        point: Location,
        kind: PlaceKind,
        max_distance: float,
        order_by: Sequence[str] = ("distance",),
    ) -> list[PlaceRecord]:
        check_order_by(order_by)
        candidates = [
            r for r in self._measured(jurisdiction_key, point, kind) if r.distance < max_distance
        ]
        return sorted(candidates, key=lambda r: tuple(getattr(r, key) for key in order_by))

    def election_day_place(self, jurisdiction_key: str, precinct_id: str) -> PlaceRecord | None:
        for juris_key, record in self._places:
            if (
                juris_key == jurisdiction_key
                and record.kind is PlaceKind.ELECTION_DAY
                and record.precinct == precinct_id
            ):
                return record
        return None

    def schedule_entries(self, schedule_id: str) -> list[ScheduleEntry]:
        return list(self._schedules.get(schedule_id, []))

    def region(self, jurisdiction_key: str, kind: DistrictKind, district_id: str) -> str | None:
        for did, _, geom in self._districts.get((jurisdiction_key, kind.value), []):
            if did == district_id:
                return json.dumps(mapping(geom))
        return None

    def election_definitions(self) -> dict[str, str]:
        return dict(self._definitions)
