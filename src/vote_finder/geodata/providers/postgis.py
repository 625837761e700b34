"""PostGIS geodata provider backed by the Vote Finder database."""

from contextlib import contextmanager
from typing import Any, Iterator, Sequence

from geoalchemy2 import Geography
from loguru import logger
from sqlalchemy import cast, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vote_finder.config import Settings
from vote_finder.database import get_engine, get_session
from vote_finder.errors import GeodataProviderError
from vote_finder.models import (
    DistrictBoundary,
    ElectionDefinition,
    JurisdictionRecord,
    VotingLocation,
    VotingPlace,
    VotingSchedule,
    VotingScheduleEntry,
)
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

SRID_LATLNG = 4326
METERS_PER_MILE = 1609.344


def _make_point(point: Location):
    """Origin as a PostGIS geometry in SRID 4326 (note lng, lat order)."""
    return func.ST_SetSRID(func.ST_MakePoint(point.longitude, point.latitude), SRID_LATLNG)


def _distance_miles(point: Location):
    """Great-circle distance in miles from a voting location to ``point``."""
    return (
        func.ST_Distance(
            cast(VotingLocation.geom, Geography(srid=SRID_LATLNG)),
            cast(_make_point(point), Geography(srid=SRID_LATLNG)),
        )
        / METERS_PER_MILE
    )


def _schedule_span():
    """Subquery with the first opening and last closing of each schedule."""
    return (
        select(
            VotingScheduleEntry.schedule_id.label("schedule_id"),
            func.min(VotingScheduleEntry.opens).label("opens"),
            func.max(VotingScheduleEntry.closes).label("closes"),
        )
        .group_by(VotingScheduleEntry.schedule_id)
        .subquery()
    )


def _place_query(jurisdiction_key: str, kind: PlaceKind, distance: Any = None):
    """Build the select used by every voting place lookup.

    Args:
        jurisdiction_key: Jurisdiction the places belong to
        kind: Stored place kind to select
        distance: Optional distance expression, returned as ``distance``

    Returns:
        A tuple of (select statement, schedule span subquery)
    """
    span = _schedule_span()
    columns = [
        VotingPlace.id,
        VotingPlace.place_type,
        VotingPlace.precinct,
        VotingPlace.schedule_id,
        VotingPlace.notes,
        VotingLocation.name,
        VotingLocation.street,
        VotingLocation.city,
        VotingLocation.state,
        VotingLocation.zip,
        func.ST_Y(VotingLocation.geom).label("latitude"),
        func.ST_X(VotingLocation.geom).label("longitude"),
        VotingSchedule.formatted.label("schedule_formatted"),
        span.c.opens,
        span.c.closes,
    ]
    if distance is not None:
        columns.append(distance.label("distance"))

    stmt = (
        select(*columns)
        .join(VotingLocation, VotingLocation.id == VotingPlace.location_id)
        .join(VotingSchedule, VotingSchedule.id == VotingPlace.schedule_id)
        .join(span, span.c.schedule_id == VotingPlace.schedule_id)
        .where(
            VotingPlace.jurisdiction_key == jurisdiction_key,
            VotingPlace.place_type == kind.value,
        )
    )
    return stmt, span


def row_to_place_record(row: Any) -> PlaceRecord:
    """Convert a row from ``_place_query`` to a PlaceRecord."""
    location = None
    if row.latitude is not None and row.longitude is not None:
        location = PlaceLocation(
            name=row.name,
            street=row.street,
            city=row.city,
            state=row.state,
            zip=row.zip,
            latitude=float(row.latitude),
            longitude=float(row.longitude),
        )

    distance = getattr(row, "distance", None)
    return PlaceRecord(
        id=str(row.id),
        kind=PlaceKind(row.place_type),
        location=location,
        precinct=row.precinct,
        schedule_id=str(row.schedule_id),
        schedule_formatted=row.schedule_formatted or "",
        opens=row.opens,
        closes=row.closes,
        notes=row.notes,
        distance=float(distance) if distance is not None else None,
    )


@GeodataProviderRegistry.register
class PostGISGeodataProvider(GeodataProvider):
    """Answers geodata queries with PostGIS spatial SQL."""

    def __init__(self, config: Settings, engine: Engine | None = None):
        """Initialize the provider.

        Args:
            config: Application settings containing the database URL
            engine: Existing engine to use instead of creating one
        """
        super().__init__(config)
        self.engine = engine if engine is not None else get_engine(config)

    @property
    def provider_name(self) -> str:
        """Unique identifier for this provider."""
        return "postgis"

    @contextmanager
    def _session(self) -> Iterator[Session]:
        """Yield a short-lived session, wrapping database errors."""
        session = get_session(self.engine)
        try:
            yield session
        except SQLAlchemyError as e:
            logger.error("PostGIS query failed: {}", str(e))
            raise GeodataProviderError(self.provider_name, str(e)) from e
        finally:
            session.close()

    def jurisdiction(self, key: str) -> Jurisdiction | None:
        with self._session() as session:
            record = session.get(JurisdictionRecord, key)
            if record is None:
                return None
            return Jurisdiction(
                key=record.key,
                name=record.name,
                early_voting_end_date=record.date_early_voting_ends,
                election_day_date=record.date_election_day,
                sample_ballot_url=record.sample_ballot_url,
            )

    def contains(
        self, jurisdiction_key: str, point: Location, kind: DistrictKind
    ) -> District | None:
        stmt = (
            select(
                DistrictBoundary.district_id,
                DistrictBoundary.name,
                func.ST_AsGeoJSON(DistrictBoundary.geom).label("region"),
            )
            .where(
                DistrictBoundary.jurisdiction_key == jurisdiction_key,
                DistrictBoundary.district_kind == kind.value,
                func.ST_Contains(DistrictBoundary.geom, _make_point(point)),
            )
            .limit(1)
        )
        with self._session() as session:
            row = session.execute(stmt).first()

        if row is None:
            logger.debug("No {} contains ({}, {})", kind.value, point.latitude, point.longitude)
            return None
        return District(id=row.district_id, kind=kind, name=row.name, region=row.region)

    def nearest(
        self,
        jurisdiction_key: str,
        point: Location,
        kind: PlaceKind,
        max_distance: float,
    ) -> PlaceRecord | None:
        distance = _distance_miles(point)
        stmt, _ = _place_query(jurisdiction_key, kind, distance)
        stmt = stmt.where(distance <= max_distance).order_by(distance.asc()).limit(1)

        with self._session() as session:
            row = session.execute(stmt).first()
        return row_to_place_record(row) if row is not None else None

    def within(
        self,
        jurisdiction_key: str,
        point: Location,
        kind: PlaceKind,
        max_distance: float,
        order_by: Sequence[str] = ("distance",),
    ) -> list[PlaceRecord]:
        check_order_by(order_by)
        distance = _distance_miles(point)
        stmt, span = _place_query(jurisdiction_key, kind, distance)
        sort_columns = {"opens": span.c.opens, "distance": distance}
        stmt = stmt.where(distance < max_distance).order_by(
            *(sort_columns[key].asc() for key in order_by)
        )

        with self._session() as session:
            rows = session.execute(stmt).all()
        logger.debug("{} {} places within {} miles", len(rows), kind.value, max_distance)
        return [row_to_place_record(row) for row in rows]

    def election_day_place(self, jurisdiction_key: str, precinct_id: str) -> PlaceRecord | None:
        stmt, _ = _place_query(jurisdiction_key, PlaceKind.ELECTION_DAY)
        stmt = stmt.where(VotingPlace.precinct == precinct_id).limit(1)

        with self._session() as session:
            row = session.execute(stmt).first()
        return row_to_place_record(row) if row is not None else None

    def schedule_entries(self, schedule_id: str) -> list[ScheduleEntry]:
        stmt = (
            select(VotingScheduleEntry.opens, VotingScheduleEntry.closes)
            .where(VotingScheduleEntry.schedule_id == schedule_id)
            .order_by(VotingScheduleEntry.opens)
        )
        with self._session() as session:
            rows = session.execute(stmt).all()
        return [ScheduleEntry(opens=row.opens, closes=row.closes, schedule_id=schedule_id) for row in rows]

    def region(self, jurisdiction_key: str, kind: DistrictKind, district_id: str) -> str | None:
        stmt = select(func.ST_AsGeoJSON(DistrictBoundary.geom)).where(
            DistrictBoundary.jurisdiction_key == jurisdiction_key,
            DistrictBoundary.district_kind == kind.value,
            DistrictBoundary.district_id == district_id,
        )
        with self._session() as session:
            return session.execute(stmt).scalar_one_or_none()

    def election_definitions(self) -> dict[str, str]:
        with self._session() as session:
            rows = session.execute(select(ElectionDefinition.name, ElectionDefinition.value)).all()
        return {row.name: row.value for row in rows if row.value is not None}
