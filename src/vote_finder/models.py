"""SQLAlchemy models for Vote Finder application."""

from geoalchemy2 import Geometry
from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()

# Stored voting place kinds (see vote_finder.places.PlaceKind)
PLACE_KINDS = ("ELECTION_DAY", "EARLY_FIXED", "EARLY_MOBILE")

# District kinds (see vote_finder.places.DistrictKind)
DISTRICT_KINDS = ("council", "precinct")


class JurisdictionRecord(Base):
    """An election jurisdiction and its calendar."""

    __tablename__ = "jurisdictions"

    key = Column(String(50), primary_key=True)
    name = Column(String(200), nullable=False)
    date_early_voting_ends = Column(Date, nullable=False)
    date_election_day = Column(Date, nullable=False)
    sample_ballot_url = Column(String(500), nullable=True)  # "{precinct}" placeholder

    def __repr__(self) -> str:
        """String representation of JurisdictionRecord model."""
        return f"<JurisdictionRecord(key='{self.key}', name='{self.name}')>"


class DistrictBoundary(Base):
    """Council district and precinct boundary polygons.

    Boundaries are imported from GeoJSON and used to resolve which precinct
    (and council district) contains a search origin.
    """

    __tablename__ = "district_boundaries"

    id = Column(Integer, primary_key=True)
    jurisdiction_key = Column(String(50), ForeignKey("jurisdictions.key"), nullable=False)
    district_kind = Column(String(20), nullable=False)  # council, precinct
    district_id = Column(String(50), nullable=False)
    name = Column(String(200), nullable=True)

    # POLYGON or MULTIPOLYGON depending on source data
    geom = Column(Geometry("GEOMETRY", srid=4326, spatial_index=False), nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "jurisdiction_key", "district_kind", "district_id", name="uq_district_boundary"
        ),
        Index("idx_district_boundary_kind", "jurisdiction_key", "district_kind"),
        Index("idx_district_boundary_geom", "geom", postgresql_using="gist"),
    )

    def __repr__(self) -> str:
        """String representation of DistrictBoundary model."""
        return (
            f"<DistrictBoundary(jurisdiction='{self.jurisdiction_key}', "
            f"kind='{self.district_kind}', district_id='{self.district_id}')>"
        )


class VotingLocation(Base):
    """A building or site where voting takes place."""

    __tablename__ = "voting_locations"

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False)
    street = Column(String(200), nullable=False)
    city = Column(String(100), nullable=False)
    state = Column(String(2), nullable=False)
    zip = Column(String(10), nullable=False)

    # Nullable: a location that failed geocoding cannot be offered to voters
    geom = Column(Geometry("POINT", srid=4326, spatial_index=False), nullable=True)

    __table_args__ = (
        UniqueConstraint("name", "street", "city", name="uq_voting_location"),
        Index("idx_voting_location_geom", "geom", postgresql_using="gist"),
    )

    def __repr__(self) -> str:
        """String representation of VotingLocation model."""
        return f"<VotingLocation(name='{self.name}', street='{self.street}')>"


class VotingSchedule(Base):
    """A voting schedule shared by one or more voting places."""

    __tablename__ = "voting_schedules"

    id = Column(String(50), primary_key=True)
    formatted = Column(Text, nullable=False)  # One line per day, shown to voters

    entries = relationship(
        "VotingScheduleEntry",
        back_populates="schedule",
        order_by="VotingScheduleEntry.opens",
    )

    def __repr__(self) -> str:
        """String representation of VotingSchedule model."""
        return f"<VotingSchedule(id='{self.id}')>"


class VotingScheduleEntry(Base):
    """One opening period of a voting schedule, closed at ``closes``."""

    __tablename__ = "voting_schedule_entries"

    id = Column(Integer, primary_key=True)
    schedule_id = Column(String(50), ForeignKey("voting_schedules.id"), nullable=False)
    opens = Column(DateTime, nullable=False)
    closes = Column(DateTime, nullable=False)

    schedule = relationship("VotingSchedule", back_populates="entries")

    __table_args__ = (Index("idx_schedule_entry_schedule", "schedule_id", "opens"),)

    def __repr__(self) -> str:
        """String representation of VotingScheduleEntry model."""
        return (
            f"<VotingScheduleEntry(schedule_id='{self.schedule_id}', "
            f"opens='{self.opens}', closes='{self.closes}')>"
        )


class VotingPlace(Base):
    """A voting place: a location operating on a schedule for one purpose."""

    __tablename__ = "voting_places"

    id = Column(String(50), primary_key=True)
    jurisdiction_key = Column(String(50), ForeignKey("jurisdictions.key"), nullable=False)
    place_type = Column(String(20), nullable=False)  # ELECTION_DAY, EARLY_FIXED, EARLY_MOBILE
    precinct = Column(String(50), nullable=True)  # Election day places only
    location_id = Column(Integer, ForeignKey("voting_locations.id"), nullable=False)
    schedule_id = Column(String(50), ForeignKey("voting_schedules.id"), nullable=False)
    notes = Column(Text, nullable=True)

    location = relationship("VotingLocation")
    schedule = relationship("VotingSchedule")

    __table_args__ = (
        Index("idx_voting_place_type", "jurisdiction_key", "place_type"),
        Index("idx_voting_place_precinct", "jurisdiction_key", "precinct"),
    )

    def __repr__(self) -> str:
        """String representation of VotingPlace model."""
        return f"<VotingPlace(id='{self.id}', place_type='{self.place_type}')>"


class ElectionDefinition(Base):
    """Election-wide name/value text (ELECTION_DESCRIPTION, ELECTION_INFO)."""

    __tablename__ = "election_definitions"

    name = Column(String(100), primary_key=True)
    value = Column(Text, nullable=True)

    def __repr__(self) -> str:
        """String representation of ElectionDefinition model."""
        return f"<ElectionDefinition(name='{self.name}')>"
