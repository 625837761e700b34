"""Loading jurisdictions, district boundaries and voting places into the database."""

import json
from collections import defaultdict
from datetime import date, datetime
from pathlib import Path
from typing import Optional

import pandas as pd
from geoalchemy2 import WKTElement
from loguru import logger
from shapely.geometry import shape
from sqlalchemy.orm import Session

from vote_finder.models import (
    DISTRICT_KINDS,
    PLACE_KINDS,
    DistrictBoundary,
    ElectionDefinition,
    JurisdictionRecord,
    VotingLocation,
    VotingPlace,
    VotingSchedule,
    VotingScheduleEntry,
)

# Column mapping from voting places CSV headers to record keys
PLACE_COLUMN_MAP = {
    "Place ID": "id",
    "Type": "place_type",
    "Precinct": "precinct",
    "Name": "name",
    "Street": "street",
    "City": "city",
    "State": "state",
    "Zip": "zip",
    "Latitude": "latitude",
    "Longitude": "longitude",
    "Schedule ID": "schedule_id",
    "Notes": "notes",
}

PLACE_REQUIRED_COLUMNS = [
    "Place ID",
    "Type",
    "Name",
    "Street",
    "City",
    "State",
    "Zip",
    "Schedule ID",
]

SCHEDULE_REQUIRED_COLUMNS = ["Schedule ID", "Opens", "Closes"]

# Property keys tried, in order, when a boundary file doesn't name its ID property
_ID_CANDIDATES = [
    "PCT",
    "PRECINCT",
    "P_VTD",
    "VTD",
    "DISTRICT",
    "DISTRICT_ID",
    "COUNCIL_DI",
    "id",
    "ID",
]
_NAME_CANDIDATES = ["NAME", "Name", "name", "LABEL", "Label"]


def _read_csv(file_path: str, required: list[str]) -> pd.DataFrame:
    path = Path(file_path)
    if not path.exists():
        logger.error("CSV file not found: {}", file_path)
        raise FileNotFoundError(f"CSV file not found: {file_path}")

    logger.info("Reading CSV file: {}", file_path)

    # Keep everything as strings so precinct numbers keep leading zeros
    df = pd.read_csv(file_path, dtype=str)
    logger.debug("CSV loaded with {} rows and {} columns", len(df), len(df.columns))

    missing_columns = [col for col in required if col not in df.columns]
    if missing_columns:
        logger.error("Missing required columns: {}", missing_columns)
        raise ValueError(
            f"Missing required columns: {', '.join(missing_columns)}. "
            f"Required: {', '.join(required)}"
        )
    return df


def read_places_csv(file_path: str) -> pd.DataFrame:
    """
    Read a voting places CSV file.

    Args:
        file_path: Path to the CSV file

    Returns:
        pandas DataFrame with original column names

    Raises:
        FileNotFoundError: If the CSV file doesn't exist
        ValueError: If required columns are missing or a place type is unknown
    """
    df = _read_csv(file_path, PLACE_REQUIRED_COLUMNS)

    bad_types = sorted(set(df["Type"].dropna()) - set(PLACE_KINDS))
    if bad_types:
        raise ValueError(
            f"Unknown place type(s): {', '.join(bad_types)}. Valid types: {', '.join(PLACE_KINDS)}"
        )
    return df


def read_schedule_csv(file_path: str) -> pd.DataFrame:
    """
    Read a voting schedule CSV file, one row per opening period.

    Args:
        file_path: Path to the CSV file

    Returns:
        DataFrame with "Opens" and "Closes" parsed to datetimes

    Raises:
        FileNotFoundError: If the CSV file doesn't exist
        ValueError: If required columns are missing or times don't parse
    """
    df = _read_csv(file_path, SCHEDULE_REQUIRED_COLUMNS)
    df["Opens"] = pd.to_datetime(df["Opens"])
    df["Closes"] = pd.to_datetime(df["Closes"])

    backwards = df[df["Closes"] < df["Opens"]]
    if not backwards.empty:
        raise ValueError(
            f"{len(backwards)} schedule entries close before they open "
            f"(schedules: {', '.join(sorted(set(backwards['Schedule ID'])))})"
        )
    return df


def places_to_records(df: pd.DataFrame) -> list[dict]:
    """
    Convert a voting places DataFrame to records with model field names.

    NaN values become None and coordinates become floats.
    """
    columns_to_keep = [col for col in df.columns if col in PLACE_COLUMN_MAP]
    records = df[columns_to_keep].rename(columns=PLACE_COLUMN_MAP).to_dict("records")

    for record in records:
        for key, value in record.items():
            if pd.isna(value):
                record[key] = None
        for key in ("latitude", "longitude"):
            if record.get(key) is not None:
                record[key] = float(record[key])

    logger.debug("Converted {} voting place rows", len(records))
    return records


def format_schedule(entries: list[tuple[datetime, datetime]]) -> str:
    """Format schedule entries for display, one line per entry.

    Example: ``Mon, Oct 21: 7:00am - 7:00pm``
    """

    def clock(moment: datetime) -> str:
        return moment.strftime("%I:%M%p").lstrip("0").lower()

    lines = []
    for opens, closes in sorted(entries):
        day = opens.strftime("%a, %b %d")
        if closes.date() == opens.date():
            lines.append(f"{day}: {clock(opens)} - {clock(closes)}")
        else:
            lines.append(f"{day} {clock(opens)} - {closes.strftime('%a, %b %d')} {clock(closes)}")
    return "\n".join(lines)


def add_jurisdiction(
    session: Session,
    key: str,
    name: str,
    early_voting_ends: date,
    election_day: date,
    sample_ballot_url: Optional[str] = None,
) -> JurisdictionRecord:
    """Create or update a jurisdiction.

    Raises:
        ValueError: If early voting ends after election day
    """
    if early_voting_ends > election_day:
        raise ValueError(
            f"Early voting end date {early_voting_ends} is after election day {election_day}"
        )

    record = session.merge(
        JurisdictionRecord(
            key=key,
            name=name,
            date_early_voting_ends=early_voting_ends,
            date_election_day=election_day,
            sample_ballot_url=sample_ballot_url,
        )
    )
    session.commit()
    logger.info("Saved jurisdiction {} ({})", key, name)
    return record


def set_election_definition(session: Session, name: str, value: Optional[str]) -> None:
    """Create or update an election-wide text definition."""
    session.merge(ElectionDefinition(name=name, value=value))
    session.commit()
    logger.info("Saved election definition {}", name)


def _require_jurisdiction(session: Session, jurisdiction_key: str) -> None:
    if session.get(JurisdictionRecord, jurisdiction_key) is None:
        raise ValueError(f"Unknown jurisdiction '{jurisdiction_key}'. Add it first.")


def _read_boundary_features(file_path: Path) -> list[dict]:
    """Read boundary features from a GeoJSON FeatureCollection.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is not a FeatureCollection or has no features
    """
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    with open(file_path) as f:
        geojson_data = json.load(f)

    if geojson_data.get("type") != "FeatureCollection":
        raise ValueError(
            f"Invalid GeoJSON: expected FeatureCollection, got {geojson_data.get('type')}"
        )
    features = geojson_data.get("features", [])
    if not features:
        raise ValueError("No features found in GeoJSON file")

    logger.info(f"Read {len(features)} features from GeoJSON")
    return features


def import_district_boundaries(
    session: Session,
    file_path: Path,
    jurisdiction_key: str,
    district_kind: str,
    clear_existing: bool = False,
    id_property: str | None = None,
    name_property: str | None = None,
) -> dict[str, int]:
    """Import council district or precinct boundaries from GeoJSON.

    Args:
        session: Database session
        file_path: Path to a GeoJSON FeatureCollection in EPSG:4326
        jurisdiction_key: Jurisdiction the boundaries belong to
        district_kind: "council" or "precinct"
        clear_existing: Delete existing boundaries of this kind first
        id_property: Property key for the district ID (auto-detected if omitted)
        name_property: Property key for the district name (auto-detected if omitted)

    Returns:
        Dictionary with statistics: total, success, skipped
    """
    if district_kind not in DISTRICT_KINDS:
        raise ValueError(
            f"Unknown district kind '{district_kind}'. "
            f"Valid kinds: {', '.join(DISTRICT_KINDS)}"
        )

    features = _read_boundary_features(file_path)
    _require_jurisdiction(session, jurisdiction_key)

    logger.info(f"Importing {district_kind} boundaries for {jurisdiction_key} from {file_path}")

    if clear_existing:
        deleted = (
            session.query(DistrictBoundary)
            .filter(
                DistrictBoundary.jurisdiction_key == jurisdiction_key,
                DistrictBoundary.district_kind == district_kind,
            )
            .delete()
        )
        logger.info(f"Cleared {deleted} existing {district_kind} boundaries")

    existing_ids = {
        row[0]
        for row in session.query(DistrictBoundary.district_id)
        .filter(
            DistrictBoundary.jurisdiction_key == jurisdiction_key,
            DistrictBoundary.district_kind == district_kind,
        )
        .all()
    }

    stats: dict[str, int] = {"total": len(features), "success": 0, "skipped": 0}

    for idx, feature in enumerate(features, 1):
        props = feature.get("properties") or {}
        geometry = feature.get("geometry")

        if not geometry:
            logger.warning(f"Feature {idx}: Missing geometry, skipping")
            stats["skipped"] += 1
            continue

        candidates = [id_property] if id_property else _ID_CANDIDATES
        did = next((props[c] for c in candidates if props.get(c) is not None), None)
        if did is None:
            logger.warning(f"Feature {idx}: Could not find district ID property, skipping")
            stats["skipped"] += 1
            continue
        did = str(did).strip()

        if did in existing_ids:
            logger.debug(f"District {district_kind}/{did} already exists, skipping")
            stats["skipped"] += 1
            continue

        name_candidates = [name_property] if name_property else _NAME_CANDIDATES
        dname = next((props[c] for c in name_candidates if props.get(c) is not None), None)

        session.add(
            DistrictBoundary(
                jurisdiction_key=jurisdiction_key,
                district_kind=district_kind,
                district_id=did,
                name=str(dname) if dname is not None else None,
                geom=WKTElement(shape(geometry).wkt, srid=4326),
            )
        )
        existing_ids.add(did)
        stats["success"] += 1

    session.commit()
    logger.info(
        f"Imported {stats['success']} {district_kind} boundaries "
        f"({stats['skipped']} skipped of {stats['total']})"
    )
    return stats


def _get_or_create_location(session: Session, record: dict) -> VotingLocation:
    location = (
        session.query(VotingLocation)
        .filter(
            VotingLocation.name == record["name"],
            VotingLocation.street == record["street"],
            VotingLocation.city == record["city"],
        )
        .first()
    )
    if location is None:
        location = VotingLocation(
            name=record["name"],
            street=record["street"],
            city=record["city"],
        )
        session.add(location)

    location.state = record["state"]
    location.zip = record["zip"]
    if record.get("latitude") is not None and record.get("longitude") is not None:
        location.geom = WKTElement(f"POINT({record['longitude']} {record['latitude']})", srid=4326)
    else:
        logger.warning("Voting location '{}' has no coordinates", record["name"])
    return location


def import_places(
    session: Session,
    jurisdiction_key: str,
    places_df: pd.DataFrame,
    schedule_df: pd.DataFrame,
) -> dict[str, int]:
    """Load voting places and their schedules.

    Schedules named in ``schedule_df`` have their entries replaced. Places
    are upserted by id.

    Args:
        session: Database session
        jurisdiction_key: Jurisdiction the places belong to
        places_df: DataFrame from read_places_csv()
        schedule_df: DataFrame from read_schedule_csv()

    Returns:
        Dictionary with statistics: schedules, entries, places

    Raises:
        ValueError: If the jurisdiction is unknown or a place references a
            schedule with no entries
    """
    _require_jurisdiction(session, jurisdiction_key)

    entries_by_schedule: dict[str, list[tuple[datetime, datetime]]] = defaultdict(list)
    for schedule_id, opens, closes in zip(
        schedule_df["Schedule ID"], schedule_df["Opens"], schedule_df["Closes"]
    ):
        entries_by_schedule[str(schedule_id)].append((opens.to_pydatetime(), closes.to_pydatetime()))

    records = places_to_records(places_df)
    missing = sorted({r["schedule_id"] for r in records} - set(entries_by_schedule))
    if missing:
        raise ValueError(f"Voting places reference schedules with no entries: {', '.join(missing)}")

    stats = {"schedules": 0, "entries": 0, "places": 0}

    for schedule_id, entries in entries_by_schedule.items():
        session.merge(VotingSchedule(id=schedule_id, formatted=format_schedule(entries)))
        session.query(VotingScheduleEntry).filter(
            VotingScheduleEntry.schedule_id == schedule_id
        ).delete()
        for opens, closes in entries:
            session.add(VotingScheduleEntry(schedule_id=schedule_id, opens=opens, closes=closes))
            stats["entries"] += 1
        stats["schedules"] += 1

    for record in records:
        location = _get_or_create_location(session, record)
        session.flush()
        session.merge(
            VotingPlace(
                id=record["id"],
                jurisdiction_key=jurisdiction_key,
                place_type=record["place_type"],
                precinct=record.get("precinct"),
                location_id=location.id,
                schedule_id=record["schedule_id"],
                notes=record.get("notes"),
            )
        )
        stats["places"] += 1

    session.commit()
    logger.info(
        "Loaded {} places, {} schedules ({} entries) for {}",
        stats["places"],
        stats["schedules"],
        stats["entries"],
        jurisdiction_key,
    )
    return stats
