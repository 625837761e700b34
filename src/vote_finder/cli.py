"""Command-line interface for Vote Finder using Typer."""

import json
from datetime import datetime
from pathlib import Path

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from vote_finder.config import get_settings
from vote_finder.database import get_engine, get_session, init_database
from vote_finder.errors import VoteFinderError
from vote_finder.logging import setup_logging
from vote_finder.places import DistrictKind, Location

app = typer.Typer(
    name="vote-finder",
    help="Vote Finder: locate polling places and early voting sites",
    add_completion=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging (DEBUG level)",
    ),
) -> None:
    """
    Vote Finder CLI - locate polling places and early voting sites.
    """
    settings = get_settings()
    if verbose:
        settings.log_level = "DEBUG"
    setup_logging(settings)

    logger.debug("Verbose mode enabled")


def _fail(prefix: str, error: Exception) -> None:
    logger.error("{}: {}", prefix, str(error))
    typer.secho(f"✗ {prefix}: {error}", fg=typer.colors.RED, bold=True)
    raise typer.Exit(code=1)


@app.command()
def init_db(
    drop: bool = typer.Option(
        False,
        "--drop",
        help="Drop existing tables before creating new ones",
    ),
) -> None:
    """Initialize the PostGIS database schema."""
    logger.info("init-db command called with drop={}", drop)

    settings = get_settings()

    if drop:
        typer.secho(
            "WARNING: This will drop all existing tables!",
            fg=typer.colors.RED,
            bold=True,
        )
        if not typer.confirm("Are you sure you want to continue?"):
            typer.secho("Operation cancelled", fg=typer.colors.YELLOW)
            raise typer.Abort()

    try:
        init_database(drop_tables=drop, settings=settings)
    except Exception as e:
        _fail("Database initialization failed", e)

    typer.secho("✓ Database initialized successfully", fg=typer.colors.GREEN, bold=True)


@app.command()
def db_status() -> None:
    """Show the current migration revision and migration history."""
    from vote_finder.migrations import show_current_revision, show_history

    settings = get_settings()
    try:
        current = show_current_revision(settings)
        history = show_history()
    except Exception as e:
        _fail("Could not read migration status", e)

    typer.echo(f"Current revision: {current or '(none)'}")
    for revision, doc in history:
        marker = "*" if revision == current else " "
        typer.echo(f" {marker} {revision}  {doc}")


@app.command()
def add_jurisdiction(
    key: str = typer.Argument(..., help="Jurisdiction key, e.g. TRAVIS"),
    name: str = typer.Argument(..., help="Display name, e.g. 'Travis County'"),
    early_voting_ends: datetime = typer.Option(
        ..., "--early-voting-ends", formats=["%Y-%m-%d"], help="Last day of early voting"
    ),
    election_day: datetime = typer.Option(
        ..., "--election-day", formats=["%Y-%m-%d"], help="Election day"
    ),
    sample_ballot_url: str | None = typer.Option(
        None,
        "--sample-ballot-url",
        help="Sample ballot URL template with a {precinct} placeholder",
    ),
) -> None:
    """Add or update an election jurisdiction."""
    from vote_finder.loader import add_jurisdiction as save_jurisdiction

    engine = get_engine(get_settings())
    session = get_session(engine)
    try:
        save_jurisdiction(
            session,
            key=key,
            name=name,
            early_voting_ends=early_voting_ends.date(),
            election_day=election_day.date(),
            sample_ballot_url=sample_ballot_url,
        )
    except Exception as e:
        session.rollback()
        _fail("Failed to save jurisdiction", e)
    finally:
        session.close()
        engine.dispose()

    typer.secho(f"✓ Saved jurisdiction {key}", fg=typer.colors.GREEN, bold=True)


@app.command()
def set_election_text(
    description: str | None = typer.Option(
        None, "--description", help="Election description shown with every place"
    ),
    info: str | None = typer.Option(
        None, "--info", help="Additional HTML shown at the end of every place"
    ),
) -> None:
    """Set the election description and info text."""
    from vote_finder.loader import set_election_definition

    engine = get_engine(get_settings())
    session = get_session(engine)
    try:
        if description is not None:
            set_election_definition(session, "ELECTION_DESCRIPTION", description)
        if info is not None:
            set_election_definition(session, "ELECTION_INFO", info)
    except Exception as e:
        session.rollback()
        _fail("Failed to save election text", e)
    finally:
        session.close()
        engine.dispose()

    typer.secho("✓ Election text saved", fg=typer.colors.GREEN, bold=True)


@app.command()
def load_districts(
    boundary_file: Path = typer.Argument(..., help="GeoJSON FeatureCollection of boundaries"),
    kind: str = typer.Option(..., "--kind", "-k", help="District kind: council or precinct"),
    jurisdiction: str | None = typer.Option(None, "--jurisdiction", "-j", help="Jurisdiction key"),
    id_property: str | None = typer.Option(
        None, "--id-property", help="Feature property holding the district ID"
    ),
    clear: bool = typer.Option(False, "--clear", help="Replace existing boundaries of this kind"),
) -> None:
    """Import council district or precinct boundaries."""
    from vote_finder.loader import import_district_boundaries

    settings = get_settings()
    jurisdiction = jurisdiction or settings.default_jurisdiction
    logger.info("load-districts called: file={}, kind={}, jurisdiction={}", boundary_file, kind, jurisdiction)

    engine = get_engine(settings)
    session = get_session(engine)
    try:
        stats = import_district_boundaries(
            session,
            file_path=boundary_file,
            jurisdiction_key=jurisdiction,
            district_kind=kind,
            clear_existing=clear,
            id_property=id_property,
        )
    except Exception as e:
        session.rollback()
        _fail("Failed to load boundaries", e)
    finally:
        session.close()
        engine.dispose()

    typer.secho(
        f"✓ Imported {stats['success']:,} of {stats['total']:,} {kind} boundaries",
        fg=typer.colors.GREEN,
        bold=True,
    )
    if stats["skipped"]:
        typer.secho(f"  {stats['skipped']:,} skipped", fg=typer.colors.YELLOW)


@app.command()
def load_places(
    places_csv: Path = typer.Argument(..., help="Voting places CSV"),
    schedule_csv: Path = typer.Argument(..., help="Voting schedule entries CSV"),
    jurisdiction: str | None = typer.Option(None, "--jurisdiction", "-j", help="Jurisdiction key"),
) -> None:
    """Load voting places and their schedules."""
    from vote_finder.loader import import_places, read_places_csv, read_schedule_csv

    settings = get_settings()
    jurisdiction = jurisdiction or settings.default_jurisdiction

    try:
        places_df = read_places_csv(str(places_csv))
        schedule_df = read_schedule_csv(str(schedule_csv))
    except (FileNotFoundError, ValueError) as e:
        _fail("CSV validation failed", e)

    engine = get_engine(settings)
    session = get_session(engine)
    try:
        stats = import_places(session, jurisdiction, places_df, schedule_df)
    except Exception as e:
        session.rollback()
        _fail("Failed to load voting places", e)
    finally:
        session.close()
        engine.dispose()

    typer.secho(
        f"✓ Loaded {stats['places']:,} voting places and {stats['schedules']:,} schedules",
        fg=typer.colors.GREEN,
        bold=True,
    )


def _print_result(result) -> None:
    console = Console()

    for district in result.districts.values():
        typer.echo(f"{district.kind.value.title()}: {district.id}")
    for key, value in result.additional.items():
        typer.echo(f"{key}: {value}")

    if result.places:
        table = Table(title="Voting Places", show_header=True, header_style="bold magenta")
        table.add_column("Type", style="cyan")
        table.add_column("Name")
        table.add_column("Address")
        table.add_column("Open", justify="center")
        for place in result.places:
            loc = place.location
            table.add_row(
                place.title,
                loc.name,
                f"{loc.street}, {loc.city}, {loc.state} {loc.zip}",
                "[green]yes[/green]" if place.is_open else "[red]no[/red]",
            )
        console.print(table)

    for text in result.warnings:
        typer.secho(f"! {text}", fg=typer.colors.YELLOW)
    for text in result.errors:
        typer.secho(f"✗ {text}", fg=typer.colors.RED, bold=True)


@app.command()
def search(
    latitude: float = typer.Argument(..., help="Latitude in degrees"),
    longitude: float = typer.Argument(..., help="Longitude in degrees"),
    jurisdiction: str | None = typer.Option(None, "--jurisdiction", "-j", help="Jurisdiction key"),
    time: str | None = typer.Option(None, "--time", "-t", help="Search as of this date/time"),
    max_distance: float | None = typer.Option(
        None, "--max-distance", help="Ignore early voting places further than this (miles)"
    ),
    max_places: int | None = typer.Option(
        None, "--max-places", help="Maximum number of early voting places"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
) -> None:
    """Find voting places for a location."""
    from vote_finder.finder import build_finder

    settings = get_settings()
    jurisdiction = jurisdiction or settings.default_jurisdiction
    logger.info("search called: ({}, {}) in {}", latitude, longitude, jurisdiction)

    options = {"time": time, "max_distance": max_distance, "max_places": max_places}
    try:
        finder = build_finder(settings)
        result = finder.search(Location(latitude, longitude), jurisdiction, options)
    except (VoteFinderError, ValueError) as e:
        _fail("Search failed", e)

    if as_json:
        typer.echo(json.dumps(result.to_dict(settings.search.max_region_on_search), indent=2))
    else:
        _print_result(result)


@app.command()
def region(
    kind: str = typer.Argument(..., help="District kind: council or precinct"),
    district_id: str = typer.Argument(..., help="District ID"),
    jurisdiction: str | None = typer.Option(None, "--jurisdiction", "-j", help="Jurisdiction key"),
) -> None:
    """Print the GeoJSON boundary of a district."""
    from vote_finder.finder import build_finder

    settings = get_settings()
    jurisdiction = jurisdiction or settings.default_jurisdiction

    try:
        district_kind = DistrictKind(kind)
        finder = build_finder(settings)
        geojson = finder.region(jurisdiction, district_kind, district_id)
    except (VoteFinderError, ValueError) as e:
        _fail("Region lookup failed", e)

    if geojson is None:
        typer.secho(f"✗ No {kind} {district_id} in {jurisdiction}", fg=typer.colors.RED, bold=True)
        raise typer.Exit(code=1)
    typer.echo(geojson)


if __name__ == "__main__":
    app()
