"""Database migration utilities using Alembic."""

from pathlib import Path
from typing import Optional

from alembic import command as alembic_command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from loguru import logger
from sqlalchemy import create_engine

from vote_finder.config import Settings, get_settings


def get_alembic_config() -> Config:
    """
    Get Alembic configuration object.

    Returns:
        Configured Alembic Config object

    Raises:
        FileNotFoundError: If alembic.ini is not found
    """
    # alembic.ini lives in the project root, above src/
    project_root = Path(__file__).parent.parent.parent
    alembic_ini = project_root / "alembic.ini"

    if not alembic_ini.exists():
        raise FileNotFoundError(f"Alembic config not found: {alembic_ini}")

    logger.debug("Loading Alembic config from: {}", alembic_ini)
    config = Config(str(alembic_ini))

    alembic_dir = project_root / "alembic"
    config.set_main_option("script_location", str(alembic_dir))

    logger.debug("Alembic script location: {}", alembic_dir)
    return config


def upgrade_database(revision: str = "head") -> None:
    """
    Upgrade database to a specific revision.

    Args:
        revision: Target revision (default: "head" for latest)

    Raises:
        Exception: If upgrade fails
    """
    logger.info("Upgrading database to revision: {}", revision)
    config = get_alembic_config()

    try:
        alembic_command.upgrade(config, revision)
        logger.info("Database upgraded successfully to: {}", revision)
    except Exception as e:
        logger.error("Failed to upgrade database: {}", str(e))
        raise


def show_current_revision(settings: Optional[Settings] = None) -> Optional[str]:
    """
    Get the current database migration revision.

    Args:
        settings: Application settings (loaded from the environment if omitted)

    Returns:
        Current revision string or None if no migrations applied
    """
    logger.debug("Checking current database revision")
    settings = settings or get_settings()
    engine = create_engine(settings.database_url, echo=False)

    try:
        with engine.connect() as connection:
            context = MigrationContext.configure(connection)
            current_rev = context.get_current_revision()
            logger.debug("Current revision: {}", current_rev)
            return current_rev
    except Exception as e:
        logger.error("Failed to get current revision: {}", str(e))
        raise
    finally:
        engine.dispose()


def show_history() -> list[tuple[str, str]]:
    """
    Get list of all migrations with their descriptions.

    Returns:
        List of (revision, description) tuples, newest first
    """
    logger.debug("Retrieving migration history")
    config = get_alembic_config()

    try:
        script = ScriptDirectory.from_config(config)
        revisions = [
            (revision.revision, revision.doc or "(no description)")
            for revision in script.walk_revisions()
        ]
        logger.debug("Found {} migrations", len(revisions))
        return revisions
    except Exception as e:
        logger.error("Failed to get migration history: {}", str(e))
        raise
