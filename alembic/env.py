"""Alembic environment configuration for Vote Finder."""

from logging.config import fileConfig
from sqlalchemy import engine_from_config, pool
from alembic import context

from vote_finder.config import get_settings
from vote_finder.models import Base

# Alembic Config object
config = context.config

# Set up Python logging
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

# Database URL comes from Vote Finder settings, not alembic.ini
settings = get_settings()
config.set_main_option("sqlalchemy.url", settings.database_url)


def include_object(_object, name, type_, _reflected, _compare_to):
    """Only include tables defined in the Vote Finder models.

    PostGIS installs its own tables (spatial_ref_sys, topology) which
    autogenerate must not try to drop.
    """
    ignore_tables = {"spatial_ref_sys", "alembic_version"}
    ignore_schemas = {"topology", "tiger"}

    if type_ == "table":
        if name in ignore_tables:
            return False
        if getattr(_object, "schema", None) in ignore_schemas:
            return False

    return True


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        include_schemas=False,
        include_object=include_object,
        compare_type=True,
        compare_server_default=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            include_schemas=False,
            include_object=include_object,
            compare_type=True,
            compare_server_default=True,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
