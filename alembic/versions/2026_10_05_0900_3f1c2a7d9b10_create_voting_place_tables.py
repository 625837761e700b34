"""Create jurisdiction, district boundary and voting place tables

Revision ID: 3f1c2a7d9b10
Revises:
Create Date: 2026-10-05 09:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import geoalchemy2
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3f1c2a7d9b10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create voting place schema."""
    op.create_table(
        "jurisdictions",
        sa.Column("key", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("date_early_voting_ends", sa.Date(), nullable=False),
        sa.Column("date_election_day", sa.Date(), nullable=False),
        sa.Column("sample_ballot_url", sa.String(length=500), nullable=True),
        sa.PrimaryKeyConstraint("key"),
    )

    op.create_table(
        "district_boundaries",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("jurisdiction_key", sa.String(length=50), nullable=False),
        sa.Column("district_kind", sa.String(length=20), nullable=False),
        sa.Column("district_id", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=True),
        sa.Column(
            "geom",
            geoalchemy2.types.Geometry(
                geometry_type="GEOMETRY",
                srid=4326,
                from_text="ST_GeomFromEWKT",
                name="geometry",
            ),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["jurisdiction_key"], ["jurisdictions.key"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "jurisdiction_key", "district_kind", "district_id", name="uq_district_boundary"
        ),
    )
    op.create_index(
        "idx_district_boundary_kind",
        "district_boundaries",
        ["jurisdiction_key", "district_kind"],
        unique=False,
    )
    op.create_index(
        "idx_district_boundary_geom",
        "district_boundaries",
        ["geom"],
        unique=False,
        postgresql_using="gist",
    )

    op.create_table(
        "voting_locations",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("street", sa.String(length=200), nullable=False),
        sa.Column("city", sa.String(length=100), nullable=False),
        sa.Column("state", sa.String(length=2), nullable=False),
        sa.Column("zip", sa.String(length=10), nullable=False),
        sa.Column(
            "geom",
            geoalchemy2.types.Geometry(
                geometry_type="POINT",
                srid=4326,
                from_text="ST_GeomFromEWKT",
                name="geometry",
            ),
            nullable=True,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name", "street", "city", name="uq_voting_location"),
    )
    op.create_index(
        "idx_voting_location_geom",
        "voting_locations",
        ["geom"],
        unique=False,
        postgresql_using="gist",
    )

    op.create_table(
        "voting_schedules",
        sa.Column("id", sa.String(length=50), nullable=False),
        sa.Column("formatted", sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "voting_schedule_entries",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("schedule_id", sa.String(length=50), nullable=False),
        sa.Column("opens", sa.DateTime(), nullable=False),
        sa.Column("closes", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["schedule_id"], ["voting_schedules.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_schedule_entry_schedule",
        "voting_schedule_entries",
        ["schedule_id", "opens"],
        unique=False,
    )

    op.create_table(
        "voting_places",
        sa.Column("id", sa.String(length=50), nullable=False),
        sa.Column("jurisdiction_key", sa.String(length=50), nullable=False),
        sa.Column("place_type", sa.String(length=20), nullable=False),
        sa.Column("precinct", sa.String(length=50), nullable=True),
        sa.Column("location_id", sa.Integer(), nullable=False),
        sa.Column("schedule_id", sa.String(length=50), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["jurisdiction_key"], ["jurisdictions.key"]),
        sa.ForeignKeyConstraint(["location_id"], ["voting_locations.id"]),
        sa.ForeignKeyConstraint(["schedule_id"], ["voting_schedules.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_voting_place_type",
        "voting_places",
        ["jurisdiction_key", "place_type"],
        unique=False,
    )
    op.create_index(
        "idx_voting_place_precinct",
        "voting_places",
        ["jurisdiction_key", "precinct"],
        unique=False,
    )

    op.create_table(
        "election_definitions",
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("value", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("name"),
    )


def downgrade() -> None:
    """Drop voting place schema."""
    op.drop_table("election_definitions")

    op.drop_index("idx_voting_place_precinct", table_name="voting_places")
    op.drop_index("idx_voting_place_type", table_name="voting_places")
    op.drop_table("voting_places")

    op.drop_index("idx_schedule_entry_schedule", table_name="voting_schedule_entries")
    op.drop_table("voting_schedule_entries")
    op.drop_table("voting_schedules")

    op.drop_index("idx_voting_location_geom", table_name="voting_locations")
    op.drop_table("voting_locations")

    op.drop_index("idx_district_boundary_geom", table_name="district_boundaries")
    op.drop_index("idx_district_boundary_kind", table_name="district_boundaries")
    op.drop_table("district_boundaries")

    op.drop_table("jurisdictions")
