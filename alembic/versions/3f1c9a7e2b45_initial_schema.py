"""initial_schema

Revision ID: 3f1c9a7e2b45
Revises:
Create Date: 2026-10-18 00:00:00.000000

Creates the fields, sensor_readings, crop_parameters and gdd_records tables
with their PostgreSQL enum types.  Requires the uuid-ossp extension, which
is enabled here if missing.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3f1c9a7e2b45"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

# ── Enum type names (PostgreSQL CREATE TYPE) ────────────────────────────────
ENUM_SOIL_TEXTURE = postgresql.ENUM(
    "SANDY",
    "SANDY_LOAM",
    "LOAM",
    "CLAY_LOAM",
    "CLAY",
    name="soil_texture",
    create_type=False,
)
ENUM_GROWTH_STAGE = postgresql.ENUM(
    "INITIAL",
    "DEVELOPMENT",
    "MID_SEASON",
    "LATE_SEASON",
    "HARVEST_READY",
    name="growth_stage",
    create_type=False,
)
ENUM_SEASON = postgresql.ENUM(
    "KHARIF", "RABI", "ZAID", "PERENNIAL", name="season", create_type=False
)


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def _uuid_pk() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        server_default=sa.text("uuid_generate_v4()"),
        nullable=False,
    )


def upgrade() -> None:
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    # ── 1. Create enum types ────────────────────────────────────────────
    ENUM_SOIL_TEXTURE.create(op.get_bind(), checkfirst=True)
    ENUM_GROWTH_STAGE.create(op.get_bind(), checkfirst=True)
    ENUM_SEASON.create(op.get_bind(), checkfirst=True)

    # ── 2. Fields ───────────────────────────────────────────────────────
    op.create_table(
        "fields",
        _uuid_pk(),
        sa.Column("node_id", sa.Integer(), nullable=False),
        sa.Column("field_name", sa.String(255), nullable=False),
        sa.Column("soil_texture", ENUM_SOIL_TEXTURE, nullable=False),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("crop_type", sa.String(100), nullable=True),
        sa.Column(
            "crop_confirmed",
            sa.Boolean(),
            server_default=sa.false(),
            nullable=False,
        ),
        sa.Column("sowing_date", sa.Date(), nullable=True),
        sa.Column("base_temperature", sa.Float(), nullable=True),
        sa.Column("growth_stage", ENUM_GROWTH_STAGE, nullable=True),
        sa.Column(
            "accumulated_gdd",
            sa.Float(),
            server_default=sa.text("0"),
            nullable=False,
        ),
        sa.Column("last_gdd_update", sa.Date(), nullable=True),
        *_audit_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("node_id"),
    )

    # ── 3. Sensor readings (time series) ────────────────────────────────
    op.create_table(
        "sensor_readings",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("node_id", sa.Integer(), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("raw_moisture", sa.Integer(), nullable=False),
        sa.Column("raw_temperature", sa.Integer(), nullable=False),
        sa.Column("soil_moisture_vwc", sa.Float(), nullable=True),
        sa.Column("soil_temperature_c", sa.Float(), nullable=True),
        sa.Column(
            "ingested_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(
            ["node_id"], ["fields.node_id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_sensor_readings_node_ts",
        "sensor_readings",
        ["node_id", "timestamp"],
    )

    # ── 4. Crop catalog ─────────────────────────────────────────────────
    op.create_table(
        "crop_parameters",
        _uuid_pk(),
        sa.Column("crop_name", sa.String(100), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("base_temperature", sa.Float(), nullable=False),
        sa.Column("total_gdd", sa.Float(), nullable=False),
        sa.Column("vwc_min", sa.Float(), nullable=False),
        sa.Column("vwc_optimal", sa.Float(), nullable=False),
        sa.Column("vwc_max", sa.Float(), nullable=False),
        sa.Column("root_depth_cm", sa.Float(), nullable=False),
        sa.Column("mad", sa.Float(), nullable=False),
        sa.Column("initial_stage_end", sa.Float(), nullable=False),
        sa.Column("development_stage_end", sa.Float(), nullable=False),
        sa.Column("mid_season_end", sa.Float(), nullable=False),
        sa.Column("late_season_end", sa.Float(), nullable=False),
        sa.Column("kc_initial", sa.Float(), nullable=False),
        sa.Column("kc_mid", sa.Float(), nullable=False),
        sa.Column("kc_end", sa.Float(), nullable=False),
        sa.Column(
            "preferred_soils",
            postgresql.ARRAY(ENUM_SOIL_TEXTURE),
            nullable=False,
        ),
        sa.Column("season", ENUM_SEASON, nullable=False),
        sa.Column(
            "valid_for_region",
            sa.Boolean(),
            server_default=sa.true(),
            nullable=False,
        ),
        *_audit_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("crop_name"),
    )

    # ── 5. GDD records ──────────────────────────────────────────────────
    op.create_table(
        "gdd_records",
        _uuid_pk(),
        sa.Column("field_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("avg_temperature", sa.Float(), nullable=False),
        sa.Column("min_temperature", sa.Float(), nullable=False),
        sa.Column("max_temperature", sa.Float(), nullable=False),
        sa.Column("readings_count", sa.Integer(), nullable=False),
        sa.Column("daily_gdd", sa.Float(), nullable=False),
        sa.Column("cumulative_gdd", sa.Float(), nullable=False),
        sa.Column("crop_type", sa.String(100), nullable=False),
        sa.Column("base_temperature", sa.Float(), nullable=False),
        sa.Column("growth_stage", ENUM_GROWTH_STAGE, nullable=False),
        *_audit_columns(),
        sa.ForeignKeyConstraint(["field_id"], ["fields.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("field_id", "date", name="uq_gdd_records_field_date"),
    )


def downgrade() -> None:
    # ── Drop tables in reverse dependency order ─────────────────────────
    op.drop_table("gdd_records")
    op.drop_table("crop_parameters")
    op.drop_index("ix_sensor_readings_node_ts", table_name="sensor_readings")
    op.drop_table("sensor_readings")
    op.drop_table("fields")

    # ── Drop enum types ─────────────────────────────────────────────────
    ENUM_SEASON.drop(op.get_bind(), checkfirst=True)
    ENUM_GROWTH_STAGE.drop(op.get_bind(), checkfirst=True)
    ENUM_SOIL_TEXTURE.drop(op.get_bind(), checkfirst=True)
