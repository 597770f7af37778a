"""Initial schema: users, driver profiles, trips and ratings.

Revision ID: 001
Create Date: 2026-10-17
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # ── users ─────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), unique=True, nullable=False),
        sa.Column("name", sa.String(120), nullable=True),
        sa.Column(
            "role",
            sa.Enum("RIDER", "DRIVER", name="actorrole"),
            default="RIDER",
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )

    # ── driver_profiles ───────────────────────────────────────────────
    op.create_table(
        "driver_profiles",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.Integer,
            sa.ForeignKey("users.id"),
            unique=True,
            nullable=False,
        ),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column(
            "vehicle_type",
            sa.Enum("MINI", "SEDAN", "SUV", name="vehicletype"),
            default="SEDAN",
        ),
        sa.Column("vehicle_number", sa.String(32), nullable=False),
        sa.Column("is_online", sa.Boolean, default=False, nullable=False),
        sa.Column("rating", sa.Float, default=5.0, nullable=False),
        sa.Column("rating_sum", sa.Integer, default=0, nullable=False),
        sa.Column("rating_count", sa.Integer, default=0, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )

    # ── trips ─────────────────────────────────────────────────────────
    op.create_table(
        "trips",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "rider_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False
        ),
        sa.Column(
            "driver_id", sa.Integer, sa.ForeignKey("users.id"), nullable=True
        ),
        sa.Column("pickup_lat", sa.Float, nullable=False),
        sa.Column("pickup_lng", sa.Float, nullable=False),
        sa.Column("drop_lat", sa.Float, nullable=False),
        sa.Column("drop_lng", sa.Float, nullable=False),
        sa.Column("pickup_address", sa.String(500), nullable=False),
        sa.Column("drop_address", sa.String(500), nullable=False),
        sa.Column("pickup_address_raw", sa.JSON, nullable=True),
        sa.Column("drop_address_raw", sa.JSON, nullable=True),
        sa.Column(
            "vehicle_type",
            postgresql.ENUM("MINI", "SEDAN", "SUV", name="vehicletype", create_type=False),
            nullable=False,
        ),
        sa.Column("distance_km", sa.Float, nullable=False),
        sa.Column("duration_min", sa.Float, nullable=False),
        sa.Column("fare", sa.Integer, nullable=False),
        sa.Column("promo_code", sa.String(32), nullable=True),
        sa.Column("discount", sa.Integer, default=0, nullable=False),
        sa.Column("ride_notes", sa.String(500), nullable=True),
        sa.Column("scheduled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "status",
            sa.Enum(
                "SEARCHING",
                "ACCEPTED",
                "ARRIVING",
                "STARTED",
                "COMPLETED",
                "CANCELLED",
                name="tripstatus",
            ),
            default="SEARCHING",
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint("fare >= 0", name="ck_trips_fare_non_negative"),
        sa.CheckConstraint(
            "distance_km >= 0", name="ck_trips_distance_non_negative"
        ),
    )
    op.create_index("idx_trips_status", "trips", ["status"])
    op.create_index("idx_trips_rider", "trips", ["rider_id"])
    op.create_index("idx_trips_driver", "trips", ["driver_id"])
    op.create_index("idx_trips_created", "trips", ["created_at"])

    # ── ratings ───────────────────────────────────────────────────────
    op.create_table(
        "ratings",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "trip_id",
            sa.String(36),
            sa.ForeignKey("trips.id"),
            unique=True,
            nullable=False,
        ),
        sa.Column("stars", sa.Integer, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint("stars BETWEEN 1 AND 5", name="ck_ratings_stars_range"),
    )


def downgrade() -> None:
    op.drop_table("ratings")
    op.drop_table("trips")
    op.drop_table("driver_profiles")
    op.drop_table("users")
    op.execute("DROP TYPE IF EXISTS tripstatus")
    op.execute("DROP TYPE IF EXISTS vehicletype")
    op.execute("DROP TYPE IF EXISTS actorrole")
