"""initial schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-17

"""

from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("createdAt", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updatedAt", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=150), nullable=False),
        sa.Column("password", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=40), nullable=False),
        sa.Column("department", sa.String(length=40), nullable=False),
        sa.Column("isActive", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "drivers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("userId", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, unique=True),
        sa.Column("name", sa.String(length=150), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=20), nullable=False),
        sa.Column("kingschatHandle", sa.String(length=100), nullable=True),
        sa.Column("homeAddress", sa.Text(), nullable=True),
        sa.Column("homePostCode", sa.String(length=20), nullable=True),
        sa.Column("church", sa.String(length=150), nullable=False),
        sa.Column("zone", sa.String(length=100), nullable=False),
        sa.Column("group", sa.String(length=100), nullable=False),
        sa.Column("emergencyContactName", sa.String(length=150), nullable=False),
        sa.Column("emergencyContactPhone", sa.String(length=20), nullable=False),
        sa.Column("yearsDrivingExperience", sa.Integer(), nullable=False),
        sa.Column("licenseDurationYears", sa.Integer(), nullable=False),
        sa.Column("availabilityStart", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("availabilityEnd", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("status", sa.String(length=40), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_drivers_id", "drivers", ["id"])
    op.create_index("ix_drivers_email", "drivers", ["email"], unique=True)
    op.create_index("ix_drivers_status", "drivers", ["status"])

    op.create_table(
        "vehicles",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("make", sa.String(length=100), nullable=False),
        sa.Column("model", sa.String(length=100), nullable=False),
        sa.Column("registration", sa.String(length=20), nullable=False),
        sa.Column("isHired", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("pickupLocation", sa.String(length=255), nullable=False),
        sa.Column("pickupMileage", sa.Integer(), nullable=False),
        sa.Column("pickupFuelGauge", sa.Integer(), nullable=False),
        sa.Column("pickupPhotos", sa.JSON(), nullable=False),
        sa.Column("pickupDate", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("dropoffMileage", sa.Integer(), nullable=True),
        sa.Column("dropoffFuelGauge", sa.Integer(), nullable=True),
        sa.Column("dropoffPhotos", sa.JSON(), nullable=True),
        sa.Column("dropoffDate", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("currentDriverId", sa.Integer(), sa.ForeignKey("drivers.id"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_vehicles_id", "vehicles", ["id"])
    op.create_index("ix_vehicles_registration", "vehicles", ["registration"], unique=True)
    op.create_index("ix_vehicles_currentDriverId", "vehicles", ["currentDriverId"])

    op.create_table(
        "vips",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=150), nullable=False),
        sa.Column("arrivalDate", sa.Date(), nullable=False),
        sa.Column("arrivalTime", sa.String(length=10), nullable=False),
        sa.Column("arrivalAirport", sa.String(length=100), nullable=False),
        sa.Column("arrivalTerminal", sa.String(length=50), nullable=False),
        sa.Column("departureDate", sa.Date(), nullable=False),
        sa.Column("departureTime", sa.String(length=10), nullable=False),
        sa.Column("departureAirport", sa.String(length=100), nullable=False),
        sa.Column("departureTerminal", sa.String(length=50), nullable=False),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("assignedDriverId", sa.Integer(), sa.ForeignKey("drivers.id"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_vips_id", "vips", ["id"])
    op.create_index("ix_vips_assignedDriverId", "vips", ["assignedDriverId"])

    op.create_table(
        "assignments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("driverId", sa.Integer(), sa.ForeignKey("drivers.id"), nullable=False),
        sa.Column("vehicleId", sa.Integer(), sa.ForeignKey("vehicles.id"), nullable=False),
        sa.Column("vipId", sa.Integer(), sa.ForeignKey("vips.id"), nullable=True),
        sa.Column("startTime", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("endTime", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("status", sa.String(length=40), nullable=False),
        sa.Column("activatedAt", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("completedAt", sa.TIMESTAMP(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_assignments_id", "assignments", ["id"])
    op.create_index("ix_assignments_driverId", "assignments", ["driverId"])
    op.create_index("ix_assignments_vehicleId", "assignments", ["vehicleId"])
    op.create_index("ix_assignments_vipId", "assignments", ["vipId"])
    op.create_index("ix_assignments_status", "assignments", ["status"])

    op.create_table(
        "checkins",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("driverId", sa.Integer(), sa.ForeignKey("drivers.id"), nullable=False),
        sa.Column("assignmentId", sa.Integer(), sa.ForeignKey("assignments.id"), nullable=False),
        sa.Column("checkinType", sa.String(length=40), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("timestamp", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("isDailyCheckin", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("eventDate", sa.Date(), nullable=True),
        sa.Column("sessionId", sa.String(length=50), nullable=True),
        sa.Column("customLabel", sa.String(length=150), nullable=True),
        sa.Column("dedupeKey", sa.String(length=80), nullable=True),
        sa.Column("createdAt", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("assignmentId", "driverId", "checkinType", "dedupeKey", name="uq_checkins_scope"),
    )
    op.create_index("ix_checkins_id", "checkins", ["id"])
    op.create_index("ix_checkins_driverId", "checkins", ["driverId"])
    op.create_index("ix_checkins_assignmentId", "checkins", ["assignmentId"])

    op.create_table(
        "vehicle_observations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("driverId", sa.Integer(), sa.ForeignKey("drivers.id"), nullable=False),
        sa.Column("vehicleId", sa.Integer(), sa.ForeignKey("vehicles.id"), nullable=False),
        sa.Column("assignmentId", sa.Integer(), sa.ForeignKey("assignments.id"), nullable=False),
        sa.Column("observationType", sa.String(length=40), nullable=False),
        sa.Column("mileage", sa.Integer(), nullable=True),
        sa.Column("fuelLevel", sa.Integer(), nullable=True),
        sa.Column("damageNotes", sa.Text(), nullable=True),
        sa.Column("photos", sa.JSON(), nullable=True),
        sa.Column("timestamp", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("createdAt", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_vehicle_observations_id", "vehicle_observations", ["id"])
    op.create_index("ix_vehicle_observations_driverId", "vehicle_observations", ["driverId"])
    op.create_index("ix_vehicle_observations_vehicleId", "vehicle_observations", ["vehicleId"])
    op.create_index("ix_vehicle_observations_assignmentId", "vehicle_observations", ["assignmentId"])

    op.create_table(
        "location_updates",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("driverId", sa.Integer(), sa.ForeignKey("drivers.id"), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("status", sa.String(length=40), nullable=False),
        sa.Column("timestamp", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("createdAt", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_location_updates_id", "location_updates", ["id"])
    op.create_index("ix_location_updates_driverId", "location_updates", ["driverId"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("userId", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("entityType", sa.String(length=100), nullable=False),
        sa.Column("entityId", sa.Integer(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("createdAt", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_audit_logs_id", "audit_logs", ["id"])


def downgrade() -> None:
    for table in (
        "audit_logs", "location_updates", "vehicle_observations", "checkins",
        "assignments", "vips", "vehicles", "drivers", "users",
    ):
        op.drop_table(table)
