"""Appointments table model using SQLAlchemy Core."""

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    DateTime,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    Uuid,
    text,
)

# Statuses that hold a slot
ACTIVE_STATUS_CLAUSE = "status IN ('booked', 'booked_online')"

metadata = MetaData()

appointments = Table(
    "appointments",
    metadata,
    # Doubles as the public booking id
    Column("id", Uuid, primary_key=True),
    Column("doctor_id", String(64), nullable=False),
    # Slot key, reference-timezone calendar date and local HH:MM
    Column("date", String(10), nullable=False),
    Column("time", String(5), nullable=False),
    # Patient
    Column("patient_name", Text, nullable=False),
    Column("patient_phone", String(20), nullable=False, index=True),
    Column("age", Integer, nullable=False),
    Column("gender", String(20), nullable=False),
    # Consultation
    Column("consult_type", String(10), nullable=False),
    Column("status", String(20), nullable=False, server_default="booked"),
    Column("video_links", JSON, nullable=True),
    Column("payment", JSON, nullable=True),
    # Audit fields
    Column(
        "created_at",
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
    ),
    Column("completed_at", DateTime(timezone=True), nullable=True),
    # Constraints
    CheckConstraint(
        "status IN ('booked', 'booked_online', 'completed')",
        name="appointments_status_check",
    ),
    CheckConstraint(
        "consult_type IN ('online', 'offline')",
        name="appointments_consult_type_check",
    ),
    Index("ix_appointments_doctor_date", "doctor_id", "date"),
    # At most one active booking per slot; completed rows do not hold the slot
    Index(
        "uq_appointments_active_slot",
        "doctor_id",
        "date",
        "time",
        unique=True,
        postgresql_where=text(ACTIVE_STATUS_CLAUSE),
        sqlite_where=text(ACTIVE_STATUS_CLAUSE),
    ),
)
