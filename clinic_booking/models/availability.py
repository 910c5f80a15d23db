"""Weekly availability template and per-date override tables."""

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    MetaData,
    String,
    Table,
    text,
)

metadata = MetaData()

# Offline (in-clinic) slot template, uniform across open weekdays
availability = Table(
    "availability",
    metadata,
    Column("doctor_id", String(64), primary_key=True),
    Column("day_slots", JSON, nullable=False),
    Column(
        "updated_at",
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
    ),
)

# Replaces the default slot source for one (date, consult_type)
availability_overrides = Table(
    "availability_overrides",
    metadata,
    Column("doctor_id", String(64), primary_key=True),
    Column("date", String(10), primary_key=True),
    Column("consult_type", String(10), primary_key=True),
    Column("closed", Boolean, nullable=False, server_default=text("false")),
    Column("slots", JSON, nullable=True),
    Column(
        "updated_at",
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
    ),
    CheckConstraint(
        "consult_type IN ('online', 'offline')",
        name="availability_overrides_consult_type_check",
    ),
)
