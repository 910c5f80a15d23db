"""Doctor table model using SQLAlchemy Core."""

from sqlalchemy import Column, DateTime, Integer, MetaData, String, Table, Text, text

metadata = MetaData()

# Exactly one row is expected; its id is configured through DOCTOR_ID.
doctors = Table(
    "doctors",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("name", Text, nullable=False),
    Column("specialization", String(200)),
    Column("experience_years", Integer),
    Column("clinic_name", Text),
    Column("address", Text),
    Column("phone_number", String(20)),
    Column("email", String(255)),
    Column("photo_url", Text),
    Column("about", Text),
    Column(
        "created_at",
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
    ),
)
