"""Seed script to populate the database with sample readings and floor assignments."""

from decimal import Decimal

from sqlalchemy import select

from app.core.database import SessionLocal, init_db
from app.models.meter_reading import MeterReading
from app.services.floor_assignment import assign_floor
from app.services.meter_reading import upsert_reading

# month -> floor -> (start, end)
SAMPLE_READINGS = {
    "11/2025": {
        1: (Decimal("1210.4"), Decimal("1304.3")),
        2: (Decimal("1801.9"), Decimal("1927.2")),
        3: (Decimal("452.0"), Decimal("495.3")),
    },
    "12/2025": {
        1: (Decimal("1304.3"), Decimal("1400.0")),
        2: (Decimal("1927.2"), Decimal("2050.0")),
        3: (Decimal("495.3"), Decimal("540.0")),
    },
}

SAMPLE_OCCUPANTS = {
    1: ("51900000001", "Piso 1"),
    2: ("51900000002", "Piso 2"),
    3: ("51900000003", "Piso 3"),
}


def seed_database() -> None:
    """Seed the database with sample data."""
    init_db()
    with SessionLocal() as db:
        if db.scalars(select(MeterReading)).first():
            print("Database already has data. Skipping seed.")
            return

        print("Seeding database...")

        for month, floors in SAMPLE_READINGS.items():
            for floor, (start, end) in floors.items():
                upsert_reading(db, month, floor, start, end)
            print(f"Created {len(floors)} readings for {month}")

        for floor, (phone, name) in SAMPLE_OCCUPANTS.items():
            assign_floor(db, floor, phone, name)
        print(f"Assigned {len(SAMPLE_OCCUPANTS)} floors")

        print("\nSeed data created successfully!")


if __name__ == "__main__":
    seed_database()
