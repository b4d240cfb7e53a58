"""MeterReading service - the monthly per-floor reading store."""

import logging
from datetime import UTC, datetime
from decimal import Decimal

from fastapi import HTTPException, status
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.meter_reading import MeterReading
from app.schemas.electricity import FloorMeterReading

logger = logging.getLogger(__name__)


def current_month(now: datetime | None = None) -> str:
    """Month label (MM/YYYY) for the given moment, defaulting to now."""
    now = now or datetime.now(UTC)
    return f"{now.month:02d}/{now.year}"


def month_sort_key(month: str) -> tuple[int, int]:
    """Sort key for MM/YYYY labels: year first, then month."""
    mm, yyyy = month.split("/")
    return int(yyyy), int(mm)


def check_floor(floor: int, floor_count: int | None = None) -> None:
    """Reject floors outside 1..FLOOR_COUNT."""
    floor_count = floor_count or settings.FLOOR_COUNT
    if not 1 <= floor <= floor_count:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Floor must be between 1 and {floor_count}",
        )


def upsert_reading(
    db: Session,
    month: str,
    floor: int,
    start_reading: Decimal,
    end_reading: Decimal,
) -> MeterReading:
    """Insert or overwrite the reading of a floor for a month."""
    reading = db.scalars(
        select(MeterReading).where(MeterReading.month == month, MeterReading.floor == floor)
    ).first()

    if reading is None:
        reading = MeterReading(month=month, floor=floor)
        db.add(reading)
    else:
        reading.created_at = datetime.now(UTC)

    reading.start_reading = start_reading
    reading.end_reading = end_reading
    db.commit()
    db.refresh(reading)
    logger.info("Stored reading %s floor %s: %s -> %s", month, floor, start_reading, end_reading)
    return reading


def get_readings(db: Session, month: str) -> list[MeterReading]:
    """Get the readings of a month ordered by floor."""
    return list(
        db.scalars(
            select(MeterReading).where(MeterReading.month == month).order_by(MeterReading.floor)
        )
    )


def get_latest_month(db: Session) -> str | None:
    """Get the most recent month that has readings."""
    months = db.scalars(select(MeterReading.month).distinct()).all()
    if not months:
        return None
    return max(months, key=month_sort_key)


def get_latest_readings(db: Session) -> list[MeterReading]:
    """Get the readings of the most recent month, empty if there are none."""
    month = get_latest_month(db)
    if month is None:
        return []
    return get_readings(db, month)


def get_latest_floor_reading(db: Session, floor: int) -> MeterReading | None:
    """Get the newest reading recorded for a floor."""
    readings = db.scalars(select(MeterReading).where(MeterReading.floor == floor)).all()
    if not readings:
        return None
    return max(readings, key=lambda r: month_sort_key(r.month))


def get_all_readings(db: Session) -> list[MeterReading]:
    """Get all readings, newest month first, then by floor."""
    readings = db.scalars(select(MeterReading)).all()
    by_floor = sorted(readings, key=lambda r: r.floor)
    return sorted(by_floor, key=lambda r: month_sort_key(r.month), reverse=True)


def delete_month(db: Session, month: str) -> int:
    """Delete all readings of a month and return how many were removed."""
    result = db.execute(delete(MeterReading).where(MeterReading.month == month))
    db.commit()
    logger.info("Deleted %s readings for %s", result.rowcount, month)
    return result.rowcount


def register_reading(
    db: Session,
    floor: int,
    end_reading: Decimal,
    month: str | None = None,
) -> MeterReading:
    """Register an end reading, starting from the floor's previous end reading.

    A floor without history starts at the registered value (zero consumption).
    """
    check_floor(floor)
    month = month or current_month()

    history = db.scalars(select(MeterReading).where(MeterReading.floor == floor)).all()
    same_month = next((r for r in history if r.month == month), None)
    earlier = [r for r in history if month_sort_key(r.month) < month_sort_key(month)]

    if same_month is not None:
        # Re-submission keeps the month's original start
        start_reading = same_month.start_reading
    elif earlier:
        start_reading = max(earlier, key=lambda r: month_sort_key(r.month)).end_reading
    else:
        start_reading = end_reading

    return upsert_reading(db, month, floor, start_reading, end_reading)


def to_floor_readings(readings: list[MeterReading]) -> list[FloorMeterReading]:
    """Convert stored rows to calculator inputs."""
    return [
        FloorMeterReading(
            floor=r.floor,
            start_reading=r.start_reading,
            end_reading=r.end_reading,
        )
        for r in readings
    ]
