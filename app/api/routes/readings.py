"""MeterReading routes for the monthly per-floor reading store."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.schemas.meter_reading import (
    DeleteMonthResult,
    MeterReadingRegister,
    MeterReadingResponse,
    MeterReadingUpsert,
    MonthReadings,
)
from app.services import meter_reading as reading_service

router = APIRouter(prefix="/readings", tags=["meter-readings"])

# MM/YYYY passed as two path segments: /readings/month/12/2025
MonthMM = Annotated[str, Path(pattern=r"^(0[1-9]|1[0-2])$")]
MonthYYYY = Annotated[str, Path(pattern=r"^\d{4}$")]


@router.put("/", response_model=MeterReadingResponse)
def upsert_reading(
    data: MeterReadingUpsert,
    db: Session = Depends(get_db),
):
    """Store both counters of a floor for a month, replacing any previous submission."""
    reading_service.check_floor(data.floor)
    return reading_service.upsert_reading(
        db, data.month, data.floor, data.start_reading, data.end_reading
    )


@router.post("/", response_model=MeterReadingResponse, status_code=status.HTTP_201_CREATED)
def register_reading(
    data: MeterReadingRegister,
    db: Session = Depends(get_db),
):
    """Register an end-of-month reading; the start is the floor's previous end reading."""
    return reading_service.register_reading(db, data.floor, data.reading, data.month)


@router.get("/", response_model=list[MeterReadingResponse])
def list_readings(db: Session = Depends(get_db)):
    """List all readings, newest month first."""
    return reading_service.get_all_readings(db)


@router.get("/latest", response_model=MonthReadings)
def get_latest_readings(db: Session = Depends(get_db)):
    """Get the readings of the most recent month."""
    month = reading_service.get_latest_month(db)
    if month is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No meter readings stored",
        )
    return MonthReadings(
        month=month,
        readings=[
            MeterReadingResponse.model_validate(r) for r in reading_service.get_readings(db, month)
        ],
    )


@router.get("/floor/{floor}/latest", response_model=MeterReadingResponse)
def get_latest_floor_reading(
    floor: int,
    db: Session = Depends(get_db),
):
    """Get the newest reading of a floor."""
    reading = reading_service.get_latest_floor_reading(db, floor)
    if reading is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No readings for floor {floor}",
        )
    return reading


@router.get("/month/{mm}/{yyyy}", response_model=MonthReadings)
def get_month_readings(
    mm: MonthMM,
    yyyy: MonthYYYY,
    db: Session = Depends(get_db),
):
    """Get the readings of a month."""
    month = f"{mm}/{yyyy}"
    return MonthReadings(
        month=month,
        readings=[
            MeterReadingResponse.model_validate(r) for r in reading_service.get_readings(db, month)
        ],
    )


@router.delete("/month/{mm}/{yyyy}", response_model=DeleteMonthResult)
def delete_month(
    mm: MonthMM,
    yyyy: MonthYYYY,
    db: Session = Depends(get_db),
):
    """Delete all readings of a month."""
    month = f"{mm}/{yyyy}"
    return DeleteMonthResult(month=month, deleted=reading_service.delete_month(db, month))

