"""MeterReading Pydantic schemas for request/response validation."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, model_validator

MONTH_PATTERN = r"^(0[1-9]|1[0-2])/\d{4}$"  # MM/YYYY


class MeterReadingUpsert(BaseModel):
    """Schema for storing both counters of a floor for a month."""

    month: str = Field(pattern=MONTH_PATTERN)
    floor: int = Field(ge=1)
    start_reading: Decimal = Field(ge=0)
    end_reading: Decimal = Field(ge=0)

    @model_validator(mode="after")
    def validate_order(self) -> "MeterReadingUpsert":
        """End reading cannot be below the start reading."""
        if self.end_reading < self.start_reading:
            raise ValueError("end_reading must be greater than or equal to start_reading")
        return self


class MeterReadingRegister(BaseModel):
    """Schema for registering an end-of-month reading.

    The start reading is taken from the floor's previous end reading.
    """

    floor: int = Field(ge=1)
    reading: Decimal = Field(ge=0)
    month: str | None = Field(default=None, pattern=MONTH_PATTERN)


class MeterReadingResponse(BaseModel):
    """Schema for meter reading response."""

    id: int
    month: str
    floor: int
    start_reading: Decimal
    end_reading: Decimal
    consumption: Decimal
    created_at: datetime

    model_config = {"from_attributes": True}


class MonthReadings(BaseModel):
    """Readings of all floors for one month."""

    month: str
    readings: list[MeterReadingResponse]


class DeleteMonthResult(BaseModel):
    """Result of deleting a month of readings."""

    month: str
    deleted: int
