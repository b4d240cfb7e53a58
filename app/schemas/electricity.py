"""Electricity distribution schemas: bill input, floor readings and the per-floor split."""

from decimal import Decimal

from pydantic import BaseModel, Field, field_validator


class FloorMeterReading(BaseModel):
    """A floor submeter's cumulative counter at the start and end of the period."""

    floor: int
    start_reading: Decimal
    end_reading: Decimal


class ElectricityBillData(BaseModel):
    """One electricity invoice for the whole residence.

    ``igv`` is the provider's precomputed tax amount and is used as given.
    ``total_bill`` and ``billing_period`` are informational and echoed back.
    """

    energy_cost: Decimal
    igv: Decimal
    other_concepts: Decimal
    total_bill: Decimal = Decimal("0")
    billing_period: str = ""


class FloorConsumption(BaseModel):
    """One floor's share of the electricity bill."""

    floor: int
    consumption: Decimal  # kWh
    percentage: Decimal  # Share of metered consumption (0-1)
    energy_cost: Decimal
    igv: Decimal
    other_concepts: Decimal
    total: Decimal


class ElectricityReport(BaseModel):
    """Per-floor electricity split that reconciles to the bill components."""

    bill: ElectricityBillData
    meter_total: Decimal
    floors: list[FloorConsumption]
    grand_total: Decimal


class ElectricityDistributionRequest(BaseModel):
    """Request body for the electricity distribution endpoint."""

    bill: ElectricityBillData
    meter_readings: list[FloorMeterReading] = Field(min_length=1)

    @field_validator("meter_readings")
    @classmethod
    def validate_unique_floors(cls, v: list[FloorMeterReading]) -> list[FloorMeterReading]:
        """Each floor may appear only once."""
        floors = [r.floor for r in v]
        if len(floors) != len(set(floors)):
            raise ValueError("Duplicate floor in meter readings")
        return v
