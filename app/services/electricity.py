"""Electricity cost distribution between floors.

Energy cost and IGV are split in proportion to each floor's submeter
consumption; other concepts (fixed charges) are split equally. Shares are
rounded to cents as they are assigned, and the rounding drift of each
component is then added to the last floor so the floors always add up to
the invoice.
"""

from decimal import ROUND_HALF_UP, Decimal

from app.schemas.electricity import (
    ElectricityBillData,
    ElectricityReport,
    FloorConsumption,
    FloorMeterReading,
)

CENT = Decimal("0.01")
ZERO = Decimal("0")

MONTH_NAMES = {
    "enero": "01",
    "febrero": "02",
    "marzo": "03",
    "abril": "04",
    "mayo": "05",
    "junio": "06",
    "julio": "07",
    "agosto": "08",
    "septiembre": "09",
    "setiembre": "09",
    "octubre": "10",
    "noviembre": "11",
    "diciembre": "12",
}


def round2(value: Decimal) -> Decimal:
    """Round a currency amount to cents, halves away from zero."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_electricity_distribution(
    bill: ElectricityBillData,
    meter_readings: list[FloorMeterReading],
) -> ElectricityReport:
    """Split one electricity bill between the floors of the given readings.

    Floors are returned in input order. Negative deltas are not clamped and
    flow through the proportions as given. When the floors consumed nothing
    every proportional share is zero and the last floor absorbs the energy
    and IGV amounts through the reconciliation step.
    """
    if not meter_readings:
        raise ValueError("At least one meter reading is required")

    consumptions = [r.end_reading - r.start_reading for r in meter_readings]
    meter_total = sum(consumptions, ZERO)
    other_per_floor = round2(bill.other_concepts / len(meter_readings))

    floors: list[FloorConsumption] = []
    for reading, consumption in zip(meter_readings, consumptions):
        percentage = consumption / meter_total if meter_total > 0 else ZERO
        energy_cost = round2(bill.energy_cost * percentage)
        igv = round2(bill.igv * percentage)
        floors.append(
            FloorConsumption(
                floor=reading.floor,
                consumption=consumption,
                percentage=percentage,
                energy_cost=energy_cost,
                igv=igv,
                other_concepts=other_per_floor,
                total=round2(energy_cost + igv + other_per_floor),
            )
        )

    _reconcile_last_floor(bill, floors)

    return ElectricityReport(
        bill=bill,
        meter_total=meter_total,
        floors=floors,
        grand_total=round2(sum((f.total for f in floors), ZERO)),
    )


def _reconcile_last_floor(bill: ElectricityBillData, floors: list[FloorConsumption]) -> None:
    """Move each component's rounding residual onto the last floor."""
    energy_residual = bill.energy_cost - sum((f.energy_cost for f in floors), ZERO)
    igv_residual = bill.igv - sum((f.igv for f in floors), ZERO)
    other_residual = bill.other_concepts - sum((f.other_concepts for f in floors), ZERO)

    last = floors[-1]
    last.energy_cost = round2(last.energy_cost + energy_residual)
    last.igv = round2(last.igv + igv_residual)
    last.other_concepts = round2(last.other_concepts + other_residual)
    last.total = round2(last.energy_cost + last.igv + last.other_concepts)


def billing_period_to_month(billing_period: str) -> str | None:
    """Convert a provider billing period such as "Diciembre 2025" to "12/2025"."""
    parts = billing_period.lower().split()
    if len(parts) != 2:
        return None
    month_name, year = parts
    month = MONTH_NAMES.get(month_name)
    if not month or not year.isdigit():
        return None
    return f"{month}/{year}"


def validate_meter_readings_freshness(month: str, billing_period: str) -> tuple[bool, str]:
    """Check that stored readings belong to the invoice's billing period."""
    expected = billing_period_to_month(billing_period)
    if expected is None:
        return False, f"Could not parse billing period: {billing_period}"
    if month == expected:
        return True, f"Meter readings are up to date for {billing_period}"
    return False, f"Meter readings outdated. Expected: {expected}, got: {month}"
