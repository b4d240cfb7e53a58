"""Monthly report aggregation across water, electricity and gas."""

import asyncio
import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from app.core.config import Settings
from app.schemas.electricity import ElectricityBillData, FloorMeterReading
from app.schemas.report import (
    AggregatedReport,
    ElectricityStatement,
    FloorBreakdown,
    GasStatement,
    WaterStatement,
)
from app.services.electricity import (
    calculate_electricity_distribution,
    round2,
    validate_meter_readings_freshness,
)
from app.services.meter_reading import get_latest_readings, to_floor_readings
from app.services.providers import UtilitySources

logger = logging.getLogger(__name__)


def electricity_bill_from_statement(statement: ElectricityStatement) -> ElectricityBillData:
    """Only the normalized components cross into the calculator."""
    return ElectricityBillData(
        energy_cost=statement.energy_cost,
        igv=statement.igv,
        other_concepts=statement.other_concepts,
        total_bill=statement.total,
        billing_period=statement.billing_period,
    )


def gas_for_floor(gas: GasStatement, floor: int) -> Decimal:
    """Gas amount of the account tagged with this floor, 0 if there is none."""
    return sum((g.amount for g in gas.floors if g.floor == str(floor)), Decimal("0"))


def aggregate_report(
    water: WaterStatement,
    electricity: ElectricityStatement,
    gas: GasStatement,
    readings: list[FloorMeterReading],
    floor_count: int,
    readings_month: str | None = None,
) -> AggregatedReport:
    """Combine the three statements into per-floor totals.

    Electricity is split by the calculator, water equally over
    ``floor_count`` floors and gas by the floor tag of each account.
    """
    floors: list[FloorBreakdown] = []
    if readings:
        distribution = calculate_electricity_distribution(
            electricity_bill_from_statement(electricity), readings
        )
        water_share = round2(water.total / floor_count)
        for floor in distribution.floors:
            gas_amount = gas_for_floor(gas, floor.floor)
            floors.append(
                FloorBreakdown(
                    floor=floor.floor,
                    kwh=floor.consumption,
                    percentage=floor.percentage,
                    energy_cost=floor.energy_cost,
                    igv=floor.igv,
                    other_concepts=floor.other_concepts,
                    electricity=floor.total,
                    water=water_share,
                    gas=gas_amount,
                    total=round2(floor.total + water_share + gas_amount),
                )
            )

    services_total = round2(water.total + electricity.total + gas.total)
    if floors:
        grand_total = round2(sum((f.total for f in floors), Decimal("0")))
    else:
        grand_total = services_total

    readings_warning = None
    if readings_month and electricity.billing_period:
        is_fresh, message = validate_meter_readings_freshness(
            readings_month, electricity.billing_period
        )
        if not is_fresh:
            readings_warning = message
            logger.warning(message)

    return AggregatedReport(
        water=water,
        electricity=electricity,
        gas=gas,
        floors=floors,
        services_total=services_total,
        grand_total=grand_total,
        total_debt=water.debt + electricity.debt + gas.debt,
        readings_month=readings_month,
        readings_warning=readings_warning,
    )


async def fetch_all_data(
    sources: UtilitySources,
    db: Session,
    settings: Settings,
) -> AggregatedReport:
    """Fetch the three statements concurrently and aggregate them with the latest readings."""
    logger.info("Fetching utility data")
    water, electricity, gas = await asyncio.gather(
        sources.water.fetch_statement(),
        sources.electricity.fetch_statement(),
        sources.gas.fetch_statement(),
    )

    stored = get_latest_readings(db)
    readings_month = stored[0].month if stored else None
    if not stored:
        logger.warning("No meter readings stored, per-floor split skipped")

    return aggregate_report(
        water,
        electricity,
        gas,
        to_floor_readings(stored),
        floor_count=settings.FLOOR_COUNT,
        readings_month=readings_month,
    )
