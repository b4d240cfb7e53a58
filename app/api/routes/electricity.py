"""Electricity distribution route."""

from fastapi import APIRouter

from app.schemas.electricity import ElectricityDistributionRequest, ElectricityReport
from app.services.electricity import calculate_electricity_distribution

router = APIRouter(prefix="/electricity", tags=["electricity"])


@router.post("/distribution", response_model=ElectricityReport)
def distribute_electricity(data: ElectricityDistributionRequest) -> ElectricityReport:
    """Split an electricity bill between floors.

    Energy cost and IGV follow each floor's share of metered consumption,
    other concepts are split equally, and the last floor absorbs the
    rounding residual so the floors add up to the bill.
    """
    return calculate_electricity_distribution(data.bill, data.meter_readings)
