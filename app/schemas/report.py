"""Normalized utility statements and the aggregated per-floor report."""

from decimal import Decimal

from pydantic import BaseModel

from app.models.enums import InvoiceStatus


class Invoice(BaseModel):
    """A payable provider invoice as shown in the payments summary."""

    supply: str | None = None  # Supply number (NIS / suministro)
    code: str | None = None  # Client code, gas accounts only
    amount: Decimal
    expiry: str = ""
    status: InvoiceStatus = InvoiceStatus.PENDING


class WaterStatement(BaseModel):
    """Water invoices for the residence supply."""

    supply_number: str | None = None
    total: Decimal = Decimal("0")
    debt: Decimal = Decimal("0")
    invoices: list[Invoice] = []


class ElectricityStatement(BaseModel):
    """Latest electricity invoice, decomposed into its billed components."""

    supply_number: str | None = None
    billing_period: str = ""
    energy_cost: Decimal = Decimal("0")
    igv: Decimal = Decimal("0")
    other_concepts: Decimal = Decimal("0")
    pending_balance: Decimal = Decimal("0")
    debt: Decimal = Decimal("0")
    invoices: list[Invoice] = []

    @property
    def total(self) -> Decimal:
        """Billed amount, the sum of the three components."""
        return self.energy_cost + self.igv + self.other_concepts


class GasFloorAmount(BaseModel):
    """Gas amount of one account, tagged with the floor of its supply address."""

    floor: str
    amount: Decimal


class GasStatement(BaseModel):
    """Gas accounts of the residence, one per floor address."""

    total: Decimal = Decimal("0")
    debt: Decimal = Decimal("0")
    floors: list[GasFloorAmount] = []
    invoices: list[Invoice] = []


class FloorBreakdown(BaseModel):
    """Everything one floor owes for the month."""

    floor: int
    kwh: Decimal
    percentage: Decimal
    energy_cost: Decimal
    igv: Decimal
    other_concepts: Decimal
    electricity: Decimal
    water: Decimal
    gas: Decimal
    total: Decimal


class AggregatedReport(BaseModel):
    """Consolidated monthly report across the three utilities."""

    water: WaterStatement
    electricity: ElectricityStatement
    gas: GasStatement
    floors: list[FloorBreakdown]
    services_total: Decimal
    grand_total: Decimal
    total_debt: Decimal
    readings_month: str | None = None
    readings_warning: str | None = None
