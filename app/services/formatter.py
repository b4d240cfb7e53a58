"""Chat message text for the monthly report and the payments summary."""

from datetime import datetime
from decimal import Decimal

from app.models.enums import InvoiceStatus
from app.schemas.report import AggregatedReport

SEPARATOR = "━━━━━━━━━━━━━━━━━━━━"


def currency(amount: Decimal) -> str:
    """Format an amount in soles, e.g. "S/ 12.50"."""
    return f"S/ {amount:.2f}"


def format_report(data: AggregatedReport, generated_at: datetime | None = None) -> str:
    """Report message: grand total, per-floor split and per-service detail."""
    generated_at = generated_at or datetime.now()
    lines = ["📊 *HOMEOPS REPORTE*", SEPARATOR, ""]
    lines += [f"💰 *TOTAL: {currency(data.grand_total)}*", ""]

    if data.floors:
        lines += ["🏠 *DISTRIBUCIÓN POR PISO*", ""]
        for floor in data.floors:
            lines.append(f"   *Piso {floor.floor}:* {currency(floor.total)}")
            lines.append(f"   └ {floor.kwh:.1f} kWh consumo")
        lines.append("")

    if data.readings_warning:
        lines += [f"⚠️ {data.readings_warning}", ""]

    lines += ["📋 *DETALLE DE SERVICIOS*", ""]

    lines.append(f"⚡ *Luz:* {currency(data.electricity.total)}")
    if data.electricity.billing_period:
        lines.append(f"   └ {data.electricity.billing_period}")

    lines.append(f"💧 *Agua:* {currency(data.water.total)}")
    if data.floors:
        lines.append(f"   └ {currency(data.floors[0].water)} c/piso")

    lines.append(f"🔥 *Gas:* {currency(data.gas.total)}")
    for gas in data.gas.floors:
        lines.append(f"   └ Piso {gas.floor}: {currency(gas.amount)}")

    lines += ["", SEPARATOR, f"_Generado: {generated_at:%d/%m/%Y %H:%M}_"]
    return "\n".join(lines)


def format_payments(data: AggregatedReport) -> str:
    """Payments message: what is still owed to each provider and when it is due."""
    lines = ["💸 *RESUMEN DE PAGOS*", SEPARATOR, ""]

    if data.electricity.invoices:
        lines.append("⚡ *Luz del Sur:*")
        for inv in data.electricity.invoices:
            lines.append(f"   Sum: {inv.supply}")
            if inv.status == InvoiceStatus.PAID:
                lines.append("   Estado: *✅ PAGADO*")
            else:
                lines.append(f"   Monto: *{currency(inv.amount)}*")
                lines.append(f"   Vence: {inv.expiry}")
            lines.append("")

    lines.append("💧 *SEDAPAL:*")
    if data.water.invoices:
        for inv in data.water.invoices:
            lines.append(f"   NIS: {inv.supply}")
            lines.append(f"   Monto: *{currency(inv.amount)}*")
            lines.append(f"   Vence: {inv.expiry}")
            lines.append("")
    else:
        lines.append(f"   NIS: {data.water.supply_number or '-'}")
        lines.append("   Estado: *✅ PAGADO*")
        lines.append("")

    if data.gas.invoices:
        lines.append("🔥 *Cálidda:*")
        for inv in data.gas.invoices:
            lines.append(f"   Cliente: {inv.code}")
            if inv.status == InvoiceStatus.PAID:
                lines.append("   Estado: *✅ PAGADO*")
            else:
                lines.append(f"   Monto: *{currency(inv.amount)}*")
                lines.append(f"   Vence: {inv.expiry}")
            lines.append("")

    lines += [SEPARATOR, f"_Total deuda: {currency(data.total_debt)}_"]
    return "\n".join(lines)
