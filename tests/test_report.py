"""Tests for report aggregation, chat formatting and the report email."""

import json
from datetime import datetime
from decimal import Decimal

import httpx
import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import get_utility_sources
from app.core.config import Settings
from app.main import app
from app.models.enums import InvoiceStatus
from app.schemas.electricity import FloorMeterReading
from app.schemas.report import (
    ElectricityStatement,
    GasFloorAmount,
    GasStatement,
    Invoice,
    WaterStatement,
)
from app.services.email import (
    RESEND_URL,
    EmailError,
    render_monthly_report,
    report_subject,
    send_email,
    send_monthly_report,
)
from app.services.formatter import currency, format_payments, format_report
from app.services.meter_reading import upsert_reading
from app.services.providers import ProviderError, UtilitySources
from app.services.report import aggregate_report, fetch_all_data, gas_for_floor

WATER = WaterStatement(
    supply_number="4123456",
    total=Decimal("90.00"),
    debt=Decimal("90.00"),
    invoices=[Invoice(supply="4123456", amount=Decimal("90.00"), expiry="20/01/2026")],
)
ELECTRICITY = ElectricityStatement(
    supply_number="1650732",
    billing_period="Diciembre 2025",
    energy_cost=Decimal("300.00"),
    igv=Decimal("54.00"),
    other_concepts=Decimal("90.00"),
    debt=Decimal("444.00"),
    invoices=[Invoice(supply="1650732", amount=Decimal("444.00"), expiry="15/01/2026")],
)
GAS = GasStatement(
    total=Decimal("35.50"),
    debt=Decimal("0"),
    floors=[
        GasFloorAmount(floor="1", amount=Decimal("20.00")),
        GasFloorAmount(floor="2", amount=Decimal("15.50")),
    ],
    invoices=[Invoice(code="30218", amount=Decimal("0"), status=InvoiceStatus.PAID)],
)
READINGS = [
    FloorMeterReading(floor=1, start_reading=Decimal("1304.3"), end_reading=Decimal("1400.0")),
    FloorMeterReading(floor=2, start_reading=Decimal("1927.2"), end_reading=Decimal("2050.0")),
    FloorMeterReading(floor=3, start_reading=Decimal("495.3"), end_reading=Decimal("540.0")),
]


class FakeSource:
    """Statement source returning a fixed statement, or raising."""

    def __init__(self, statement=None, error: Exception | None = None) -> None:
        self.statement = statement
        self.error = error
        self.closed = False

    async def fetch_statement(self):
        if self.error:
            raise self.error
        return self.statement

    async def aclose(self) -> None:
        self.closed = True


def fake_sources(gas_error: Exception | None = None) -> UtilitySources:
    return UtilitySources(
        water=FakeSource(WATER),
        electricity=FakeSource(ELECTRICITY),
        gas=FakeSource(GAS, error=gas_error),
    )


@pytest.fixture
def report():
    return aggregate_report(WATER, ELECTRICITY, GAS, READINGS, floor_count=3, readings_month="12/2025")


class TestAggregateReport:
    """Per-floor totals across the three utilities."""

    def test_floor_totals(self, report) -> None:
        assert [f.total for f in report.floors] == [
            Decimal("208.71"),
            Decimal("240.66"),
            Decimal("120.13"),
        ]

    def test_water_split_equally(self, report) -> None:
        assert [f.water for f in report.floors] == [Decimal("30.00")] * 3

    def test_gas_follows_floor_tag(self, report) -> None:
        assert [f.gas for f in report.floors] == [Decimal("20.00"), Decimal("15.50"), Decimal("0")]

    def test_electricity_breakdown(self, report) -> None:
        floor = report.floors[0]
        assert floor.kwh == Decimal("95.7")
        assert floor.energy_cost == Decimal("109.08")
        assert floor.electricity == Decimal("158.71")

    def test_totals(self, report) -> None:
        assert report.services_total == Decimal("569.50")
        assert report.grand_total == Decimal("569.50")
        assert report.total_debt == Decimal("534.00")

    def test_fresh_readings_no_warning(self, report) -> None:
        assert report.readings_month == "12/2025"
        assert report.readings_warning is None

    def test_outdated_readings_warn(self) -> None:
        report = aggregate_report(
            WATER, ELECTRICITY, GAS, READINGS, floor_count=3, readings_month="11/2025"
        )
        assert report.readings_warning == "Meter readings outdated. Expected: 12/2025, got: 11/2025"
        assert len(report.floors) == 3

    def test_no_readings_skips_floor_split(self) -> None:
        report = aggregate_report(WATER, ELECTRICITY, GAS, [], floor_count=3)
        assert report.floors == []
        assert report.grand_total == report.services_total == Decimal("569.50")

    def test_uneven_water_split(self) -> None:
        water = WaterStatement(total=Decimal("100.00"))
        report = aggregate_report(water, ELECTRICITY, GasStatement(), READINGS, floor_count=3)
        assert [f.water for f in report.floors] == [Decimal("33.33")] * 3

    def test_gas_for_floor(self) -> None:
        assert gas_for_floor(GAS, 2) == Decimal("15.50")
        assert gas_for_floor(GAS, 3) == Decimal("0")

    def test_gas_for_floor_adds_accounts_of_same_floor(self) -> None:
        gas = GasStatement(
            total=Decimal("30.00"),
            floors=[
                GasFloorAmount(floor="1", amount=Decimal("12.00")),
                GasFloorAmount(floor="1", amount=Decimal("8.00")),
                GasFloorAmount(floor="?", amount=Decimal("10.00")),
            ],
        )
        assert gas_for_floor(gas, 1) == Decimal("20.00")


class TestFetchAllData:
    """Concurrent provider fetch plus the latest stored readings."""

    @pytest.mark.asyncio
    async def test_uses_latest_month(self, test_db) -> None:
        upsert_reading(test_db, "11/2025", 1, Decimal("1"), Decimal("2"))
        for r in READINGS:
            upsert_reading(test_db, "12/2025", r.floor, r.start_reading, r.end_reading)

        report = await fetch_all_data(fake_sources(), test_db, Settings())

        assert report.readings_month == "12/2025"
        assert [f.total for f in report.floors] == [
            Decimal("208.71"),
            Decimal("240.66"),
            Decimal("120.13"),
        ]

    @pytest.mark.asyncio
    async def test_without_readings(self, test_db) -> None:
        report = await fetch_all_data(fake_sources(), test_db, Settings())
        assert report.floors == []
        assert report.readings_month is None

    @pytest.mark.asyncio
    async def test_provider_error_propagates(self, test_db) -> None:
        with pytest.raises(ProviderError):
            await fetch_all_data(fake_sources(ProviderError("calidda down")), test_db, Settings())


class TestFormatter:
    """Chat message text."""

    def test_currency(self) -> None:
        assert currency(Decimal("12.5")) == "S/ 12.50"

    def test_report_text(self, report) -> None:
        text = format_report(report, generated_at=datetime(2026, 1, 5, 10, 30))

        assert "💰 *TOTAL: S/ 569.50*" in text
        assert "   *Piso 1:* S/ 208.71" in text
        assert "   └ 95.7 kWh consumo" in text
        assert "⚡ *Luz:* S/ 444.00" in text
        assert "   └ Diciembre 2025" in text
        assert "   └ S/ 30.00 c/piso" in text
        assert "   └ Piso 2: S/ 15.50" in text
        assert text.endswith("_Generado: 05/01/2026 10:30_")

    def test_report_text_shows_warning(self) -> None:
        report = aggregate_report(
            WATER, ELECTRICITY, GAS, READINGS, floor_count=3, readings_month="11/2025"
        )
        assert "⚠️ Meter readings outdated" in format_report(report)

    def test_report_text_without_floors(self) -> None:
        report = aggregate_report(WATER, ELECTRICITY, GAS, [], floor_count=3)
        text = format_report(report)
        assert "DISTRIBUCIÓN POR PISO" not in text
        assert "c/piso" not in text

    def test_payments_text(self, report) -> None:
        text = format_payments(report)

        assert "⚡ *Luz del Sur:*" in text
        assert "   Monto: *S/ 444.00*" in text
        assert "   Vence: 15/01/2026" in text
        assert "   NIS: 4123456" in text
        assert "   Cliente: 30218" in text
        assert "   Estado: *✅ PAGADO*" in text
        assert text.endswith("_Total deuda: S/ 534.00_")

    def test_payments_water_paid(self) -> None:
        water = WaterStatement(supply_number="4123456")
        report = aggregate_report(water, ELECTRICITY, GasStatement(), [], floor_count=3)
        text = format_payments(report)
        assert "💧 *SEDAPAL:*\n   NIS: 4123456\n   Estado: *✅ PAGADO*" in text


class TestReportEmail:
    """Rendering and sending the monthly email."""

    def test_render(self, report) -> None:
        html = render_monthly_report(report, generated_at=datetime(2026, 1, 5, 10, 30))
        assert "S/ 569.50" in html
        assert "Piso 3" in html
        assert "Diciembre 2025" in html
        assert "05/01/2026 10:30" in html

    def test_subject(self, report) -> None:
        assert report_subject(report) == "HomeOps - Reporte Diciembre 2025"

    @pytest.mark.asyncio
    async def test_send(self) -> None:
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = str(request.url)
            captured["auth"] = request.headers["Authorization"]
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={"id": "email-123"})

        settings = Settings(RESEND_API_KEY="re_test", EMAIL_TO="a@example.com, b@example.com")
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            message_id = await send_email(settings, "Hola", "<p>hola</p>", client=client)

        assert message_id == "email-123"
        assert captured["url"] == RESEND_URL
        assert captured["auth"] == "Bearer re_test"
        assert captured["body"]["to"] == ["a@example.com", "b@example.com"]
        assert captured["body"]["subject"] == "Hola"

    @pytest.mark.asyncio
    async def test_send_monthly_report(self, report) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            assert body["subject"] == "HomeOps - Reporte Diciembre 2025"
            assert "S/ 569.50" in body["html"]
            return httpx.Response(200, json={"id": "email-456"})

        settings = Settings(RESEND_API_KEY="re_test", EMAIL_TO="a@example.com")
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            assert await send_monthly_report(settings, report, client=client) == "email-456"

    @pytest.mark.asyncio
    async def test_missing_api_key(self) -> None:
        with pytest.raises(EmailError):
            await send_email(Settings(RESEND_API_KEY="", EMAIL_TO="a@example.com"), "s", "h")

    @pytest.mark.asyncio
    async def test_provider_rejects(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(422, json={}))
        settings = Settings(RESEND_API_KEY="re_test", EMAIL_TO="a@example.com")
        async with httpx.AsyncClient(transport=transport) as client:
            with pytest.raises(EmailError):
                await send_email(settings, "s", "h", client=client)

    @pytest.mark.asyncio
    async def test_non_json_response(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text="queued"))
        settings = Settings(RESEND_API_KEY="re_test", EMAIL_TO="a@example.com")
        async with httpx.AsyncClient(transport=transport) as client:
            with pytest.raises(EmailError):
                await send_email(settings, "s", "h", client=client)


class TestReportRoutes:
    """/api/report endpoints and the report page, with fake providers."""

    @pytest.fixture
    def report_client(self, client: TestClient, test_db):
        for r in READINGS:
            upsert_reading(test_db, "12/2025", r.floor, r.start_reading, r.end_reading)
        app.dependency_overrides[get_utility_sources] = lambda: fake_sources()
        yield client

    def test_report_json(self, report_client: TestClient) -> None:
        response = report_client.get("/api/report/")
        assert response.status_code == 200
        data = response.json()
        assert Decimal(data["grand_total"]) == Decimal("569.50")
        assert [f["floor"] for f in data["floors"]] == [1, 2, 3]

    def test_report_text(self, report_client: TestClient) -> None:
        response = report_client.get("/api/report/text")
        assert response.status_code == 200
        assert "*TOTAL: S/ 569.50*" in response.text

    def test_payments_text(self, report_client: TestClient) -> None:
        response = report_client.get("/api/report/payments")
        assert response.status_code == 200
        assert "RESUMEN DE PAGOS" in response.text

    def test_provider_failure_is_bad_gateway(self, report_client: TestClient) -> None:
        app.dependency_overrides[get_utility_sources] = lambda: fake_sources(
            ProviderError("calidda down")
        )
        response = report_client.get("/api/report/")
        assert response.status_code == 502
        assert response.json()["detail"] == "calidda down"

    def test_report_page(self, report_client: TestClient) -> None:
        response = report_client.get("/report/")
        assert response.status_code == 200
        assert "S/ 569.50" in response.text
