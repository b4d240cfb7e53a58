"""Luz del Sur client - Lima electricity service.

https://www.luzdelsur.pe
"""

import logging
from decimal import Decimal

from pydantic import BaseModel

from app.models.enums import InvoiceStatus
from app.schemas.report import ElectricityStatement, Invoice
from app.services.providers.base import ProviderClient, ProviderError

logger = logging.getLogger(__name__)

BASE_URL = "https://www.luzdelsur.pe/es"

# Pending balances at or below this are treated as paid
PAID_THRESHOLD = Decimal("0.5")


class _LoginData(BaseModel):
    token: str | None = None
    mensajeUsuario: str | None = None


class _LoginResponse(BaseModel):
    success: bool = False
    datos: _LoginData | None = None


class _Supply(BaseModel):
    suministro: int | str


class _SuppliesData(BaseModel):
    suministros: list[_Supply] = []


class _SuppliesResponse(BaseModel):
    datos: _SuppliesData | None = None


class _LatestInvoice(BaseModel):
    consumoEnergia: Decimal = Decimal("0")
    igv: Decimal = Decimal("0")
    otrosConceptos: Decimal = Decimal("0")
    noAfectoIGV: Decimal | None = None
    ultimaFacturacion: str = ""
    totalPagar: Decimal = Decimal("0")
    fechaVencimiento: str | None = None
    saldoPendiente: Decimal = Decimal("0")


class _LatestInvoiceResponse(BaseModel):
    datos: _LatestInvoice | None = None


class LuzDelSurClient(ProviderClient):
    """Latest electricity invoice of the residence's supply."""

    name = "luzdelsur"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._token: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None

    async def _post(self, path: str, request: dict) -> dict:
        return await self._request_json(
            "POST",
            f"{BASE_URL}/{path}",
            json={"request": request},
            headers={"Content-Type": "application/json; charset=utf-8"},
        )

    def _auth(self) -> dict:
        if not self._token:
            raise ProviderError("luzdelsur: not authenticated, login first")
        return {"Token": self._token, "Correo": self.email}

    async def login(self) -> bool:
        """Authenticate the user; returns whether the portal accepted the credentials."""
        data = await self._post(
            "Login/ValidarAcceso",
            {"password": self.password, "Correo": self.email, "Plataforma": "WEB"},
        )
        parsed = self._parse(_LoginResponse, data)
        if parsed.success and parsed.datos and parsed.datos.token:
            self._token = parsed.datos.token
        return self.is_authenticated

    async def get_supplies(self) -> list[str]:
        data = await self._post("InformacionGuardada/ListarSuministros", self._auth())
        parsed = self._parse(_SuppliesResponse, data)
        return [str(s.suministro) for s in parsed.datos.suministros] if parsed.datos else []

    async def get_latest_invoice(self, supply_number: str) -> _LatestInvoice | None:
        data = await self._post(
            "InformacionGuardada/ObtenerUltimaFacturacion",
            {**self._auth(), "Suministro": supply_number},
        )
        return self._parse(_LatestInvoiceResponse, data).datos

    async def fetch_statement(self) -> ElectricityStatement:
        """Decomposed latest invoice of the first supply; empty when unavailable."""
        if not self.has_credentials:
            logger.warning("Luz del Sur credentials not configured, skipping electricity")
            return ElectricityStatement()
        if not await self.login():
            logger.warning("Luz del Sur login rejected, skipping electricity")
            return ElectricityStatement()

        supplies = await self.get_supplies()
        if not supplies:
            logger.warning("Luz del Sur account has no supplies")
            return ElectricityStatement()

        supply = supplies[0]
        invoice = await self.get_latest_invoice(supply)
        if invoice is None:
            return ElectricityStatement(supply_number=supply)

        pending = invoice.saldoPendiente
        invoice_status = InvoiceStatus.PENDING if pending > PAID_THRESHOLD else InvoiceStatus.PAID
        return ElectricityStatement(
            supply_number=supply,
            billing_period=invoice.ultimaFacturacion,
            energy_cost=invoice.consumoEnergia,
            igv=invoice.igv,
            other_concepts=invoice.otrosConceptos + (invoice.noAfectoIGV or Decimal("0")),
            pending_balance=pending,
            debt=pending if invoice_status == InvoiceStatus.PENDING else Decimal("0"),
            invoices=[
                Invoice(
                    supply=supply,
                    amount=max(Decimal("0"), pending),
                    expiry=invoice.fechaVencimiento or "N/A",
                    status=invoice_status,
                )
            ],
        )
