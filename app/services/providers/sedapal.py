"""SEDAPAL client - Lima water service.

https://webapp16.sedapal.com.pe/OficinaComercialVirtual
"""

import logging
from decimal import Decimal

from pydantic import BaseModel

from app.models.enums import InvoiceStatus
from app.schemas.report import Invoice, WaterStatement
from app.services.providers.base import ProviderClient, ProviderError

logger = logging.getLogger(__name__)

BASE_URL = "https://webapp16.sedapal.com.pe/OficinaComercialVirtual/api"

# Public credentials of the portal's own web frontend
SYSTEM_USERNAME = "OCV_Sedapal"
SYSTEM_PASSWORD = "OCV0109"


class _SystemToken(BaseModel):
    token: str | None = None


class _SystemLoginResponse(BaseModel):
    nRESP_SP: int = 0
    cRESP_SP: str | None = None
    bRESP: _SystemToken | None = None


class _UserSession(BaseModel):
    id_cliente: int = 0
    nis_rad: int | None = None


class _UserLoginResponse(BaseModel):
    nRESP_SP: int = 0
    cRESP_SP: str | None = None
    bRESP: _UserSession | None = None


class _Receipt(BaseModel):
    total_fact: Decimal = Decimal("0")
    vencimiento: str | None = None


class _ReceiptsResponse(BaseModel):
    bRESP: list[_Receipt] | None = None


class SedapalClient(ProviderClient):
    """Water invoices of the residence's supply (NIS)."""

    name = "sedapal"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._system_token: str | None = None
        self._session: _UserSession | None = None

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None and self._session.id_cliente > 0

    @property
    def supply_number(self) -> int | None:
        return self._session.nis_rad if self._session else None

    async def system_login(self) -> str:
        """Obtain the portal token that authorizes every other call."""
        data = await self._request_json(
            "POST",
            f"{BASE_URL}/login",
            data={"username": SYSTEM_USERNAME, "password": SYSTEM_PASSWORD},
        )
        parsed = self._parse(_SystemLoginResponse, data)
        if parsed.nRESP_SP != 1 or not parsed.bRESP or not parsed.bRESP.token:
            raise ProviderError(f"sedapal: system login failed: {parsed.cRESP_SP}")
        self._system_token = parsed.bRESP.token
        return self._system_token

    async def _ensure_system_token(self) -> str:
        if not self._system_token:
            await self.system_login()
        return self._system_token

    async def login(self) -> bool:
        """Authenticate the user; returns whether the portal accepted the credentials."""
        token = await self._ensure_system_token()
        data = await self._request_json(
            "POST",
            f"{BASE_URL}/autenticacion-usuario/aut-nuevo-usu",
            json={"correo": self.email, "clave": self.password, "flagChannel": "1"},
            headers={"Authorization": token},
        )
        parsed = self._parse(_UserLoginResponse, data)
        if parsed.nRESP_SP == 1:
            self._session = parsed.bRESP
        return self.is_authenticated

    async def get_receipts(self, page_num: int = 1, page_size: int = 10) -> list[_Receipt]:
        """List unpaid receipts of the authenticated supply."""
        if not self.supply_number:
            raise ProviderError("sedapal: supply number required, login first")
        token = await self._ensure_system_token()
        data = await self._request_json(
            "POST",
            f"{BASE_URL}/recibos/lista-recibos-deudas-nis",
            json={"nis_rad": self.supply_number, "page_num": page_num, "page_size": page_size},
            headers={"Authorization": token},
        )
        return self._parse(_ReceiptsResponse, data).bRESP or []

    async def fetch_statement(self) -> WaterStatement:
        """Water total and invoices; empty when the account is unavailable."""
        if not self.has_credentials:
            logger.warning("SEDAPAL credentials not configured, skipping water")
            return WaterStatement()
        if not await self.login():
            logger.warning("SEDAPAL login rejected, skipping water")
            return WaterStatement()

        supply = str(self.supply_number)
        receipts = await self.get_receipts()
        total = sum((r.total_fact for r in receipts), Decimal("0"))
        return WaterStatement(
            supply_number=supply,
            total=total,
            debt=total,
            invoices=[
                Invoice(
                    supply=supply,
                    amount=r.total_fact,
                    expiry=r.vencimiento or "",
                    status=InvoiceStatus.PENDING,
                )
                for r in receipts
            ],
        )
