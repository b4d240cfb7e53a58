"""Calidda client - Lima natural gas service.

https://www.calidda.com.pe
"""

import asyncio
import logging
from decimal import Decimal

from pydantic import BaseModel

from app.models.enums import InvoiceStatus
from app.schemas.report import GasFloorAmount, GasStatement, Invoice
from app.services.providers.base import ProviderClient, ProviderError

logger = logging.getLogger(__name__)

BASE_URL = "https://appadmin.calidda.com.pe/Back/api"
BASE_URL_OV = "https://appadmin.calidda.com.pe/BackOV/api"

WEB_PLATFORM = 2


class _StringResponse(BaseModel):
    valid: bool = False
    message: str | None = None
    data: str | None = None


class _Account(BaseModel):
    clientCode: str
    installationNumber: str | None = None
    isMain: bool = False


class _AccountsResponse(BaseModel):
    valid: bool = False
    data: list[_Account] | None = None


class _Address(BaseModel):
    houseFloorNumber: str | None = None


class _BasicData(BaseModel):
    supplyAddress: _Address | None = None


class _BasicDataResponse(BaseModel):
    data: _BasicData | None = None


class _AccountStatement(BaseModel):
    totalDebt: Decimal = Decimal("0")
    lastBillDueDate: str | None = None


class _AccountStatementResponse(BaseModel):
    data: _AccountStatement | None = None


class CaliddaClient(ProviderClient):
    """Gas debt of every account, tagged with the floor of its supply address."""

    name = "calidda"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._access_token: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self._access_token is not None

    def _auth_headers(self) -> dict[str, str]:
        if not self._access_token:
            raise ProviderError("calidda: not authenticated, login first")
        return {
            "Accept": "application/json, text/plain, */*",
            "Authorization": f"Bearer {self._access_token}",
        }

    async def login(self) -> bool:
        """Two-step login: temporary access id, then bearer token."""
        data = await self._request_json(
            "POST",
            f"{BASE_URL}/Login/TemporaryAccessV2",
            json={
                "username": self.email,
                "password": self.password,
                "platform": WEB_PLATFORM,
                "ctaCto": "",
            },
        )
        access = self._parse(_StringResponse, data)
        if not access.valid or not access.data:
            return False

        data = await self._request_json(
            "GET",
            f"{BASE_URL}/Login/TemporaryAccessToken",
            params={"temporaryAccessId": access.data},
            headers={"Accept": "application/json, text/plain, */*", "Authorization": "Bearer null"},
        )
        token = self._parse(_StringResponse, data)
        if token.valid and token.data:
            self._access_token = token.data
        return self.is_authenticated

    async def get_accounts(self) -> list[_Account]:
        data = await self._request_json(
            "GET", f"{BASE_URL_OV}/Account/List", headers=self._auth_headers()
        )
        return self._parse(_AccountsResponse, data).data or []

    async def get_basic_data(self, client_code: str) -> _BasicData | None:
        data = await self._request_json(
            "GET",
            f"{BASE_URL_OV}/Account/GetBasicData",
            params={"clientCode": client_code},
            headers=self._auth_headers(),
        )
        return self._parse(_BasicDataResponse, data).data

    async def get_account_statement(self, client_code: str) -> _AccountStatement | None:
        data = await self._request_json(
            "GET",
            f"{BASE_URL_OV}/Account/GetAccountStatement",
            params={"clientCode": client_code},
            headers=self._auth_headers(),
        )
        return self._parse(_AccountStatementResponse, data).data

    async def _fetch_account(self, account: _Account) -> tuple[GasFloorAmount, Invoice]:
        basic, statement = await asyncio.gather(
            self.get_basic_data(account.clientCode),
            self.get_account_statement(account.clientCode),
        )
        floor = "?"
        if basic and basic.supplyAddress and basic.supplyAddress.houseFloorNumber:
            floor = basic.supplyAddress.houseFloorNumber.strip()
        amount = statement.totalDebt if statement else Decimal("0")
        due = (statement.lastBillDueDate or "") if statement else ""

        invoice = Invoice(
            code=account.clientCode.lstrip("0") or account.clientCode,
            amount=amount,
            expiry=due.split("T")[0],
            status=InvoiceStatus.PENDING if amount > 0 else InvoiceStatus.PAID,
        )
        return GasFloorAmount(floor=floor, amount=amount), invoice

    async def fetch_statement(self) -> GasStatement:
        """Gas amounts per floor; empty when the account is unavailable."""
        if not self.has_credentials:
            logger.warning("Calidda credentials not configured, skipping gas")
            return GasStatement()
        if not await self.login():
            logger.warning("Calidda login rejected, skipping gas")
            return GasStatement()

        accounts = await self.get_accounts()
        results = await asyncio.gather(*(self._fetch_account(a) for a in accounts))
        floors = [floor for floor, _ in results]
        invoices = [invoice for _, invoice in results]
        total = sum((f.amount for f in floors), Decimal("0"))
        return GasStatement(
            total=total,
            debt=sum((f.amount for f in floors if f.amount > 0), Decimal("0")),
            floors=floors,
            invoices=invoices,
        )
