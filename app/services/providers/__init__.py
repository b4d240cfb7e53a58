"""Utility portal clients and the bundle passed to the report aggregator."""

from dataclasses import dataclass

from app.core.config import Settings
from app.services.providers.base import ProviderClient, ProviderError
from app.services.providers.calidda import CaliddaClient
from app.services.providers.luzdelsur import LuzDelSurClient
from app.services.providers.sedapal import SedapalClient


@dataclass
class UtilitySources:
    """One data source per utility, constructed by the caller."""

    water: SedapalClient
    electricity: LuzDelSurClient
    gas: CaliddaClient

    @classmethod
    def from_settings(cls, settings: Settings) -> "UtilitySources":
        timeout = settings.PROVIDER_TIMEOUT
        return cls(
            water=SedapalClient(settings.SEDAPAL_EMAIL, settings.SEDAPAL_PASSWORD, timeout=timeout),
            electricity=LuzDelSurClient(
                settings.LUZDELSUR_EMAIL, settings.LUZDELSUR_PASSWORD, timeout=timeout
            ),
            gas=CaliddaClient(settings.CALIDDA_EMAIL, settings.CALIDDA_PASSWORD, timeout=timeout),
        )

    async def aclose(self) -> None:
        for source in (self.water, self.electricity, self.gas):
            await source.aclose()


__all__ = [
    "CaliddaClient",
    "LuzDelSurClient",
    "ProviderClient",
    "ProviderError",
    "SedapalClient",
    "UtilitySources",
]
