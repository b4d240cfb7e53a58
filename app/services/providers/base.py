"""Shared HTTP plumbing for the utility portal clients."""

import logging
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class ProviderError(Exception):
    """A utility portal could not be reached or returned an unusable response."""


class ProviderClient:
    """Base async client for a utility portal.

    Subclasses log in with the configured credentials and normalize the
    portal's responses into one statement record. The httpx client can be
    injected so tests can use a mock transport.
    """

    name = "provider"

    def __init__(
        self,
        email: str,
        password: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.email = email
        self.password = password
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def has_credentials(self) -> bool:
        return bool(self.email and self.password)

    async def _request_json(self, method: str, url: str, **kwargs: Any) -> Any:
        """Send a request and decode the JSON body, wrapping failures in ProviderError."""
        try:
            response = await self._client.request(method, url, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as e:
            raise ProviderError(f"{self.name}: {method} {url} failed: {e}") from e
        except ValueError as e:
            raise ProviderError(f"{self.name}: invalid JSON from {url}") from e

    def _parse(self, model: type[ModelT], data: Any) -> ModelT:
        """Validate a portal payload, wrapping unexpected shapes in ProviderError."""
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise ProviderError(f"{self.name}: unexpected {model.__name__} payload: {e}") from e

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
