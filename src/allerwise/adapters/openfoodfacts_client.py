"""OpenFoodFacts product API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

FOUND_STATUS = 1


class ProductClient(Protocol):
    """Interface for barcode product lookups."""

    async def fetch_product(self, barcode: str) -> dict[str, object] | None:
        """Return the raw product object, or None when the barcode is unknown."""


@dataclass
class HttpxOpenFoodFactsClient(ProductClient):
    """HTTPX-backed OpenFoodFacts client."""

    base_url: str
    user_agent: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, base_url: str, user_agent: str) -> "HttpxOpenFoodFactsClient":
        """Create a client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            user_agent=user_agent,
            http_client=httpx.AsyncClient(),
        )

    async def fetch_product(self, barcode: str) -> dict[str, object] | None:
        """Fetch a product by barcode from the v0 product endpoint."""
        url = f"{self.base_url}/api/v0/product/{barcode}.json"
        response = await self.http_client.get(
            url,
            headers={"User-Agent": self.user_agent},
            timeout=15,
        )
        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        response.raise_for_status()
        payload = response.json()
        product = payload.get("product")
        if payload.get("status") != FOUND_STATUS or not isinstance(product, dict):
            return None
        return product

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
