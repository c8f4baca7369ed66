"""Open Food Facts product API client."""

from dataclasses import dataclass

import httpx

from nutriscan.services.products import ProductClient


@dataclass
class HttpxOpenFoodFactsClient(ProductClient):
    """HTTPX-backed Open Food Facts client."""

    base_url: str
    user_agent: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, base_url: str, user_agent: str) -> "HttpxOpenFoodFactsClient":
        """Create a client with a managed httpx session."""
        return cls(
            base_url=base_url,
            user_agent=user_agent,
            http_client=httpx.AsyncClient(headers={"User-Agent": user_agent}),
        )

    async def fetch_product(
        self, barcode: str, fields: tuple[str, ...]
    ) -> dict[str, object]:
        """Fetch a product by barcode, limited to ``fields``.

        Unknown barcodes come back as 404 with a ``status: 0`` body, which is
        returned rather than raised.
        """
        url = f"{self.base_url}/product/{barcode}.json"
        response = await self.http_client.get(
            url,
            params={"fields": ",".join(fields)},
            timeout=15,
        )
        if response.status_code == httpx.codes.NOT_FOUND:
            return {"status": 0, "status_verbose": "product not found"}
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
