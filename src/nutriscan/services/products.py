"""Product lookup service backed by the Open Food Facts database."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol

from nutriscan.domain.errors import ProductNotFoundError
from nutriscan.domain.products import Product
from nutriscan.services.cache import Cache

LOOKUP_FIELDS = (
    "product_name",
    "image_front_url",
    "nutriments",
    "nutriscore_grade",
    "serving_size",
    "ingredients_text",
    "allergens_from_ingredients",
)

_logger = logging.getLogger(__name__)


class ProductClient(Protocol):
    """Interface for product database interactions."""

    async def fetch_product(self, barcode: str, fields: tuple[str, ...]) -> dict[str, object]:
        """Return the raw product payload for a barcode."""


@dataclass
class ProductService:
    """Barcode lookups with caching and a short retry."""

    client: ProductClient
    cache: Cache
    ttl_seconds: int = 86400
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def lookup(self, barcode: str) -> Product:
        """Return the product for a barcode or raise ProductNotFoundError."""
        cleaned = barcode.strip()
        if not cleaned:
            raise ValueError("Barcode cannot be empty.")
        cache_key = f"off:product:{cleaned}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, Product):
            return cached

        payload = await self._call_with_retry(
            lambda: self.client.fetch_product(cleaned, LOOKUP_FIELDS),
            action=f"lookup:{cleaned}",
        )
        raw_product = payload.get("product")
        if payload.get("status") != 1 or not isinstance(raw_product, dict):
            _logger.info(
                "Product not found: barcode=%s status=%s",
                cleaned,
                payload.get("status_verbose"),
            )
            raise ProductNotFoundError(cleaned)
        product = _to_product(cleaned, raw_product)
        self.cache.set(cache_key, product, ttl_seconds=self.ttl_seconds)
        return product

    async def _call_with_retry(
        self, func: Callable[[], Awaitable[dict[str, object]]], *, action: str
    ) -> dict[str, object]:
        """Call the client, retrying transient failures a limited number of times."""
        attempt = 0
        while True:
            try:
                return await func()
            except ProductNotFoundError:
                raise
            except Exception as exc:
                attempt += 1
                _logger.warning(
                    "Product %s failed (attempt %s/%s, status=%s): %s",
                    action,
                    attempt,
                    self.retry_attempts + 1,
                    _status_code_from_exception(exc),
                    exc,
                )
                if attempt > self.retry_attempts:
                    raise
                await asyncio.sleep(self.retry_delay_seconds)


def _status_code_from_exception(exc: Exception) -> str:
    """Extract HTTP status code from an exception, if available."""
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"


def _to_product(barcode: str, raw: dict[str, object]) -> Product:
    nutriments = raw.get("nutriments") or {}
    per_100g: dict[str, float] = {}
    if isinstance(nutriments, dict):
        for key, value in nutriments.items():
            if not key.endswith("_100g"):
                continue
            number = _to_float(value)
            if number is not None:
                per_100g[key] = number
    return Product(
        barcode=barcode,
        name=_optional_str(raw.get("product_name")),
        nutriments=per_100g,
        serving_size=_optional_str(raw.get("serving_size")),
        ingredients_text=_optional_str(raw.get("ingredients_text")),
        allergens_from_ingredients=_optional_str(raw.get("allergens_from_ingredients")),
        nutriscore_grade=_optional_str(raw.get("nutriscore_grade")),
        image_front_url=_optional_str(raw.get("image_front_url")),
    )


def _to_float(value: object) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _optional_str(value: object) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None
