"""HTTP client for the Medusa store API.

Fetches products with region pricing. Transport failures and error
responses surface as UpstreamUnavailable; the client never substitutes
fallback products.
"""

from typing import Any

import httpx
import structlog

from storefront import config
from storefront.errors import UpstreamUnavailable

logger = structlog.get_logger(__name__)


class MedusaCatalogueClient:
    def __init__(
        self,
        base_url: str | None = None,
        publishable_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url or config.medusa_backend_url()
        self.publishable_key = publishable_key or config.medusa_publishable_key()
        self.timeout = timeout or config.medusa_timeout()
        self._transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self.base_url,
            timeout=self.timeout,
            headers={"x-publishable-api-key": self.publishable_key or ""},
            transport=self._transport,
        )

    def _get(self, client: httpx.Client, path: str, params: dict | None = None) -> httpx.Response:
        try:
            return client.get(path, params=params)
        except httpx.RequestError as exc:
            logger.error("Catalogue backend unavailable", url=self.base_url, path=path, error=str(exc))
            raise UpstreamUnavailable("Catalogue backend unavailable", {"backend": self.base_url}) from exc

    def list_products(self, limit: int = 100) -> list[dict[str, Any]]:
        """Products in the default region, with prices in minor units."""
        if not self.publishable_key:
            raise UpstreamUnavailable(
                "Catalogue backend not configured: MEDUSA_PUBLISHABLE_API_KEY is required",
                {"backend": self.base_url},
            )

        with self._client() as client:
            region_id, currency_code = self._default_region(client)

            params: dict[str, Any] = {"limit": limit}
            if region_id:
                params["region_id"] = region_id
            response = self._get(client, "/store/products", params=params)

        if response.status_code != 200:
            logger.error("Catalogue fetch failed", status_code=response.status_code)
            raise UpstreamUnavailable(
                f"Failed to fetch products: {response.status_code}",
                {"backend": self.base_url, "status": response.status_code},
            )

        products = response.json().get("products") or []
        logger.info("Catalogue fetched", count=len(products), region_id=region_id)
        return [_transform_product(product, currency_code) for product in products]

    def _default_region(self, client: httpx.Client) -> tuple[str | None, str]:
        response = self._get(client, "/store/regions")
        if response.status_code != 200:
            logger.warning("Region lookup failed, pricing without region", status_code=response.status_code)
            return None, config.DEFAULT_CURRENCY

        regions = response.json().get("regions") or []
        if not regions:
            return None, config.DEFAULT_CURRENCY
        region = regions[0]
        return region.get("id"), region.get("currency_code") or config.DEFAULT_CURRENCY


def _variant_prices(variant: dict, currency_code: str) -> list[dict]:
    calculated = variant.get("calculated_price")
    if isinstance(calculated, int | float) and not isinstance(calculated, bool):
        amount, code = calculated, currency_code
    elif isinstance(calculated, dict):
        amount = calculated.get("calculated_amount")
        if amount is None:
            amount = calculated.get("original_amount") or 0
        code = calculated.get("currency_code") or currency_code
    else:
        amount = None

    if amount is not None:
        # Calculated prices come in major units
        return [{"amount": round(amount * 100), "currency_code": code}]

    prices = variant.get("prices") or []
    if prices:
        return [
            {"amount": price.get("amount") or 0, "currency_code": price.get("currency_code") or currency_code}
            for price in prices
        ]
    return [{"amount": 0, "currency_code": currency_code}]


def _transform_product(product: dict, currency_code: str) -> dict:
    variants = [
        {
            "id": variant["id"],
            "title": variant.get("title") or product.get("title"),
            "sku": variant.get("sku") or "",
            "prices": _variant_prices(variant, currency_code),
            "inventory_quantity": variant.get("inventory_quantity") or 0,
        }
        for variant in product.get("variants") or []
    ]
    tags = [
        tag if isinstance(tag, str) else (tag.get("value") or tag.get("name") or "")
        for tag in product.get("tags") or []
    ]
    return {
        "id": product["id"],
        "title": product.get("title") or "",
        "description": product.get("description") or "",
        "handle": product.get("handle"),
        "status": product.get("status"),
        "images": [image.get("url") if isinstance(image, dict) else image for image in product.get("images") or []],
        "metadata": product.get("metadata") or {},
        "tags": tags,
        "variants": variants,
    }
