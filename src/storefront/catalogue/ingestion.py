"""Catalogue ingestion — normalizes fetched products and seeds inventory.

Whether a product can only be bought with points is decided here, once.
The catalogue marks it loosely (a ``dust_only`` metadata flag written as
true, "true", "1" or 1, a ``dust-only`` tag, or a points-denominated
price); downstream code only sees the resolved ``points_only`` boolean.
"""

from dataclasses import dataclass, field

import structlog
from protean.utils.globals import current_domain

from storefront import config
from storefront.catalogue.client import MedusaCatalogueClient
from storefront.inventory.initialization import InitializeStock
from storefront.shared.money import CurrencyFamily, currency_family, normalize_currency_code

logger = structlog.get_logger(__name__)

POINTS_ONLY_TAG = "dust-only"
_TRUTHY = {"true", "1", "yes"}


@dataclass(frozen=True)
class CataloguePrice:
    amount: int
    currency_code: str


@dataclass(frozen=True)
class CatalogueVariant:
    id: str
    title: str
    sku: str
    prices: tuple[CataloguePrice, ...]
    inventory_quantity: int = 0


@dataclass(frozen=True)
class CatalogueProduct:
    id: str
    title: str
    points_only: bool
    points_price: int | None
    variants: tuple[CatalogueVariant, ...]
    description: str = ""
    handle: str | None = None
    tags: tuple[str, ...] = field(default_factory=tuple)
    images: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "handle": self.handle,
            "points_only": self.points_only,
            "points_price": self.points_price,
            "tags": list(self.tags),
            "images": list(self.images),
            "variants": [
                {
                    "id": variant.id,
                    "title": variant.title,
                    "sku": variant.sku,
                    "prices": [
                        {"amount": price.amount, "currency_code": price.currency_code} for price in variant.prices
                    ],
                }
                for variant in self.variants
            ],
        }


def _is_truthy(value) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int | float):
        return value == 1
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    return False


def _points_price(metadata: dict, variants) -> int | None:
    raw = metadata.get("dust_price")
    if raw not in (None, ""):
        try:
            return int(raw)
        except (TypeError, ValueError):
            logger.warning("Ignoring unparseable dust_price", dust_price=raw)

    for variant in variants:
        for price in variant.prices:
            if currency_family(price.currency_code) == CurrencyFamily.POINTS:
                return price.amount
    return None


def normalize_product(raw: dict) -> CatalogueProduct:
    variants = tuple(
        CatalogueVariant(
            id=str(variant["id"]),
            title=variant.get("title") or raw.get("title") or "",
            sku=variant.get("sku") or "",
            prices=tuple(
                CataloguePrice(
                    amount=int(price.get("amount") or 0),
                    currency_code=normalize_currency_code(price.get("currency_code") or config.DEFAULT_CURRENCY),
                )
                for price in variant.get("prices") or []
            ),
            inventory_quantity=int(variant.get("inventory_quantity") or 0),
        )
        for variant in raw.get("variants") or []
    )
    metadata = raw.get("metadata") or {}
    tags = tuple(tag for tag in raw.get("tags") or [] if tag)

    points_priced = bool(variants and variants[0].prices) and all(
        currency_family(price.currency_code) == CurrencyFamily.POINTS for price in variants[0].prices
    )
    points_only = _is_truthy(metadata.get("dust_only")) or POINTS_ONLY_TAG in tags or points_priced

    return CatalogueProduct(
        id=str(raw["id"]),
        title=raw.get("title") or "",
        description=raw.get("description") or "",
        handle=raw.get("handle"),
        points_only=points_only,
        points_price=_points_price(metadata, variants) if points_only else None,
        variants=variants,
        tags=tags,
        images=tuple(raw.get("images") or []),
    )


def ingest_products(products, default_quantity: int | None = None) -> int:
    """Create inventory records for variants not seen before.

    Returns the number of newly initialized variants.
    """
    default_quantity = default_quantity or config.default_stock_quantity()
    initialized = 0
    for product in products:
        for variant in product.variants:
            created = current_domain.process(
                InitializeStock(
                    variant_id=variant.id,
                    product_id=product.id,
                    sku=variant.sku,
                    quantity=variant.inventory_quantity or default_quantity,
                ),
                asynchronous=False,
            )
            if created:
                initialized += 1

    logger.info("Inventory seeded from catalogue", initialized=initialized)
    return initialized


def refresh_catalogue(client=None) -> list[CatalogueProduct]:
    """Fetch products from the catalogue backend and seed their inventory."""
    client = client or MedusaCatalogueClient()
    products = [normalize_product(raw) for raw in client.list_products()]
    ingest_products(products)
    return products
