from dataclasses import dataclass
from typing import Optional

import httpx

from foodinventory.core.config import settings
from foodinventory.core.errors import CatalogError


@dataclass(frozen=True)
class CatalogProduct:
    barcode: str
    name: str
    category: Optional[str] = None
    image_url: Optional[str] = None


def parse_product(barcode: str, payload: dict) -> Optional[CatalogProduct]:
    """
    Map an Open Food Facts v2 product response to a CatalogProduct.

    Returns None when the catalog reports the barcode as unknown (status 0).
    Only the first category tag is kept. A product without a name is named
    after its barcode.
    """
    if not isinstance(payload, dict):
        raise CatalogError(f"Unexpected catalog response for EAN {barcode}")
    try:
        status = int(payload.get("status") or 0)
    except (TypeError, ValueError):
        raise CatalogError(f"Unexpected catalog status for EAN {barcode}: {payload.get('status')!r}")
    if status == 0:
        return None

    product = payload.get("product") or {}
    name = (product.get("product_name") or "").strip() or barcode
    tags = product.get("categories_tags") or []
    category = tags[0] if tags else None
    image_url = product.get("image_front_small_url") or None
    return CatalogProduct(barcode=barcode, name=name, category=category, image_url=image_url)


class OpenFoodFactsCatalog:
    """Barcode lookups against the Open Food Facts API.

    The caller owns the httpx client; lookups carry no timeout of their own
    beyond what the client is configured with.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str = settings.catalog_base_url,
        user_agent: str = settings.catalog_user_agent,
    ):
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent

    async def lookup(self, barcode: str) -> Optional[CatalogProduct]:
        url = f"{self.base_url}/api/v2/product/{barcode}"
        try:
            response = await self.client.get(url, headers={"User-Agent": self.user_agent})
        except httpx.TimeoutException:
            raise
        except httpx.HTTPError as e:
            raise CatalogError(f"Catalog request failed for EAN {barcode}: {e}") from e

        # Unknown products come back as 404 with a status 0 body
        if response.status_code not in (200, 404):
            raise CatalogError(
                f"Catalog returned HTTP {response.status_code} for EAN {barcode}"
            )
        try:
            payload = response.json()
        except ValueError as e:
            if response.status_code == 404:
                return None
            raise CatalogError(f"Catalog returned invalid JSON for EAN {barcode}") from e
        return parse_product(barcode, payload)


def create_catalog_client() -> httpx.AsyncClient:
    """Shared HTTP client for the application lifetime."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(10.0, connect=5.0),
        limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
        follow_redirects=True,
    )
