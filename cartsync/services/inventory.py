"""
Inventory Client

Read-only access to the catalog/stock API:
- GET /products/{id} -> catalog data
- GET /stock/{id}    -> available units

Every failure (transport error, timeout, non-2xx status, malformed body)
surfaces as FetchFailure.
"""
from typing import Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from cartsync.errors import ERROR_FETCH_FAILED, ERROR_INVALID_PAYLOAD, FetchFailure
from cartsync.logging import get_logger, sanitize_string_for_logging
from cartsync.models import CatalogProduct, Stock

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class InventoryClient:
    """Async client for the catalog and stock endpoints."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize inventory client.

        Args:
            base_url: API root, e.g. "http://localhost:3333"
            timeout: Request timeout in seconds
            client: Optional pre-built httpx client (not closed by aclose)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get HTTP client (lazy initialization)."""
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "InventoryClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def get_product(self, product_id: int) -> CatalogProduct:
        """Fetch catalog data for a product."""
        return await self._get(f"/products/{product_id}", CatalogProduct, product_id)

    async def get_stock(self, product_id: int) -> Stock:
        """Fetch current stock for a product."""
        return await self._get(f"/stock/{product_id}", Stock, product_id)

    async def _get(self, path: str, model: Type[ModelT], product_id: int) -> ModelT:
        url = f"{self.base_url}{path}"
        try:
            response = await self.client.get(url, timeout=self.timeout)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            body = sanitize_string_for_logging(e.response.text)
            logger.warning(f"Inventory GET {path} returned {e.response.status_code}: {body}")
            raise FetchFailure(
                f"{ERROR_FETCH_FAILED}: HTTP {e.response.status_code}", product_id
            ) from e
        except httpx.HTTPError as e:
            logger.warning(f"Inventory GET {path} failed: {type(e).__name__}: {e}")
            raise FetchFailure(f"{ERROR_FETCH_FAILED}: {type(e).__name__}", product_id) from e

        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.warning(f"Inventory GET {path} returned an invalid payload: {e}")
            raise FetchFailure(ERROR_INVALID_PAYLOAD, product_id) from e
