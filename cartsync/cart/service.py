"""Cart manager: the single owner of cart state."""
import asyncio
import contextlib
import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional, Protocol

from cartsync.errors import (
    ERROR_INVALID_PAYLOAD,
    CartError,
    FetchFailure,
    InvalidAmount,
    NotFound,
    OutOfStock,
)
from cartsync.logging import get_logger, sanitize_id_for_logging
from cartsync.models import CatalogProduct, NotificationKind, Stock
from cartsync.services.notifications import Notifier
from .models import Cart, Product
from .storage import SnapshotStore

logger = get_logger(__name__)

CartListener = Callable[[Cart], Any]


def _matching(payload, product_id: int):
    """Reject inventory answers that describe a different product."""
    if payload.id != product_id:
        raise FetchFailure(
            f"{ERROR_INVALID_PAYLOAD}: asked for {product_id}, got {payload.id}", product_id
        )
    return payload


class Inventory(Protocol):
    """Catalog/stock source consumed by the cart."""

    async def get_product(self, product_id: int) -> CatalogProduct:
        ...

    async def get_stock(self, product_id: int) -> Stock:
        ...


@dataclass(frozen=True)
class CartResult:
    """Outcome of a cart operation."""
    ok: bool
    cart: Cart
    error: Optional[CartError] = None


class CartManager:
    """
    Owns the in-memory cart and keeps it in step with the snapshot store.

    Construct once per process and hand the instance to every consumer.
    Operations are serialized: a mutation holds the lock across its inventory
    fetches and the commit, so two concurrent adds cannot both pass the stock
    check on a stale amount.

    Failures never raise: state stays unchanged, the notifier is told, and
    the returned CartResult carries the error.
    """

    def __init__(
        self,
        inventory: Inventory,
        store: SnapshotStore,
        notifier: Notifier,
        cart: Optional[Cart] = None,
    ):
        self.inventory = inventory
        self.store = store
        self.notifier = notifier
        self._cart = cart if cart is not None else Cart()
        self._lock = asyncio.Lock()
        self._listeners: List[CartListener] = []

    @property
    def cart(self) -> Cart:
        return self._cart

    def get_cart(self) -> Cart:
        """Current cart."""
        return self._cart

    async def load(self) -> Cart:
        """Replace in-memory state with the persisted snapshot."""
        async with self._lock:
            self._cart = await self.store.load()
            logger.info(f"Loaded cart with {self._cart.size} products")
        await self._publish(self._cart)
        return self._cart

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """
        Call `listener(cart)` after every commit.

        Returns a function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def add_product(self, product_id: int) -> CartResult:
        """Add one unit of a product, fetching catalog data and checking stock."""

        async def plan(cart: Cart) -> Cart:
            catalog = _matching(await self.inventory.get_product(product_id), product_id)
            existing = cart.find(product_id)
            stock = _matching(await self.inventory.get_stock(product_id), product_id)

            required = 1 if existing is None else existing.amount + 1
            if stock.amount < required:
                raise OutOfStock(product_id, required, stock.amount)

            if existing is None:
                return cart.with_item(Product.from_catalog(catalog, amount=1))
            return cart.replace_item(existing.with_amount(required))

        return await self._run("add", NotificationKind.ADD_ERROR, product_id, plan)

    async def remove_product(self, product_id: int) -> CartResult:
        """Remove a product's line item."""

        async def plan(cart: Cart) -> Cart:
            if product_id not in cart:
                raise NotFound(product_id)
            return cart.without(product_id)

        return await self._run("remove", NotificationKind.REMOVE_ERROR, product_id, plan)

    async def update_product_amount(self, product_id: int, amount: int) -> CartResult:
        """Set a line item's amount after re-validating stock."""

        async def plan(cart: Cart) -> Cart:
            if isinstance(amount, bool) or not isinstance(amount, int) or amount < 1:
                raise InvalidAmount(product_id, amount)
            existing = cart.find(product_id)
            if existing is None:
                raise NotFound(product_id)

            stock = _matching(await self.inventory.get_stock(product_id), product_id)
            if stock.amount < amount:
                raise OutOfStock(product_id, amount, stock.amount)

            return cart.replace_item(existing.with_amount(amount))

        return await self._run("update", NotificationKind.UPDATE_ERROR, product_id, plan)

    async def aclose(self) -> None:
        """Release the inventory client, if it holds resources."""
        close = getattr(self.inventory, "aclose", None)
        if close is not None:
            await close()

    async def __aenter__(self) -> "CartManager":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _run(
        self,
        operation: str,
        error_kind: NotificationKind,
        product_id: int,
        plan: Callable[[Cart], Awaitable[Cart]],
    ) -> CartResult:
        safe_id = sanitize_id_for_logging(product_id)
        async with self._lock:
            try:
                updated = await plan(self._cart)
                await self._commit(updated)
            except CartError as e:
                logger.warning(f"Cart {operation} failed for product {safe_id}: {type(e).__name__}: {e}")
                await self._notify(e.notification_kind(error_kind))
                return CartResult(ok=False, cart=self._cart, error=e)
            committed = self._cart

        logger.info(f"Cart {operation} committed for product {safe_id} ({committed.total_items} items)")
        await self._publish(committed)
        return CartResult(ok=True, cart=committed)

    async def _commit(self, cart: Cart) -> None:
        """
        Persist, then swap memory.

        A failed save leaves memory as it was. A cancelled caller still waits
        for a write that is already under way, so memory ends up matching
        whatever the store holds.
        """
        save = asyncio.ensure_future(self.store.save(cart))
        try:
            await asyncio.shield(save)
        except asyncio.CancelledError:
            with contextlib.suppress(CartError):
                await save
                self._cart = cart
            raise
        self._cart = cart

    async def _notify(self, kind: NotificationKind) -> None:
        try:
            await self.notifier.notify(kind)
        except Exception:
            logger.exception(f"Notifier failed to deliver {kind.value}")

    async def _publish(self, cart: Cart) -> None:
        for listener in list(self._listeners):
            try:
                result = listener(cart)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Cart listener failed")
