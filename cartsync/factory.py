"""Wiring for a process-wide CartManager."""
from typing import Optional

from cartsync.cart import CartManager, FileSnapshotStore, MemorySnapshotStore, RedisSnapshotStore
from cartsync.cart.storage import SnapshotStore
from cartsync.config import STORAGE_FILE, STORAGE_REDIS, Settings, get_settings
from cartsync.db import get_redis
from cartsync.services import InventoryClient, LoggingNotifier, Notifier


def create_store(settings: Settings) -> SnapshotStore:
    """Build the snapshot store selected by CART_STORAGE_BACKEND."""
    if settings.storage_backend == STORAGE_FILE:
        return FileSnapshotStore(settings.storage_path, settings.storage_key)
    if settings.storage_backend == STORAGE_REDIS:
        return RedisSnapshotStore(get_redis(settings), settings.storage_key)
    return MemorySnapshotStore(settings.storage_key)


def create_cart_manager(
    settings: Optional[Settings] = None,
    notifier: Optional[Notifier] = None,
) -> CartManager:
    """
    Build the CartManager for this process.

    Call once at startup, `await manager.load()`, then pass the instance to
    every consumer.
    """
    settings = settings or get_settings()
    inventory = InventoryClient(settings.inventory_api_url, timeout=settings.inventory_timeout)
    return CartManager(
        inventory=inventory,
        store=create_store(settings),
        notifier=notifier or LoggingNotifier(settings.language),
    )
