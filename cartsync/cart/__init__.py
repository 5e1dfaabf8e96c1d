"""Cart package: models, snapshot storage, and the cart manager."""
from .models import Product, Cart
from .service import CartManager, CartResult
from .storage import FileSnapshotStore, MemorySnapshotStore, RedisSnapshotStore, SnapshotStore

__all__ = [
    "Product",
    "Cart",
    "CartManager",
    "CartResult",
    "SnapshotStore",
    "FileSnapshotStore",
    "MemorySnapshotStore",
    "RedisSnapshotStore",
]
