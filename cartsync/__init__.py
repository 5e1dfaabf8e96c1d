"""
cartsync - Inventory-Aware Persistent Cart

This package contains the cart components:
- cart: cart models, snapshot stores and the CartManager state owner
- services: inventory HTTP client and user notifications
- config: environment-driven settings
- i18n: notification texts

Note: Imports are lazy so that importing a single submodule
does not pull in httpx or the Redis client.
"""

__all__ = [
    "Cart",
    "CartManager",
    "Product",
    "create_cart_manager",
]


def __getattr__(name):
    """Lazy attribute access."""
    if name == "Cart":
        from cartsync.cart import Cart
        return Cart
    elif name == "Product":
        from cartsync.cart import Product
        return Product
    elif name == "CartManager":
        from cartsync.cart import CartManager
        return CartManager
    elif name == "create_cart_manager":
        from cartsync.factory import create_cart_manager
        return create_cart_manager
    raise AttributeError(f"module 'cartsync' has no attribute '{name}'")
