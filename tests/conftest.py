"""Pytest configuration and fixtures"""
import os
from typing import Dict, List, Set

import pytest

# Set test environment variables before cartsync configures logging
os.environ.setdefault("LOG_LEVEL", "WARNING")

from cartsync.cart import CartManager, MemorySnapshotStore
from cartsync.errors import FetchFailure
from cartsync.models import CatalogProduct, Stock
from cartsync.services import RecordingNotifier


class FakeInventory:
    """In-memory catalog/stock source with switchable failures."""

    def __init__(self, products: Dict[int, dict], stock: Dict[int, int]):
        self.products = products
        self.stock = stock
        self.failing_products: Set[int] = set()
        self.failing_stock: Set[int] = set()
        # product id -> id the stock endpoint reports instead
        self.stock_ids: Dict[int, int] = {}
        self.calls: List[tuple] = []

    async def get_product(self, product_id: int) -> CatalogProduct:
        self.calls.append(("product", product_id))
        if product_id in self.failing_products or product_id not in self.products:
            raise FetchFailure("Inventory request failed: HTTP 404", product_id)
        return CatalogProduct.model_validate(self.products[product_id])

    async def get_stock(self, product_id: int) -> Stock:
        self.calls.append(("stock", product_id))
        if product_id in self.failing_stock or product_id not in self.stock:
            raise FetchFailure("Inventory request failed: ConnectError", product_id)
        return Stock(id=self.stock_ids.get(product_id, product_id), amount=self.stock[product_id])


@pytest.fixture
def sample_products():
    """Catalog entries as served by the inventory API"""
    return {
        1: {
            "id": 1,
            "title": "Tênis de Caminhada Leve Confortável",
            "price": 179.9,
            "image": "https://cdn.example.com/shoes/1.jpg",
        },
        2: {
            "id": 2,
            "title": "Tênis VR Caminhada Confortável Detalhes Couro Masculino",
            "price": 139.9,
            "image": "https://cdn.example.com/shoes/2.jpg",
        },
        3: {
            "id": 3,
            "title": "Tênis Adidas Duramo Lite 2.0",
            "price": 219.9,
            "image": "https://cdn.example.com/shoes/3.jpg",
        },
    }


@pytest.fixture
def inventory(sample_products):
    """Fake inventory with 5, 2 and 0 units in stock"""
    return FakeInventory(sample_products, {1: 5, 2: 2, 3: 0})


@pytest.fixture
def store():
    """Empty in-memory snapshot store"""
    return MemorySnapshotStore("@RocketShoes:cart")


@pytest.fixture
def notifier():
    """Notifier that records every message"""
    return RecordingNotifier(language="en")


@pytest.fixture
def manager(inventory, store, notifier):
    """Cart manager over the fakes"""
    return CartManager(inventory=inventory, store=store, notifier=notifier)

