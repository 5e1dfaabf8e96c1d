"""
Pydantic Models - Inventory Payloads and Notification Kinds

Contains the schemas shared across cartsync:
- Notification kinds emitted by the cart manager
- Catalog and stock payloads returned by the inventory API
"""

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


# ============================================================
# Enums
# ============================================================

class NotificationKind(str, Enum):
    """User-facing failure messages emitted by cart operations."""
    ADD_ERROR = "add_error"  # Product could not be added
    REMOVE_ERROR = "remove_error"  # Product not in cart
    UPDATE_ERROR = "update_error"  # Invalid amount or product not in cart
    OUT_OF_STOCK = "out_of_stock"  # Requested amount exceeds stock
    PERSISTENCE_ERROR = "persistence_error"  # Snapshot could not be saved


# ============================================================
# Inventory API Models
# ============================================================

class CatalogProduct(BaseModel):
    """Catalog entry returned by GET /products/{id}."""
    model_config = ConfigDict(extra="ignore")

    id: int = Field(description="Catalog product id")
    title: str = Field(description="Product title")
    price: Decimal = Field(description="Unit price", ge=0)
    image: str = Field(default="", description="Product image URL")


class Stock(BaseModel):
    """Available inventory returned by GET /stock/{id}."""
    model_config = ConfigDict(extra="ignore")

    id: int = Field(description="Catalog product id")
    amount: int = Field(description="Units available", ge=0)
