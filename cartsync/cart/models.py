"""Cart models with Decimal-based pricing."""
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Iterable, Iterator, List, Optional, Tuple

from cartsync.models import CatalogProduct
from cartsync.money import multiply, parse_decimal, round_money, to_decimal, to_json_number


@dataclass(frozen=True)
class Product:
    """Single line item in the cart."""
    id: int
    title: str
    price: Decimal
    image: str
    amount: int = 1

    def __post_init__(self):
        if isinstance(self.id, bool) or not isinstance(self.id, int):
            raise TypeError(f"product id must be an integer, got {self.id!r}")
        if isinstance(self.amount, bool) or not isinstance(self.amount, int):
            raise TypeError(f"amount must be an integer, got {self.amount!r}")
        if self.amount < 1:
            raise ValueError(f"amount must be at least 1, got {self.amount}")
        # Normalize numeric fields
        object.__setattr__(self, "price", to_decimal(self.price))

    @property
    def total_price(self) -> Decimal:
        """Price for all units of this line item."""
        return round_money(multiply(self.price, self.amount))

    def with_amount(self, amount: int) -> "Product":
        return replace(self, amount=amount)

    @classmethod
    def from_catalog(cls, catalog: CatalogProduct, amount: int = 1) -> "Product":
        """Create a line item from catalog data."""
        return cls(
            id=catalog.id,
            title=catalog.title,
            price=catalog.price,
            image=catalog.image,
            amount=amount,
        )

    def to_dict(self) -> dict:
        """Convert to the snapshot representation."""
        return {
            "id": self.id,
            "title": self.title,
            "price": to_json_number(self.price),
            "image": self.image,
            "amount": self.amount,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Product":
        """Create from the snapshot representation."""
        return cls(
            id=data["id"],
            title=str(data["title"]),
            price=parse_decimal(data["price"]),
            image=str(data.get("image", "")),
            amount=data["amount"],
        )


@dataclass(frozen=True)
class Cart:
    """
    Ordered, id-unique collection of line items.

    Carts are values: every mutation returns a new Cart and leaves the
    original untouched.
    """
    items: Tuple[Product, ...] = field(default_factory=tuple)

    def __post_init__(self):
        items = tuple(self.items)
        ids = [item.id for item in items]
        if len(ids) != len(set(ids)):
            raise ValueError("cart contains duplicate product ids")
        object.__setattr__(self, "items", items)

    def __iter__(self) -> Iterator[Product]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __contains__(self, product_id: object) -> bool:
        return self.find(product_id) is not None

    def find(self, product_id: object) -> Optional[Product]:
        """Line item with the given id, if present."""
        return next((item for item in self.items if item.id == product_id), None)

    @property
    def size(self) -> int:
        """Number of distinct products."""
        return len(self.items)

    @property
    def total_items(self) -> int:
        """Total number of units in cart."""
        return sum(item.amount for item in self.items)

    @property
    def subtotal(self) -> Decimal:
        """Sum of line totals."""
        return round_money(sum((item.total_price for item in self.items), Decimal("0")))

    def with_item(self, product: Product) -> "Cart":
        """Append a product not yet in the cart."""
        return Cart(self.items + (product,))

    def replace_item(self, product: Product) -> "Cart":
        """Swap the line item with the same id, keeping its position."""
        return Cart(tuple(product if item.id == product.id else item for item in self.items))

    def without(self, product_id: int) -> "Cart":
        """Drop the line item with the given id."""
        return Cart(tuple(item for item in self.items if item.id != product_id))

    def to_list(self) -> List[dict]:
        """Convert to the snapshot representation."""
        return [item.to_dict() for item in self.items]

    @classmethod
    def from_list(cls, data: Iterable[dict]) -> "Cart":
        """Create from the snapshot representation."""
        return cls(tuple(Product.from_dict(item) for item in data))
