"""Cart models with Decimal-based pricing."""
import copy
import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from storefront.models import LineId, Product, ProductId
from storefront.services.money import parse_decimal, to_decimal, total

_GUEST_LINE_ID = re.compile(r"^guest-(\d+)-")


def _require_quantity(value) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"invalid line quantity: {value!r}")
    return value


@dataclass
class ProductSnapshot:
    """Product details captured when the line was created."""
    id: ProductId
    name: str
    price: Decimal
    image_url: Optional[str] = None
    stock: Optional[int] = None

    def __post_init__(self):
        self.price = to_decimal(self.price)

    @classmethod
    def from_product(cls, product: Product) -> "ProductSnapshot":
        return cls(
            id=product.id,
            name=product.name,
            price=product.price,
            image_url=product.image_url,
            stock=product.stock,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "price": str(self.price),
            "imageUrl": self.image_url,
            "stock": self.stock,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ProductSnapshot":
        if not isinstance(data, dict):
            raise TypeError("product snapshot must be an object")
        return cls(
            id=data["id"],
            name=str(data.get("name", "")),
            price=parse_decimal(data["price"]),
            image_url=data.get("imageUrl"),
            stock=data.get("stock"),
        )


@dataclass
class CartLine:
    """One product's presence in a cart."""
    line_id: LineId
    product_id: ProductId
    quantity: int
    unit_price: Decimal  # Snapshot at add-time, never re-synced
    product: Optional[ProductSnapshot] = None

    def __post_init__(self):
        self.unit_price = to_decimal(self.unit_price)

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    @property
    def name(self) -> str:
        return self.product.name if self.product else str(self.product_id)

    @property
    def stock(self) -> Optional[int]:
        return self.product.stock if self.product else None

    def to_dict(self) -> dict:
        return {
            "lineId": self.line_id,
            "productId": self.product_id,
            "quantity": self.quantity,
            "unitPrice": str(self.unit_price),
            "product": self.product.to_dict() if self.product else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CartLine":
        """
        Create from the persisted shape.

        Also reads guest carts written before lines carried their own
        lineId/unitPrice (id + product.price).

        Raises:
            KeyError, TypeError, ValueError: on malformed data
        """
        if not isinstance(data, dict):
            raise TypeError("cart line must be an object")
        product_data = data.get("product")
        product = ProductSnapshot.from_dict(product_data) if product_data else None

        if "unitPrice" in data:
            unit_price = parse_decimal(data["unitPrice"])
        elif product is not None:
            unit_price = product.price
        else:
            raise KeyError("unitPrice")

        product_id = data["productId"]
        if product_id is None:
            raise ValueError("line without productId")

        return cls(
            line_id=data["lineId"] if "lineId" in data else data["id"],
            product_id=product_id,
            quantity=_require_quantity(data["quantity"]),
            unit_price=unit_price,
            product=product,
        )


@dataclass
class Cart:
    """
    Shopping cart for one subject.

    subject is None for the anonymous guest cart and the user id for a
    server cart. total_amount is derived from the lines; the local store
    calls recalculate_total() after every change, the remote client keeps
    the server's figure.
    """
    items: List[CartLine] = field(default_factory=list)
    total_amount: Decimal = Decimal("0")
    subject: Optional[str] = None
    next_line_seq: int = 1  # Guest line id counter, never rewound

    def __post_init__(self):
        self.total_amount = to_decimal(self.total_amount)

    @classmethod
    def empty(cls, subject: Optional[str] = None) -> "Cart":
        return cls(items=[], total_amount=Decimal("0"), subject=subject)

    def recalculate_total(self) -> Decimal:
        """Recompute total_amount from scratch over the current lines."""
        self.total_amount = total(line.line_total for line in self.items)
        return self.total_amount

    @property
    def total_items(self) -> int:
        """Total number of units in the cart."""
        return sum(line.quantity for line in self.items)

    @property
    def line_count(self) -> int:
        return len(self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def find_line(self, line_id: LineId) -> Optional[CartLine]:
        return next((line for line in self.items if line.line_id == line_id), None)

    def find_product(self, product_id: ProductId) -> Optional[CartLine]:
        return next((line for line in self.items if line.product_id == product_id), None)

    def quantity_of(self, product_id: ProductId) -> int:
        line = self.find_product(product_id)
        return line.quantity if line else 0

    def copy(self) -> "Cart":
        return copy.deepcopy(self)

    def to_dict(self) -> dict:
        """Convert to the persisted guest cart shape."""
        return {
            "items": [line.to_dict() for line in self.items],
            "totalAmount": str(self.total_amount),
            "lineSeq": self.next_line_seq,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Cart":
        """
        Create from the persisted guest cart shape.

        The stored totalAmount is ignored and recomputed from the lines.

        Raises:
            KeyError, TypeError, ValueError: on malformed data
        """
        if not isinstance(data, dict):
            raise TypeError("cart payload must be an object")
        raw_items = data.get("items", [])
        if not isinstance(raw_items, list):
            raise TypeError("cart items must be a list")

        items = [CartLine.from_dict(item) for item in raw_items]
        product_ids = [line.product_id for line in items]
        if len(set(product_ids)) != len(product_ids):
            raise ValueError("duplicate product lines in stored cart")

        line_seq = data.get("lineSeq")
        if isinstance(line_seq, bool) or not isinstance(line_seq, int) or line_seq < 1:
            line_seq = _next_seq_after(items)

        cart = cls(items=items, next_line_seq=line_seq)
        cart.recalculate_total()
        return cart


def _next_seq_after(items: List[CartLine]) -> int:
    """First free counter value for carts stored without lineSeq."""
    highest = len(items)
    for line in items:
        match = _GUEST_LINE_ID.match(str(line.line_id))
        if match:
            highest = max(highest, int(match.group(1)))
    return highest + 1
