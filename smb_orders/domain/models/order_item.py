"""
Order item domain models.

``OrderLine`` is an incoming (product, qty, price) line supplied by a
caller; ``OrderItemDomain`` is a stored item of an order.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from smb_orders.domain.value_objects.money import Money


@dataclass(frozen=True)
class OrderLine:
    """
    Incoming line to be applied to an order.

    Attributes:
        product_id: Referenced product
        qty: Quantity to add (non-negative)
        price: Unit price, becomes the item's price
    """

    product_id: int
    qty: Decimal
    price: Decimal

    def __post_init__(self) -> None:
        if self.qty < 0:
            raise ValueError(f"Quantity cannot be negative: {self.qty}")
        if self.price < 0:
            raise ValueError(f"Price cannot be negative: {self.price}")


@dataclass
class OrderItemDomain:
    """
    Domain model representing a stored order item.

    Within one order there is at most one item per product after any
    create-or-merge call.
    """

    product_id: int
    qty: Decimal
    price: Money
    product_name: str | None = None
    id: int | None = None
    order_id: int | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.qty, Decimal):
            self.qty = Decimal(str(self.qty))
        if self.qty < 0:
            raise ValueError(f"Quantity cannot be negative: {self.qty}")

    @property
    def line_total(self) -> Money:
        """qty x price for this item."""
        return self.price * self.qty

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "qty": self.qty,
            "price": self.price.amount,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], currency: str = "THB") -> "OrderItemDomain":
        """Create item from a store row."""
        return cls(
            id=data.get("id"),
            order_id=data.get("order_id"),
            product_id=data["product_id"],
            product_name=data.get("product_name"),
            qty=Decimal(str(data["qty"])),
            price=Money.of(data["price"], currency=currency),
        )
