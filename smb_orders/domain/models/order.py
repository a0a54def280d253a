"""
Order domain model (Aggregate Root).

Represents the single order of one customer on one calendar day, with
its items and derived monetary aggregates.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any

from smb_orders.domain.value_objects.money import DEFAULT_CURRENCY, Money

from .order_item import OrderItemDomain


@dataclass
class OrderDomain:
    """
    Domain model representing an order (Aggregate Root).

    Attributes:
        order_date: Calendar day of the order
        customer_id: Owning customer
        order_code: Human-readable code ``ddmmyy_seq``, fixed at creation
        subtotal: Sum of qty x price over the items
        delivery_fee: Delivery fee charged on the order
        total: subtotal + delivery_fee
        notes: Free text, accumulated across merges
        items: Order items (loaded on demand)
        customer_name: Joined customer name for read views
        customer_phone: Joined customer phone for detail views
        customer_address: Joined customer address for detail views
        id: Order ID (None for new orders)
    """

    order_date: date
    customer_id: int
    order_code: str
    subtotal: Money = field(default_factory=Money.zero)
    delivery_fee: Money = field(default_factory=Money.zero)
    total: Money = field(default_factory=Money.zero)
    notes: str = ""
    items: list[OrderItemDomain] = field(default_factory=list)
    customer_name: str | None = None
    customer_phone: str | None = None
    customer_address: str | None = None
    id: int | None = None

    def __post_init__(self) -> None:
        """Validate order data after initialization."""
        if not self.order_code:
            raise ValueError("Order code is required")

        if not (self.subtotal.currency == self.delivery_fee.currency == self.total.currency):
            raise ValueError("All monetary values must have the same currency")

    @property
    def is_balanced(self) -> bool:
        """Whether total equals subtotal plus delivery fee."""
        return self.total == self.subtotal + self.delivery_fee

    @property
    def items_count(self) -> int:
        return len(self.items)

    def item_for_product(self, product_id: int) -> OrderItemDomain | None:
        """Return the item holding ``product_id``, if loaded."""
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert order to dictionary."""
        return {
            "id": self.id,
            "order_date": self.order_date,
            "customer_id": self.customer_id,
            "order_code": self.order_code,
            "subtotal": self.subtotal.amount,
            "delivery_fee": self.delivery_fee.amount,
            "total": self.total.amount,
            "notes": self.notes,
            "items": [item.to_dict() for item in self.items],
        }

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], items: list[dict[str, Any]] | None = None, currency: str = DEFAULT_CURRENCY
    ) -> "OrderDomain":
        """Create order from a store row and optional item rows."""
        return cls(
            id=data.get("id"),
            order_date=data["order_date"],
            customer_id=data["customer_id"],
            order_code=data["order_code"],
            subtotal=Money.of(data.get("subtotal") or 0, currency=currency),
            delivery_fee=Money.of(data.get("delivery_fee") or 0, currency=currency),
            total=Money.of(data.get("total") or 0, currency=currency),
            notes=data.get("notes") or "",
            customer_name=data.get("customer_name"),
            customer_phone=data.get("customer_phone"),
            customer_address=data.get("customer_address"),
            items=[OrderItemDomain.from_dict(row, currency=currency) for row in (items or [])],
        )
