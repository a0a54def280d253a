"""
Validated inputs and results of the order consolidation services.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any

from smb_orders.domain.models import OrderDomain, OrderLine


@dataclass(frozen=True)
class CreateOrderCommand:
    """Validated create-or-merge request. ``None`` means "not supplied"."""

    order_date: date
    customer_id: int
    lines: list[OrderLine]
    delivery_fee: Decimal | None = None
    notes: str | None = None


@dataclass(frozen=True)
class ReplaceOrderCommand:
    """Validated full replace request; every field is applied verbatim."""

    order_id: int
    order_date: date
    customer_id: int
    lines: list[OrderLine]
    delivery_fee: Decimal = Decimal("0")
    notes: str = ""


@dataclass
class ConsolidationResult:
    """Outcome of applying one (date, customer) line set to the store."""

    order: OrderDomain
    created: bool
    items_inserted: int = 0
    items_merged: int = 0

    @property
    def action(self) -> str:
        return "created" if self.created else "merged"

    @property
    def lines_applied(self) -> int:
        return self.items_inserted + self.items_merged


@dataclass
class ImportResult:
    """Counters reported by a bulk import."""

    orders_processed: int = 0
    created: int = 0
    merged: int = 0
    items_inserted: int = 0
    skipped: int = 0
    failed: int = 0
    errors: list[dict[str, Any]] = field(default_factory=list)

    def record(self, result: ConsolidationResult) -> None:
        """Count a committed group."""
        self.orders_processed += 1
        if result.created:
            self.created += 1
        else:
            self.merged += 1
        self.items_inserted += result.lines_applied
