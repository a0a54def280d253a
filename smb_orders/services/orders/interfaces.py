"""
Interfaces/Protocols for order services (Dependency Inversion Principle).

These protocols define contracts that services must implement,
allowing for loose coupling and easy testing.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Optional, Protocol, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from smb_orders.domain.models import OrderLine
from smb_orders.services.orders.commands import ConsolidationResult


class IOrderResolver(Protocol):
    """Protocol for (date, customer) → order resolution."""

    async def resolve_or_create(
        self,
        order_date: date,
        customer_id: int,
        delivery_fee: Optional[Decimal],
        notes: Optional[str],
        session: AsyncSession,
        known_order_id: Optional[int] = None,
    ) -> tuple[dict[str, Any], bool]:
        """Return the order header and whether it was created."""
        ...


class IItemMerger(Protocol):
    """Protocol for applying incoming lines to order items."""

    async def apply(self, order_id: int, lines: Sequence[OrderLine], session: AsyncSession) -> Any:
        """Merge lines into the order's items."""
        ...


class IAggregateCalculator(Protocol):
    """Protocol for aggregate recomputation."""

    currency: str

    async def recompute(self, order_id: int, session: AsyncSession, delivery_fee: Optional[Decimal] = None) -> Any:
        """Recompute and store subtotal, fee and total."""
        ...


class IEntityResolver(Protocol):
    """Protocol for customer/product name resolution during imports."""

    async def resolve_customer(self, ctx: Any, name: str, phone: str = "", address: str = "") -> int:
        """Resolve or create a customer, return its id."""
        ...

    async def resolve_product(self, ctx: Any, name: str) -> int:
        """Resolve or create a product, return its id."""
        ...


class IConsolidator(Protocol):
    """Protocol for the shared consolidation step."""

    async def consolidate(
        self,
        session: AsyncSession,
        order_date: date,
        customer_id: int,
        lines: Sequence[OrderLine],
        delivery_fee: Optional[Decimal] = None,
        notes: Optional[str] = None,
        known_order_id: Optional[int] = None,
    ) -> ConsolidationResult:
        """Apply a line set to the order of (date, customer)."""
        ...
