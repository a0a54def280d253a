"""AggregateCalculator service - SRP compliance."""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from smb_orders.db.store.order_repository import OrderRepository
from smb_orders.domain.value_objects.money import DEFAULT_CURRENCY, Money
from smb_orders.utils.error_handler import NotFoundException

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderAggregates:
    """Derived monetary values of an order."""

    subtotal: Money
    delivery_fee: Money
    total: Money


def resolve_delivery_fee(supplied: Optional[Decimal], stored: Optional[Decimal]) -> Decimal:
    """
    Pick the delivery fee for a merge.

    An explicitly supplied fee (including 0) replaces the stored one;
    ``None`` keeps the stored fee.
    """
    if supplied is not None:
        return supplied
    return stored if stored is not None else Decimal("0")


class AggregateCalculator:
    """Recomputes subtotal and total from an order's items (SRP: aggregates only)."""

    def __init__(self, order_repo: OrderRepository, currency: str = DEFAULT_CURRENCY):
        """
        Initialize with repository dependency (DIP).

        Args:
            order_repo: Repository for order operations
            currency: Currency label carried by the Money values
        """
        self.order_repo = order_repo
        self.currency = currency

    def compute(self, line_total_sum: Decimal, delivery_fee: Decimal) -> OrderAggregates:
        """
        Compute aggregates from the item sum and the fee.

        Returns:
            OrderAggregates: subtotal, fee and total = subtotal + fee
        """
        subtotal = Money.of(line_total_sum, currency=self.currency)
        fee = Money.of(delivery_fee, currency=self.currency)
        return OrderAggregates(subtotal=subtotal, delivery_fee=fee, total=subtotal + fee)

    async def recompute(
        self,
        order_id: int,
        session: AsyncSession,
        delivery_fee: Optional[Decimal] = None,
    ) -> OrderAggregates:
        """
        Recompute and store subtotal, delivery fee and total for an order.

        Must run inside the same transaction as the item changes it reflects.

        Args:
            order_id: Order to recompute
            session: Enclosing transaction
            delivery_fee: Fee to store; None keeps the stored fee

        Returns:
            OrderAggregates: Values written to the order

        Raises:
            NotFoundException: If the order does not exist
        """
        order = await self.order_repo.get_order_by_id(order_id, session=session)
        if order is None:
            raise NotFoundException(message=f"Order {order_id} not found", resource="order", resource_id=order_id)

        fee = resolve_delivery_fee(delivery_fee, Decimal(str(order["delivery_fee"])))
        line_sum = await self.order_repo.sum_line_totals(order_id, session=session)
        aggregates = self.compute(line_sum, fee)

        await self.order_repo.update_order(
            order_id,
            session=session,
            subtotal=aggregates.subtotal.amount,
            delivery_fee=aggregates.delivery_fee.amount,
            total=aggregates.total.amount,
        )

        logger.debug(
            f"Order {order_id} aggregates: subtotal={aggregates.subtotal.amount} "
            f"fee={aggregates.delivery_fee.amount} total={aggregates.total.amount}"
        )
        return aggregates
