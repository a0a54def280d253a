"""OrderReplacer service - SRP compliance."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from smb_orders.db.store.order_repository import OrderRepository
from smb_orders.services.orders.commands import ReplaceOrderCommand
from smb_orders.services.orders.managers.aggregate_calculator import AggregateCalculator, OrderAggregates
from smb_orders.services.orders.managers.item_merger import ItemMerger
from smb_orders.utils.error_handler import NotFoundException

logger = logging.getLogger(__name__)


class OrderReplacer:
    """Overwrites an order wholesale (SRP: full edits only)."""

    def __init__(self, order_repo: OrderRepository, item_merger: ItemMerger, calculator: AggregateCalculator):
        """
        Initialize with SOLID dependencies (DIP).

        Args:
            order_repo: Repository for order operations
            item_merger: Service owning item writes
            calculator: Service recomputing aggregates
        """
        self.order_repo = order_repo
        self.item_merger = item_merger
        self.calculator = calculator

    async def replace(self, command: ReplaceOrderCommand, session: AsyncSession) -> OrderAggregates:
        """
        Replace header fields and items of an existing order.

        Date, customer, delivery fee and notes are written verbatim; no merge
        policy applies and the order code is kept. The order is not looked up
        by (date, customer): moving it onto a pair that already has an order
        is rejected by the store's uniqueness constraint.

        Args:
            command: Validated replace request
            session: Enclosing transaction

        Returns:
            OrderAggregates: Recomputed aggregates

        Raises:
            NotFoundException: If the order does not exist
            StoreException: If the new (date, customer) collides with another order
        """
        existing = await self.order_repo.get_order_by_id(command.order_id, session=session, for_update=True)
        if existing is None:
            raise NotFoundException(
                message=f"Order {command.order_id} not found", resource="order", resource_id=command.order_id
            )

        await self.order_repo.update_order(
            command.order_id,
            session=session,
            order_date=command.order_date,
            customer_id=command.customer_id,
            delivery_fee=command.delivery_fee,
            notes=command.notes,
        )
        await self.item_merger.replace_all(command.order_id, command.lines, session)

        aggregates = await self.calculator.recompute(command.order_id, session, delivery_fee=command.delivery_fee)
        logger.info(f"Replaced order {command.order_id} ({existing['order_code']}) with {len(command.lines)} items")
        return aggregates
