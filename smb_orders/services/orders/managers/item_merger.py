"""ItemMerger service - SRP compliance."""

import logging
from dataclasses import dataclass
from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from smb_orders.db.store.order_repository import OrderRepository
from smb_orders.domain.models import OrderLine

logger = logging.getLogger(__name__)


@dataclass
class MergeOutcome:
    """How many incoming lines were inserted versus folded into existing items."""

    inserted: int = 0
    merged: int = 0


class ItemMerger:
    """Applies incoming lines to an order's items (SRP: item merging only)."""

    def __init__(self, order_repo: OrderRepository):
        """
        Initialize with repository dependency (DIP).

        Args:
            order_repo: Repository for order item operations
        """
        self.order_repo = order_repo

    async def apply(self, order_id: int, lines: Sequence[OrderLine], session: AsyncSession) -> MergeOutcome:
        """
        Apply lines one after another.

        A line for a product already on the order adds its qty to the
        existing item and overwrites the price; otherwise a new item is
        inserted. Two lines for the same product in one call therefore add
        up, and the later line's price wins.

        Args:
            order_id: Target order
            lines: Incoming lines, in caller order
            session: Enclosing transaction

        Returns:
            MergeOutcome: Inserted and merged counts
        """
        outcome = MergeOutcome()
        for line in lines:
            merged = await self.order_repo.merge_item(
                order_id, line.product_id, line.qty, line.price, session=session
            )
            if merged:
                outcome.merged += 1
            else:
                outcome.inserted += 1

        logger.debug(f"Order {order_id}: {outcome.inserted} items inserted, {outcome.merged} merged")
        return outcome

    async def replace_all(self, order_id: int, lines: Sequence[OrderLine], session: AsyncSession) -> int:
        """
        Delete every item of the order and insert ``lines`` verbatim.

        No merging happens here: duplicate products in ``lines`` become
        separate items.

        Returns:
            int: Number of items inserted
        """
        removed = await self.order_repo.delete_items(order_id, session=session)
        for line in lines:
            await self.order_repo.insert_item(order_id, line.product_id, line.qty, line.price, session=session)

        logger.debug(f"Order {order_id}: replaced {removed} items with {len(lines)}")
        return len(lines)
