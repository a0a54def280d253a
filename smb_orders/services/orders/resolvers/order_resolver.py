"""OrderResolver service - SRP compliance."""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from smb_orders.db.store.order_repository import OrderRepository
from smb_orders.services.orders.generators import OrderCodeGenerator
from smb_orders.utils.error_handler import StoreException

logger = logging.getLogger(__name__)


class OrderResolver:
    """
    Maps a (date, customer) pair to its single order (SRP: order lookup/creation).

    Lookups lock the order row for the rest of the transaction, so
    concurrent merges into the same order run one after another.
    """

    def __init__(self, order_repo: OrderRepository, code_generator: OrderCodeGenerator):
        """
        Initialize with SOLID dependencies (DIP).

        Args:
            order_repo: Repository for order operations
            code_generator: Service allocating codes for new orders
        """
        self.order_repo = order_repo
        self.code_generator = code_generator

    async def find(self, order_date: date, customer_id: int, session: AsyncSession) -> Optional[dict[str, Any]]:
        """Return the locked order for (date, customer), or None."""
        return await self.order_repo.find_order_by_date_and_customer(
            order_date, customer_id, session=session, for_update=True
        )

    async def resolve_or_create(
        self,
        order_date: date,
        customer_id: int,
        delivery_fee: Optional[Decimal],
        notes: Optional[str],
        session: AsyncSession,
        known_order_id: Optional[int] = None,
    ) -> tuple[dict[str, Any], bool]:
        """
        Find the order for (date, customer) or create it.

        A new order gets a freshly generated code, ``delivery_fee`` (0 when
        not supplied) and ``notes`` verbatim. If a concurrent call inserts the
        same pair first, the winner's order is returned as existing.

        Args:
            order_date: Calendar day
            customer_id: Customer id
            delivery_fee: Fee for a new order
            notes: Notes for a new order
            session: Enclosing transaction
            known_order_id: Order id cached earlier in the same import, if any

        Returns:
            tuple: (order header dict, created flag)
        """
        if known_order_id is not None:
            order = await self.order_repo.get_order_by_id(known_order_id, session=session, for_update=True)
            if order and order["order_date"] == order_date and order["customer_id"] == customer_id:
                return order, False

        order = await self.find(order_date, customer_id, session)
        if order is not None:
            logger.debug(f"Resolved existing order {order['id']} for {order_date} / customer {customer_id}")
            return order, False

        order_code = await self.code_generator.generate(order_date, session=session)
        order_id = await self.order_repo.insert_order_if_absent(
            order_date,
            customer_id,
            order_code,
            delivery_fee if delivery_fee is not None else Decimal("0"),
            notes or "",
            session=session,
        )

        if order_id is None:
            # Lost the race to a concurrent creator; merge into its order
            order = await self.find(order_date, customer_id, session)
            if order is None:
                raise StoreException(
                    message=f"Order for {order_date} / customer {customer_id} vanished after insert conflict",
                    operation="resolve_or_create",
                )
            logger.info(f"Concurrent creation detected for {order_date} / customer {customer_id}, merging")
            return order, False

        order = await self.order_repo.get_order_by_id(order_id, session=session)
        logger.info(f"Created order {order_id} ({order_code}) for {order_date} / customer {customer_id}")
        return order, True
