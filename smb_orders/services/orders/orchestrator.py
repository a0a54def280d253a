"""
OrderConsolidationOrchestrator - Main coordinator (SOLID compliant).

This orchestrator follows:
- SRP: Only coordinates the consolidation flow
- OCP: Open for extension via new services
- DIP: Depends on injected services, not on how they are built

Every mutating call runs in one transaction: resolve the order, apply
lines, recompute aggregates. A failure anywhere rolls the call back whole.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from smb_orders.core.config import get_settings
from smb_orders.core.logging_config import log_order_operation
from smb_orders.db.connection import ConnDB, get_db_connection
from smb_orders.db.store.customer_repository import CustomerRepository
from smb_orders.db.store.order_repository import OrderRepository
from smb_orders.db.store.product_repository import ProductRepository
from smb_orders.domain.models import OrderDomain, OrderLine
from smb_orders.services.orders.commands import ConsolidationResult
from smb_orders.services.orders.generators import OrderCodeGenerator
from smb_orders.services.orders.interfaces import IAggregateCalculator, IItemMerger, IOrderResolver
from smb_orders.services.orders.managers import AggregateCalculator, ItemMerger, OrderReplacer
from smb_orders.services.orders.policies import merge_notes
from smb_orders.services.orders.resolvers import OrderResolver
from smb_orders.services.orders.validators import OrderValidator
from smb_orders.utils.error_handler import NotFoundException

settings = get_settings()
logger = logging.getLogger(__name__)


class OrderConsolidationOrchestrator:
    """
    Orchestrates single-order operations against the order store.

    Services are injected via constructor; see ``create_orchestrator``.
    """

    def __init__(
        self,
        conn_db: ConnDB,
        validator: OrderValidator,
        order_resolver: IOrderResolver,
        item_merger: IItemMerger,
        calculator: IAggregateCalculator,
        replacer: OrderReplacer,
        order_repo: OrderRepository,
        customer_repo: CustomerRepository,
        product_repo: ProductRepository,
        notes_separator: str = " | ",
        recent_limit: int = 100,
    ):
        """
        Initialize orchestrator with service dependencies (DIP).

        Args:
            conn_db: Connection used to open one transaction per call
            validator: Service for payload validation
            order_resolver: Service mapping (date, customer) to an order
            item_merger: Service applying lines to items
            calculator: Service recomputing aggregates
            replacer: Service for full order replacement
            order_repo: Repository for order reads
            customer_repo: Repository for customer existence checks
            product_repo: Repository for product existence checks
            notes_separator: Separator used when notes accumulate
            recent_limit: Default size of the recent orders list
        """
        self.conn_db = conn_db
        self.validator = validator
        self.order_resolver = order_resolver
        self.item_merger = item_merger
        self.calculator = calculator
        self.replacer = replacer
        self.order_repo = order_repo
        self.customer_repo = customer_repo
        self.product_repo = product_repo
        self.notes_separator = notes_separator
        self.recent_limit = recent_limit

    # ------------------------- Mutations -------------------------
    async def create_or_merge(self, payload: dict[str, Any]) -> ConsolidationResult:
        """
        Create the order for (date, customerId) or merge into the existing one.

        Args:
            payload: Dict with date, customerId, items[{productId, qty, price}],
                deliveryFee? and notes?

        Returns:
            ConsolidationResult: Resulting order and whether it was created

        Raises:
            ValidationException: If the payload is incomplete or malformed
            NotFoundException: If the customer or a product does not exist
            StoreException: If the store fails; nothing is applied
        """
        command = self.validator.validate_create(payload)

        async with self.conn_db.transaction() as session:
            await self._ensure_references(command.customer_id, [line.product_id for line in command.lines], session)
            result = await self.consolidate(
                session,
                command.order_date,
                command.customer_id,
                command.lines,
                delivery_fee=command.delivery_fee,
                notes=command.notes,
            )

        log_order_operation(result.action, result.order.id, order_code=result.order.order_code)
        logger.info(
            f"✅ Order {result.order.id} ({result.order.order_code}) {result.action}: "
            f"{result.items_inserted} items inserted, {result.items_merged} merged, total={result.order.total.amount}"
        )
        return result

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
        """
        Apply a line set to the order of (date, customer) inside ``session``.

        Shared by interactive creation and bulk import. On a new order the
        fee and notes are stored as given; on an existing order a supplied
        fee replaces the stored one and notes are appended.

        Returns:
            ConsolidationResult: Order state after the change
        """
        order, created = await self.order_resolver.resolve_or_create(
            order_date, customer_id, delivery_fee, notes, session, known_order_id=known_order_id
        )
        order_id = order["id"]

        outcome = await self.item_merger.apply(order_id, lines, session)

        if created:
            await self.calculator.recompute(order_id, session)
        else:
            merged_notes = merge_notes(order["notes"], notes, self.notes_separator)
            if merged_notes != (order["notes"] or ""):
                await self.order_repo.update_order(order_id, session=session, notes=merged_notes)
            await self.calculator.recompute(order_id, session, delivery_fee=delivery_fee)

        refreshed = await self.order_repo.get_order_by_id(order_id, session=session)
        return ConsolidationResult(
            order=OrderDomain.from_dict(refreshed, currency=self.calculator.currency),
            created=created,
            items_inserted=outcome.inserted,
            items_merged=outcome.merged,
        )

    async def replace_order(self, order_id: Any, payload: dict[str, Any]) -> OrderDomain:
        """
        Overwrite an order's header and items verbatim.

        Raises:
            ValidationException: If id, date or customerId is missing
            NotFoundException: If the order, customer or a product does not exist
            StoreException: If the new (date, customer) collides with another order
        """
        command = self.validator.validate_replace(order_id, payload)

        async with self.conn_db.transaction() as session:
            await self._ensure_references(command.customer_id, [line.product_id for line in command.lines], session)
            await self.replacer.replace(command, session)
            refreshed = await self.order_repo.get_order_by_id(command.order_id, session=session)

        log_order_operation("replace", command.order_id)
        return OrderDomain.from_dict(refreshed, currency=self.calculator.currency)

    async def delete_order(self, order_id: Any) -> None:
        """
        Delete an order and all of its items.

        Raises:
            NotFoundException: If the order does not exist
        """
        order_id = self.validator.parse_id(order_id, "id")

        async with self.conn_db.transaction() as session:
            deleted = await self.order_repo.delete_order(order_id, session=session)
            if not deleted:
                raise NotFoundException(message=f"Order {order_id} not found", resource="order", resource_id=order_id)

        log_order_operation("delete", order_id)
        logger.info(f"🗑️ Order {order_id} deleted")

    async def _ensure_references(self, customer_id: int, product_ids: list[int], session: AsyncSession) -> None:
        customer = await self.customer_repo.get_customer_by_id(customer_id, session=session)
        if customer is None:
            raise NotFoundException(
                message=f"Customer {customer_id} not found", resource="customer", resource_id=customer_id
            )

        missing = await self.product_repo.find_missing_ids(product_ids, session=session)
        if missing:
            raise NotFoundException(
                message=f"Products not found: {sorted(missing)}", resource="product", resource_id=sorted(missing)
            )

    # ------------------------- Reads -------------------------
    async def get_order(self, order_id: Any) -> OrderDomain:
        """
        Return one order with customer contact data and items.

        Raises:
            NotFoundException: If the order does not exist
        """
        order_id = self.validator.parse_id(order_id, "id")

        row = await self.order_repo.get_order_with_customer(order_id)
        if row is None:
            raise NotFoundException(message=f"Order {order_id} not found", resource="order", resource_id=order_id)

        items = await self.order_repo.get_items([order_id])
        return OrderDomain.from_dict(row, items=items.get(order_id, []), currency=self.calculator.currency)

    async def list_recent_orders(self, limit: Optional[int] = None) -> list[OrderDomain]:
        """Most recent orders (highest id first), without items."""
        rows = await self.order_repo.list_recent_orders(limit or self.recent_limit)
        return [OrderDomain.from_dict(row, currency=self.calculator.currency) for row in rows]

    async def list_months(self) -> list[str]:
        """Distinct ``YYYY-MM`` months having orders, newest first."""
        dates = await self.order_repo.list_order_dates()
        return sorted({f"{day:%Y-%m}" for day in dates}, reverse=True)

    async def list_days(self, month: str) -> list[str]:
        """
        Distinct ``YYYY-MM-DD`` days having orders within ``month``, newest first.

        Raises:
            ValidationException: If ``month`` is not ``YYYY-MM``
        """
        start, end = self.validator.parse_month(month)
        dates = await self.order_repo.list_order_dates(start=start, end=end)
        return [day.isoformat() for day in dates]

    async def list_orders_by_date(self, order_date: Any) -> list[OrderDomain]:
        """All orders of one day with customer names and items, ascending id."""
        day = self.validator.parse_date(order_date, "date")

        rows = await self.order_repo.list_orders_by_date(day)
        if not rows:
            return []

        items = await self.order_repo.get_items([row["id"] for row in rows])
        return [
            OrderDomain.from_dict(row, items=items.get(row["id"], []), currency=self.calculator.currency)
            for row in rows
        ]


# Factory function to create orchestrator with all dependencies
def create_orchestrator(conn_db: Optional[ConnDB] = None) -> OrderConsolidationOrchestrator:
    """
    Factory function to create a fully wired orchestrator.

    Args:
        conn_db: Database connection (defaults to the global one)

    Returns:
        OrderConsolidationOrchestrator: Fully configured orchestrator
    """
    conn_db = conn_db or get_db_connection()

    order_repo = OrderRepository(conn_db)
    customer_repo = CustomerRepository(conn_db)
    product_repo = ProductRepository(conn_db)

    item_merger = ItemMerger(order_repo=order_repo)
    calculator = AggregateCalculator(order_repo=order_repo, currency=settings.CURRENCY)

    return OrderConsolidationOrchestrator(
        conn_db=conn_db,
        validator=OrderValidator(),
        order_resolver=OrderResolver(order_repo=order_repo, code_generator=OrderCodeGenerator(order_repo=order_repo)),
        item_merger=item_merger,
        calculator=calculator,
        replacer=OrderReplacer(order_repo=order_repo, item_merger=item_merger, calculator=calculator),
        order_repo=order_repo,
        customer_repo=customer_repo,
        product_repo=product_repo,
        notes_separator=settings.ORDER_NOTES_SEPARATOR,
        recent_limit=settings.ORDER_RECENT_LIMIT,
    )
