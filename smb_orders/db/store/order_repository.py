"""
OrderRepository: order headers, order items and order code sequences.

Encapsulates every statement the consolidation pipeline issues against
``orders``, ``order_items`` and ``order_code_sequences``. Services compose
these calls inside a single transaction by passing the same session.
"""

import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from smb_orders.db.schema import customers, order_code_sequences, order_items, orders, products
from smb_orders.db.store.base import BaseRepository, log_operation

logger = logging.getLogger(__name__)

ORDER_COLUMNS = (
    orders.c.id,
    orders.c.order_date,
    orders.c.customer_id,
    orders.c.subtotal,
    orders.c.delivery_fee,
    orders.c.total,
    orders.c.notes,
    orders.c.order_code,
)


class OrderRepository(BaseRepository):
    """Repository for orders and order items."""

    # ------------------------- Order headers -------------------------
    @log_operation()
    async def find_order_by_date_and_customer(
        self,
        order_date: date,
        customer_id: int,
        session: Optional[AsyncSession] = None,
        for_update: bool = False,
    ) -> Optional[Dict[str, Any]]:
        """
        Find the order for a (date, customer) pair.

        Args:
            order_date: Calendar day of the order
            customer_id: Customer id
            session: Enclosing transaction
            for_update: Lock the row until the transaction ends (PostgreSQL)

        Returns:
            Order header dict or None
        """
        query = select(*ORDER_COLUMNS).where(orders.c.order_date == order_date, orders.c.customer_id == customer_id)
        if for_update and self.supports_row_locks:
            query = query.with_for_update()

        async with self.session_scope(session) as s:
            result = await s.execute(query)
            row = result.mappings().first()
            return dict(row) if row else None

    @log_operation()
    async def get_order_by_id(
        self, order_id: int, session: Optional[AsyncSession] = None, for_update: bool = False
    ) -> Optional[Dict[str, Any]]:
        query = select(*ORDER_COLUMNS).where(orders.c.id == order_id)
        if for_update and self.supports_row_locks:
            query = query.with_for_update()

        async with self.session_scope(session) as s:
            result = await s.execute(query)
            row = result.mappings().first()
            return dict(row) if row else None

    @log_operation()
    async def get_order_with_customer(
        self, order_id: int, session: Optional[AsyncSession] = None
    ) -> Optional[Dict[str, Any]]:
        """Order header joined with the customer's name, phone and address."""
        query = (
            select(
                *ORDER_COLUMNS,
                customers.c.name.label("customer_name"),
                customers.c.phone.label("customer_phone"),
                customers.c.address.label("customer_address"),
            )
            .select_from(orders.outerjoin(customers, customers.c.id == orders.c.customer_id))
            .where(orders.c.id == order_id)
        )
        async with self.session_scope(session) as s:
            result = await s.execute(query)
            row = result.mappings().first()
            return dict(row) if row else None

    @log_operation()
    async def count_orders_on_date(self, order_date: date, session: Optional[AsyncSession] = None) -> int:
        async with self.session_scope(session) as s:
            result = await s.execute(
                select(func.count()).select_from(orders).where(orders.c.order_date == order_date)
            )
            return int(result.scalar_one())

    @log_operation()
    async def next_code_sequence(self, order_date: date, session: Optional[AsyncSession] = None) -> int:
        """
        Atomically allocate the next order code sequence for a date.

        The counter row is created on first use, seeded with the number of
        orders already stored for that date plus one. Later calls increment
        it under a row lock, so concurrent creators never share a value.
        """
        seed = (
            select(func.count()).select_from(orders).where(orders.c.order_date == order_date).scalar_subquery() + 1
        )
        stmt = self.insert(order_code_sequences).values(order_date=order_date, last_seq=seed)
        stmt = stmt.on_conflict_do_update(
            index_elements=[order_code_sequences.c.order_date],
            set_={"last_seq": order_code_sequences.c.last_seq + 1},
        ).returning(order_code_sequences.c.last_seq)

        async with self.session_scope(session) as s:
            result = await s.execute(stmt)
            return int(result.scalar_one())

    @log_operation()
    async def insert_order_if_absent(
        self,
        order_date: date,
        customer_id: int,
        order_code: str,
        delivery_fee: Decimal,
        notes: str,
        session: Optional[AsyncSession] = None,
    ) -> Optional[int]:
        """
        Insert an order header unless one exists for (date, customer).

        Returns:
            int: New order id, or None if a concurrent writer created it first
        """
        stmt = (
            self.insert(orders)
            .values(
                order_date=order_date,
                customer_id=customer_id,
                order_code=order_code,
                subtotal=Decimal("0"),
                delivery_fee=delivery_fee,
                total=delivery_fee,
                notes=notes,
            )
            .on_conflict_do_nothing(index_elements=[orders.c.order_date, orders.c.customer_id])
            .returning(orders.c.id)
        )
        async with self.session_scope(session) as s:
            result = await s.execute(stmt)
            return result.scalar_one_or_none()

    @log_operation()
    async def update_order(self, order_id: int, session: Optional[AsyncSession] = None, **values) -> bool:
        """
        Update header columns of an order.

        Returns:
            bool: True if the order exists
        """
        async with self.session_scope(session) as s:
            result = await s.execute(update(orders).where(orders.c.id == order_id).values(**values))
            return result.rowcount > 0

    @log_operation()
    async def delete_order(self, order_id: int, session: Optional[AsyncSession] = None) -> bool:
        """
        Delete an order and all of its items.

        Returns:
            bool: True if the order existed
        """
        async with self.session_scope(session) as s:
            await s.execute(delete(order_items).where(order_items.c.order_id == order_id))
            result = await s.execute(delete(orders).where(orders.c.id == order_id))
            return result.rowcount > 0

    # ------------------------- Order items -------------------------
    @log_operation()
    async def merge_item(
        self,
        order_id: int,
        product_id: int,
        qty: Decimal,
        price: Decimal,
        session: Optional[AsyncSession] = None,
    ) -> bool:
        """
        Fold a line into the order's existing item for the same product.

        Adds ``qty`` to the lowest-id matching item and overwrites its price.
        If no item matches, a new one is inserted.

        Returns:
            bool: True if an existing item was updated, False if inserted
        """
        # Aliased so the subquery does not correlate with the UPDATE target
        existing = order_items.alias("existing")
        target_id = (
            select(func.min(existing.c.id))
            .where(existing.c.order_id == order_id, existing.c.product_id == product_id)
            .scalar_subquery()
        )
        stmt = (
            update(order_items)
            .where(order_items.c.id == target_id)
            .values(qty=order_items.c.qty + qty, price=price)
        )

        async with self.session_scope(session) as s:
            result = await s.execute(stmt)
            if result.rowcount > 0:
                return True
            await s.execute(order_items.insert().values(order_id=order_id, product_id=product_id, qty=qty, price=price))
            return False

    @log_operation()
    async def insert_item(
        self,
        order_id: int,
        product_id: int,
        qty: Decimal,
        price: Decimal,
        session: Optional[AsyncSession] = None,
    ) -> int:
        async with self.session_scope(session) as s:
            result = await s.execute(
                order_items.insert()
                .values(order_id=order_id, product_id=product_id, qty=qty, price=price)
                .returning(order_items.c.id)
            )
            return result.scalar_one()

    @log_operation()
    async def delete_items(self, order_id: int, session: Optional[AsyncSession] = None) -> int:
        async with self.session_scope(session) as s:
            result = await s.execute(delete(order_items).where(order_items.c.order_id == order_id))
            return result.rowcount

    @log_operation()
    async def sum_line_totals(self, order_id: int, session: Optional[AsyncSession] = None) -> Decimal:
        """Sum of qty * price over the order's items (0 when there are none)."""
        async with self.session_scope(session) as s:
            result = await s.execute(
                select(func.coalesce(func.sum(order_items.c.qty * order_items.c.price), 0)).where(
                    order_items.c.order_id == order_id
                )
            )
            return Decimal(str(result.scalar_one()))

    @log_operation()
    async def get_items(
        self, order_ids: Sequence[int], session: Optional[AsyncSession] = None
    ) -> Dict[int, List[Dict[str, Any]]]:
        """
        Items of the given orders with product names, grouped by order id.

        Items are returned in insertion (id) order.
        """
        result_map: Dict[int, List[Dict[str, Any]]] = defaultdict(list)
        if not order_ids:
            return result_map

        query = (
            select(
                order_items.c.id,
                order_items.c.order_id,
                order_items.c.product_id,
                order_items.c.qty,
                order_items.c.price,
                products.c.name.label("product_name"),
            )
            .select_from(order_items.outerjoin(products, products.c.id == order_items.c.product_id))
            .where(order_items.c.order_id.in_(list(order_ids)))
            .order_by(order_items.c.id)
        )
        async with self.session_scope(session) as s:
            result = await s.execute(query)
            for row in result.mappings().all():
                result_map[row["order_id"]].append(dict(row))

        return result_map

    # ------------------------- Read views -------------------------
    @log_operation()
    async def list_recent_orders(self, limit: int, session: Optional[AsyncSession] = None) -> List[Dict[str, Any]]:
        async with self.session_scope(session) as s:
            result = await s.execute(select(*ORDER_COLUMNS).order_by(orders.c.id.desc()).limit(limit))
            return [dict(row) for row in result.mappings().all()]

    @log_operation()
    async def list_order_dates(
        self,
        start: Optional[date] = None,
        end: Optional[date] = None,
        session: Optional[AsyncSession] = None,
    ) -> List[date]:
        """
        Distinct order dates, newest first, optionally within [start, end).
        """
        query = select(orders.c.order_date).distinct().order_by(orders.c.order_date.desc())
        if start is not None:
            query = query.where(orders.c.order_date >= start)
        if end is not None:
            query = query.where(orders.c.order_date < end)

        async with self.session_scope(session) as s:
            result = await s.execute(query)
            return [row[0] for row in result.all()]

    @log_operation()
    async def list_orders_by_date(
        self, order_date: date, session: Optional[AsyncSession] = None
    ) -> List[Dict[str, Any]]:
        """Orders of a day joined with the customer name, ascending by id."""
        query = (
            select(*ORDER_COLUMNS, customers.c.name.label("customer_name"))
            .select_from(orders.join(customers, customers.c.id == orders.c.customer_id))
            .where(orders.c.order_date == order_date)
            .order_by(orders.c.id)
        )
        async with self.session_scope(session) as s:
            result = await s.execute(query)
            return [dict(row) for row in result.mappings().all()]
