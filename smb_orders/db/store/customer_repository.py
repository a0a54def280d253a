"""
CustomerRepository: customer lookup, creation and contact backfill.

Customers are matched by exact (already trimmed) name; the name is the
lookup key used by batch imports.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from smb_orders.db.schema import customers
from smb_orders.db.store.base import BaseRepository, log_operation

logger = logging.getLogger(__name__)


class CustomerRepository(BaseRepository):
    """Repository for customer operations."""

    # ------------------------- Lookups -------------------------
    @log_operation()
    async def get_customer_by_id(
        self, customer_id: int, session: Optional[AsyncSession] = None
    ) -> Optional[Dict[str, Any]]:
        """Return the customer row as a dict, or None when absent."""
        async with self.session_scope(session) as s:
            result = await s.execute(select(customers).where(customers.c.id == customer_id))
            row = result.mappings().first()
            return dict(row) if row else None

    @log_operation()
    async def find_customer_by_name(
        self, name: str, session: Optional[AsyncSession] = None
    ) -> Optional[Dict[str, Any]]:
        """
        Find a customer by exact name.

        When several customers share a name the lowest id wins, so repeated
        imports keep resolving to the same customer.
        """
        async with self.session_scope(session) as s:
            result = await s.execute(
                select(customers).where(customers.c.name == name).order_by(customers.c.id).limit(1)
            )
            row = result.mappings().first()
            return dict(row) if row else None

    # ------------------------- Creation -------------------------
    @log_operation()
    async def create_customer(
        self,
        name: str,
        phone: str = "",
        address: str = "",
        tags: str = "",
        session: Optional[AsyncSession] = None,
    ) -> int:
        """
        Insert a new customer.

        Returns:
            int: Id of the created customer
        """
        async with self.session_scope(session) as s:
            result = await s.execute(
                customers.insert()
                .values(name=name, phone=phone or "", address=address or "", tags=tags or "")
                .returning(customers.c.id)
            )
            customer_id = result.scalar_one()

        logger.info(f"Created customer {customer_id} ({name})")
        return customer_id

    @log_operation()
    async def backfill_contact(
        self,
        customer_id: int,
        phone: str = "",
        address: str = "",
        session: Optional[AsyncSession] = None,
    ) -> bool:
        """
        Fill phone and address only where the stored value is blank.

        Non-blank stored values are never overwritten.

        Returns:
            bool: True if any field was updated
        """
        updated = False
        async with self.session_scope(session) as s:
            if phone:
                result = await s.execute(
                    update(customers)
                    .where(customers.c.id == customer_id)
                    .where(func.coalesce(customers.c.phone, "") == "")
                    .values(phone=phone)
                )
                updated = updated or result.rowcount > 0
            if address:
                result = await s.execute(
                    update(customers)
                    .where(customers.c.id == customer_id)
                    .where(func.coalesce(customers.c.address, "") == "")
                    .values(address=address)
                )
                updated = updated or result.rowcount > 0

        if updated:
            logger.debug(f"Backfilled contact data for customer {customer_id}")
        return updated
