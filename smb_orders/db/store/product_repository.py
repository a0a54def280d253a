"""
ProductRepository: product catalog lookups and on-demand creation.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional, Set

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from smb_orders.db.schema import products
from smb_orders.db.store.base import BaseRepository, log_operation

logger = logging.getLogger(__name__)


class ProductRepository(BaseRepository):
    """Repository for product operations."""

    @log_operation()
    async def get_product_by_id(
        self, product_id: int, session: Optional[AsyncSession] = None
    ) -> Optional[Dict[str, Any]]:
        async with self.session_scope(session) as s:
            result = await s.execute(select(products).where(products.c.id == product_id))
            row = result.mappings().first()
            return dict(row) if row else None

    @log_operation()
    async def find_product_by_name(
        self, name: str, session: Optional[AsyncSession] = None
    ) -> Optional[Dict[str, Any]]:
        """Find a product by exact name (lowest id wins on duplicates)."""
        async with self.session_scope(session) as s:
            result = await s.execute(
                select(products).where(products.c.name == name).order_by(products.c.id).limit(1)
            )
            row = result.mappings().first()
            return dict(row) if row else None

    @log_operation()
    async def create_product(
        self,
        name: str,
        price: Decimal = Decimal("0"),
        active: Optional[bool] = None,
        session: Optional[AsyncSession] = None,
    ) -> int:
        """
        Insert a new product.

        Products created on demand by imports carry price 0; a product is
        active unless told otherwise or priced at 0.

        Returns:
            int: Id of the created product
        """
        if active is None:
            active = price > 0

        async with self.session_scope(session) as s:
            result = await s.execute(
                products.insert().values(name=name, price=price, active=active).returning(products.c.id)
            )
            product_id = result.scalar_one()

        logger.info(f"Created product {product_id} ({name})")
        return product_id

    @log_operation()
    async def find_missing_ids(self, product_ids: Iterable[int], session: Optional[AsyncSession] = None) -> Set[int]:
        """
        Return the subset of ids that do not exist in the catalog.
        """
        wanted = set(product_ids)
        if not wanted:
            return set()

        async with self.session_scope(session) as s:
            result = await s.execute(select(products.c.id).where(products.c.id.in_(wanted)))
            found = {row[0] for row in result.all()}

        return wanted - found
