"""OrderCodeGenerator service - SRP compliance."""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from smb_orders.db.store.order_repository import OrderRepository

logger = logging.getLogger(__name__)


def format_order_code(order_date: date, sequence: int) -> str:
    """
    Build the human-readable code ``ddmmyy_seq``.

    >>> format_order_code(date(2025, 9, 1), 3)
    '010925_3'
    """
    if sequence < 1:
        raise ValueError(f"Order code sequence must be positive: {sequence}")
    return f"{order_date:%d%m%y}_{sequence}"


class OrderCodeGenerator:
    """Allocates order codes from the per-date counter (SRP: codes only)."""

    def __init__(self, order_repo: OrderRepository):
        """
        Initialize with repository dependency (DIP).

        Args:
            order_repo: Repository owning the per-date code counter
        """
        self.order_repo = order_repo

    async def generate(self, order_date: date, session: Optional[AsyncSession] = None) -> str:
        """
        Allocate the next code for ``order_date``.

        Codes are only assigned when an order is first created and are never
        regenerated afterwards.

        Args:
            order_date: Calendar day of the new order
            session: Transaction creating the order

        Returns:
            str: Order code such as ``010925_1``
        """
        sequence = await self.order_repo.next_code_sequence(order_date, session=session)
        code = format_order_code(order_date, sequence)
        logger.debug(f"Allocated order code {code} for {order_date}")
        return code
