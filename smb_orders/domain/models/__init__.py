"""
Domain models for business entities.

These models represent core business concepts and contain
business logic and invariants.
"""

from .customer import CustomerDomain
from .order import OrderDomain
from .order_item import OrderItemDomain, OrderLine

__all__ = ["OrderDomain", "OrderItemDomain", "OrderLine", "CustomerDomain"]
