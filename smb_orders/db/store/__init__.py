"""
Repositories for the order store.
"""

from .base import BaseRepository, log_operation
from .customer_repository import CustomerRepository
from .order_repository import OrderRepository
from .product_repository import ProductRepository

__all__ = [
    "BaseRepository",
    "log_operation",
    "CustomerRepository",
    "OrderRepository",
    "ProductRepository",
]
