"""
Value objects for the domain layer.

Value objects are immutable objects that represent concepts
with no conceptual identity, only defined by their attributes.
"""

from .money import Money
from .quantity import is_blank, parse_decimal

__all__ = ["Money", "parse_decimal", "is_blank"]
