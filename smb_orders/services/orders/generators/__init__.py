"""Generators for order identifiers."""

from .order_code import OrderCodeGenerator, format_order_code

__all__ = ["OrderCodeGenerator", "format_order_code"]
