"""Manager services for order mutations."""

from .aggregate_calculator import AggregateCalculator, OrderAggregates, resolve_delivery_fee
from .item_merger import ItemMerger, MergeOutcome
from .order_replacer import OrderReplacer

__all__ = [
    "AggregateCalculator",
    "OrderAggregates",
    "resolve_delivery_fee",
    "ItemMerger",
    "MergeOutcome",
    "OrderReplacer",
]
