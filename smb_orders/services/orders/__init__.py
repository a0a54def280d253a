"""
Order services package for order consolidation.

This package contains the consolidation engine: validation, order
resolution, item merging, aggregate recomputation, full replacement and
bulk import.
"""

from .commands import ConsolidationResult, CreateOrderCommand, ImportResult, ReplaceOrderCommand
from .importer import BatchImportOrchestrator, create_batch_importer, group_rows
from .orchestrator import OrderConsolidationOrchestrator, create_orchestrator

__all__ = [
    "BatchImportOrchestrator",
    "ConsolidationResult",
    "CreateOrderCommand",
    "ImportResult",
    "OrderConsolidationOrchestrator",
    "ReplaceOrderCommand",
    "create_batch_importer",
    "create_orchestrator",
    "group_rows",
]
