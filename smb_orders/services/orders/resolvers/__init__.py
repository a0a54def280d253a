"""Resolver services mapping natural keys to stored entities."""

from .entity_resolver import EntityResolver, ImportContext
from .order_resolver import OrderResolver

__all__ = ["EntityResolver", "ImportContext", "OrderResolver"]
