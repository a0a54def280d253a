"""
Domain layer for order consolidation.

This layer contains business entities, value objects, and domain logic
independent of persistence and transport concerns.
"""
