"""Merge policies applied when an order absorbs another call."""

from .notes import merge_notes

__all__ = ["merge_notes"]
