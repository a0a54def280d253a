"""
Notes merge policy.

Notes accumulate across merges: the stored text comes first, the
incoming text is appended after a separator.
"""

DEFAULT_SEPARATOR = " | "


def _has_text(value: str | None) -> bool:
    return bool(value and value.strip())


def merge_notes(existing: str | None, incoming: str | None, separator: str = DEFAULT_SEPARATOR) -> str:
    """
    Combine stored and incoming notes.

    Examples:
        >>> merge_notes("", "leave at door")
        'leave at door'
        >>> merge_notes("no onion", "")
        'no onion'
        >>> merge_notes("no onion", "extra rice")
        'no onion | extra rice'

    Whitespace-only text counts as empty. No deduplication is performed,
    so merging the same note twice stores it twice.
    """
    if _has_text(existing) and _has_text(incoming):
        return f"{existing}{separator}{incoming}"
    if _has_text(existing):
        return existing
    if _has_text(incoming):
        return incoming
    return ""
