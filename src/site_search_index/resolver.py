"""Lookup of named string fields inside nested content sections."""

from collections.abc import Mapping
from typing import Any

MAX_DEPTH = 32


def find_nested_field(obj: Any, target_field: str, max_depth: int = MAX_DEPTH) -> str | None:
    """Find the first non-empty string field with the given name.

    The search is depth-first and pre-order: a direct property wins over
    anything nested below it, then nested mappings are visited in insertion
    order. Lists are not descended into. Structures deeper than
    ``max_depth`` are treated as not containing the field.

    Args:
        obj: Section mapping to search.
        target_field: Name of the field to find.
        max_depth: Maximum number of nested levels to visit.

    Returns:
        The field value, or None when it is not found.
    """
    if not isinstance(obj, Mapping) or max_depth < 0:
        return None

    value = obj.get(target_field)
    if isinstance(value, str) and value:
        return value

    for child in obj.values():
        if isinstance(child, Mapping):
            found = find_nested_field(child, target_field, max_depth - 1)
            if found is not None:
                return found

    return None
