"""Ordering for entities with an optional integer priority."""

from functools import cmp_to_key
from typing import Optional


class HasPriority:
    """Mixin for entities that may carry a priority; lower sorts first."""

    priority: Optional[int] = None

    def has_priority(self) -> bool:
        return self.priority is not None


def compare_priority(a: HasPriority, b: HasPriority) -> int:
    """Comparator placing prioritised entities first, in ascending order."""
    if not b.has_priority():
        return -1 if a.has_priority() else 0
    if not a.has_priority():
        return 1
    return (a.priority > b.priority) - (a.priority < b.priority)


priority_key = cmp_to_key(compare_priority)
