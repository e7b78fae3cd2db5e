"""
Enqueue list: module ids explicitly requested for output.
"""

from typing import Dict, Iterator, List


class ModuleQueue:
    """
    Ordered, de-duplicated set of enqueued module ids.

    Independent of the registry so ids may be enqueued before they are
    registered. Order is first-enqueue order; removal never reorders the
    remaining ids.
    """

    __slots__ = ("_ids",)

    def __init__(self):
        self._ids: Dict[str, None] = {}

    def add(self, module_id: str) -> bool:
        """Append an id. Returns False if it was already queued."""
        if module_id in self._ids:
            return False
        self._ids[module_id] = None
        return True

    def discard(self, module_id: str) -> bool:
        """Remove an id. Returns False if it was not queued."""
        if module_id not in self._ids:
            return False
        del self._ids[module_id]
        return True

    def ids(self) -> List[str]:
        return list(self._ids)

    def clear(self) -> None:
        self._ids.clear()

    def __contains__(self, module_id: object) -> bool:
        return module_id in self._ids

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._ids))

    def __len__(self) -> int:
        return len(self._ids)

    def __repr__(self) -> str:
        return f"ModuleQueue({list(self._ids)!r})"
