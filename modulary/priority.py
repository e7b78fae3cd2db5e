"""
Fetch priority resolution.

Priority flows the opposite way to placement: from enqueued dependents
down to what they statically import. A shared dependency is fetched with
the highest priority among the enqueued modules that actually need it,
which makes the value depend on the current queue rather than on what
the dependency itself declares.

Dynamic edges never carry priority: whether a dynamic import happens is
unknown until runtime.
"""

from typing import AbstractSet, Dict, List, Optional, Set

from .graph import ModuleGraph
from .types import STATIC_ONLY, Priority


class PriorityResolver:
    """
    Computes effective priority for a fixed queue.

    The static reach of each enqueued module is walked once, on first
    lookup, and shared by every later lookup. Create a new resolver when
    the graph or the queue changes.

    Args:
        graph: Module graph
        enqueued: Ids of enqueued modules taking part in this pass
    """

    def __init__(self, graph: ModuleGraph, enqueued: AbstractSet[str]):
        self.graph = graph
        self.enqueued = enqueued
        self._cache: Dict[str, Priority] = {}
        self._dependents: Optional[Dict[str, List[str]]] = None

    def _dependents_index(self) -> Dict[str, List[str]]:
        """Module id -> enqueued modules reaching it through static imports."""
        if self._dependents is not None:
            return self._dependents

        index: Dict[str, List[str]] = {}
        for enqueued_id in sorted(self.enqueued):
            seen: Set[str] = set()
            pending = [enqueued_id]
            while pending:
                module = self.graph.get(pending.pop())
                if module is None:
                    continue
                for dep_id in module.dependency_ids(STATIC_ONLY):
                    if dep_id in seen:
                        continue
                    seen.add(dep_id)
                    pending.append(dep_id)
                    if dep_id != enqueued_id:
                        index.setdefault(dep_id, []).append(enqueued_id)

        self._dependents = index
        return index

    def enqueued_dependents(self, module_id: str) -> List[str]:
        """Enqueued modules that reach ``module_id`` through static imports."""
        return list(self._dependents_index().get(module_id, ()))

    def effective_priority(self, module_id: str) -> Priority:
        """
        Resolve the priority a module is fetched with.

        1. An enqueued module contributes its own declared priority.
        2. Every enqueued module statically depending on it, directly or
           transitively, contributes its declared priority.
        3. The highest contribution wins; with no contribution at all the
           module keeps its declared priority.
        """
        if module_id in self._cache:
            return self._cache[module_id]

        module = self.graph.get(module_id)
        declared = module.priority if module is not None else Priority.AUTO

        candidates = [
            self.graph.get(dependent_id).priority
            for dependent_id in self.enqueued_dependents(module_id)
        ]
        if module_id in self.enqueued:
            candidates.append(declared)

        priority = Priority.highest(candidates) or declared
        self._cache[module_id] = priority
        return priority
