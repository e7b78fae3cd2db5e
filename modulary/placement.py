"""
Document placement resolution.

Placement flows from a dependency to everything that (transitively)
imports it, over static and dynamic edges alike: a module cannot run
before the modules it pulls in are present in the document.
"""

from typing import Dict

from .graph import ModuleGraph
from .types import ALL_KINDS, Placement


class PlacementResolver:
    """
    Computes effective placement from the current graph.

    Results are memoised per resolver; create a new resolver for each
    planning pass.
    """

    def __init__(self, graph: ModuleGraph):
        self.graph = graph
        self._cache: Dict[str, Placement] = {}

    def effective_placement(self, module_id: str) -> Placement:
        """
        Late if the module itself, or any module it depends on through any
        chain of edges, is declared late. Early otherwise.
        """
        if module_id in self._cache:
            return self._cache[module_id]

        placement = Placement.EARLY
        module = self.graph.get(module_id)
        if module is not None and module.placement is Placement.LATE:
            placement = Placement.LATE
        else:
            for dep_id in self.graph.get_recursive_dependencies(module_id, ALL_KINDS):
                dep = self.graph.get(dep_id)
                if dep is not None and dep.placement is Placement.LATE:
                    placement = Placement.LATE
                    break

        self._cache[module_id] = placement
        return placement
