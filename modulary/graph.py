"""
Module dependency graph: the registry table plus edge queries.

Edges are stored only on the dependent (``Module.dependencies``); reverse
lookups are computed on demand because every plan is recomputed from
scratch.
"""

from typing import Dict, Iterable, Iterator, List, Optional, Set

from .types import ALL_KINDS, DependencyRef, ImportKind, Module


class ModuleGraph:
    """
    Registered-module table with dependency and dependent queries.

    Registration order is preserved (re-registering an id keeps its
    original slot), which gives planners a stable tie-break.
    """

    def __init__(self):
        self._modules: Dict[str, Module] = {}

    def add(self, module: Module) -> None:
        """
        Insert or overwrite a module record.

        Args:
            module: Module to store under ``module.id``
        """
        self._modules[module.id] = module

    def remove(self, module_id: str) -> bool:
        """Drop a module record. Returns False if it was not registered."""
        return self._modules.pop(module_id, None) is not None

    def get(self, module_id: str) -> Optional[Module]:
        return self._modules.get(module_id)

    def modules(self) -> List[Module]:
        """Registered modules in registration order."""
        return list(self._modules.values())

    def get_dependencies(
        self,
        module_id: str,
        kinds: Iterable[ImportKind] = ALL_KINDS,
    ) -> List[DependencyRef]:
        """
        Get direct dependencies of a module.

        Args:
            module_id: Module id
            kinds: Import kinds to include

        Returns:
            Dependency references in declaration order (empty if unregistered)
        """
        module = self._modules.get(module_id)
        if module is None:
            return []
        kinds = tuple(kinds)
        return [dep for dep in module.dependencies if dep.import_kind in kinds]

    def get_dependents(
        self,
        module_id: str,
        kinds: Iterable[ImportKind] = ALL_KINDS,
    ) -> Set[str]:
        """
        Get modules that import the given module (one hop, reverse edges).

        Args:
            module_id: Module id
            kinds: Import kinds of the edges to follow

        Returns:
            Set of dependent module ids
        """
        return set(self.reverse_index(kinds).get(module_id, ()))

    def reverse_index(self, kinds: Iterable[ImportKind] = ALL_KINDS) -> Dict[str, List[str]]:
        """
        Map every referenced id to the modules importing it, built in one
        pass over the registry.

        Dependents are listed in registration order. Unregistered targets
        are included.
        """
        kinds = tuple(kinds)
        index: Dict[str, List[str]] = {}
        for name, module in self._modules.items():
            for dep_id in module.dependency_ids(kinds):
                dependents = index.setdefault(dep_id, [])
                if not dependents or dependents[-1] != name:
                    dependents.append(name)
        return index

    def get_recursive_dependents(
        self,
        module_id: str,
        kinds: Iterable[ImportKind] = ALL_KINDS,
    ) -> Set[str]:
        """
        Get the transitive closure of dependents.

        Cycle safe; the module itself is only included when it sits on a
        cycle.
        """
        index = self.reverse_index(kinds)
        visited: Set[str] = set()
        pending = [module_id]
        while pending:
            current = pending.pop()
            for dependent in index.get(current, ()):
                if dependent not in visited:
                    visited.add(dependent)
                    pending.append(dependent)
        return visited

    def get_recursive_dependencies(
        self,
        module_id: str,
        kinds: Iterable[ImportKind] = ALL_KINDS,
    ) -> Set[str]:
        """
        Get the transitive closure of dependency ids.

        Unregistered ids are included (they are reachable) but not
        expanded further.
        """
        kinds = tuple(kinds)
        visited: Set[str] = set()
        pending = [module_id]
        while pending:
            current = pending.pop()
            for dep in self.get_dependencies(current, kinds):
                if dep.target_id not in visited:
                    visited.add(dep.target_id)
                    pending.append(dep.target_id)
        return visited

    def missing_dependencies(self, module_id: str) -> List[str]:
        """Direct dependency ids of ``module_id`` that are not registered."""
        missing: List[str] = []
        for dep in self.get_dependencies(module_id):
            if dep.target_id not in self._modules and dep.target_id not in missing:
                missing.append(dep.target_id)
        return missing

    def find_cycle(self, kinds: Iterable[ImportKind] = ALL_KINDS) -> Optional[List[str]]:
        """
        Find a cycle among registered modules using Tarjan's algorithm.

        The depth-first search keeps its own stack, so arbitrarily long
        dependency chains are fine.

        Returns:
            List of module ids forming a cycle, or None if no cycle
        """
        kinds = tuple(kinds)
        counter = 0
        stack: List[str] = []
        lowlinks: Dict[str, int] = {}
        index: Dict[str, int] = {}
        on_stack: Set[str] = set()
        cycles: List[List[str]] = []

        def enter(name: str) -> Iterator[str]:
            nonlocal counter
            index[name] = lowlinks[name] = counter
            counter += 1
            stack.append(name)
            on_stack.add(name)
            return iter(self._modules[name].dependency_ids(kinds))

        for root in self._modules:
            if root in index:
                continue
            work = [(root, enter(root))]
            while work:
                name, deps = work[-1]
                for dep_name in deps:
                    if dep_name not in self._modules:
                        continue
                    if dep_name == name:
                        cycles.append([name])
                    elif dep_name not in index:
                        work.append((dep_name, enter(dep_name)))
                        break
                    elif dep_name in on_stack:
                        lowlinks[name] = min(lowlinks[name], index[dep_name])
                else:
                    work.pop()
                    # Root of an SCC: pop the component
                    if lowlinks[name] == index[name]:
                        component: List[str] = []
                        while True:
                            w = stack.pop()
                            on_stack.remove(w)
                            component.append(w)
                            if w == name:
                                break
                        if len(component) > 1:
                            cycles.append(list(reversed(component)))
                    if work:
                        parent = work[-1][0]
                        lowlinks[parent] = min(lowlinks[parent], lowlinks[name])

        return cycles[0] if cycles else None

    def to_dict(self) -> Dict[str, List[dict]]:
        """Export graph as an adjacency dict of dependency references."""
        return {
            name: [dep.to_dict() for dep in module.dependencies]
            for name, module in self._modules.items()
        }

    def to_dot(self) -> str:
        """
        Export graph as DOT format for visualization.

        Dynamic edges are dashed; unregistered targets are drawn red.
        """
        lines = ["digraph modules {"]
        lines.append("  rankdir=LR;")
        lines.append("  node [shape=box, style=rounded];")

        for name in self._modules:
            lines.append(f'  "{name}";')

        for name, module in self._modules.items():
            for dep in module.dependencies:
                if dep.target_id not in self._modules:
                    lines.append(f'  "{dep.target_id}" [color=red];')
                style = " [style=dashed]" if dep.import_kind is ImportKind.DYNAMIC else ""
                lines.append(f'  "{name}" -> "{dep.target_id}"{style};')

        lines.append("}")
        return "\n".join(lines)

    def __len__(self) -> int:
        return len(self._modules)

    def __contains__(self, module_id: object) -> bool:
        return module_id in self._modules

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._modules))

    def __repr__(self) -> str:
        return f"ModuleGraph({len(self._modules)} modules)"
