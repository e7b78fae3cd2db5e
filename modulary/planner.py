"""
Emission planning: what to preload, what gets a load tag, and what goes
into the resolution table.

A planner is a snapshot of one planning pass. It derives everything from
the graph and the queue it is given and holds no state that outlives the
pass; the scheduler builds a new planner for every print call.

Ordering is a depth-first post-order walk starting from the enqueued
modules in queue order and following dependencies in declaration order,
so dependencies always precede their dependents and independent branches
keep first-enqueue / first-declaration order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import (
    Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Set, Tuple,
)

from .diagnostics import Diagnostics, check_dependencies
from .faults import DependencyCycleFault, InvalidModuleDataFault
from .graph import ModuleGraph
from .placement import PlacementResolver
from .priority import PriorityResolver
from .queue import ModuleQueue
from .types import ALL_KINDS, STATIC_ONLY, ImportKind, Placement, Priority, Version

Composer = Callable[[str, Optional[str], Version], str]
DataProvider = Callable[[Dict[str, Any]], Any]


# ============================================================================
# Plan entries
# ============================================================================

@dataclass(frozen=True)
class PreloadEntry:
    """A static dependency to fetch ahead of execution."""

    id: str
    address: str
    priority: Priority
    declared_priority: Priority

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "address": self.address,
            "priority": self.priority.value,
            "declared_priority": self.declared_priority.value,
        }


@dataclass(frozen=True)
class LoadTag:
    """An enqueued module that gets an executable load tag."""

    id: str
    address: str
    priority: Priority
    declared_priority: Priority
    placement: Placement
    dependencies: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "address": self.address,
            "priority": self.priority.value,
            "declared_priority": self.declared_priority.value,
            "placement": self.placement.value,
            "dependencies": list(self.dependencies),
        }


@dataclass(frozen=True)
class ResolutionEntry:
    """Id -> address mapping for runtime import resolution."""

    id: str
    address: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "address": self.address}


@dataclass(frozen=True)
class ModuleData:
    """JSON data exposed to a module at runtime."""

    id: str
    data: Mapping[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "data": dict(self.data)}


def build_import_map(entries: Iterable[ResolutionEntry]) -> Dict[str, Dict[str, str]]:
    """Import map document for resolution-table entries."""
    return {"imports": {entry.id: entry.address for entry in entries}}


@dataclass
class RenderPlan:
    """Every output of one planning pass."""

    preloads: List[PreloadEntry] = field(default_factory=list)
    early: List[LoadTag] = field(default_factory=list)
    late: List[LoadTag] = field(default_factory=list)
    resolution_table: List[ResolutionEntry] = field(default_factory=list)
    module_data: List[ModuleData] = field(default_factory=list)

    def import_map(self) -> Dict[str, Dict[str, str]]:
        return build_import_map(self.resolution_table)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "preloads": [entry.to_dict() for entry in self.preloads],
            "early": [tag.to_dict() for tag in self.early],
            "late": [tag.to_dict() for tag in self.late],
            "resolution_table": [entry.to_dict() for entry in self.resolution_table],
            "module_data": [entry.to_dict() for entry in self.module_data],
        }


# ============================================================================
# Planner
# ============================================================================

class EmissionPlanner:
    """
    Plans the output of one render pass.

    Args:
        graph: Module graph
        queue: Enqueued ids
        composer: ``(id, raw_address, version) -> address`` collaborator
        diagnostics: Collector for missing dependencies, cycles, bad data
        data_providers: Module data callables keyed by module id
    """

    def __init__(
        self,
        graph: ModuleGraph,
        queue: ModuleQueue,
        *,
        composer: Composer,
        diagnostics: Optional[Diagnostics] = None,
        data_providers: Optional[Mapping[str, Sequence[DataProvider]]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.graph = graph
        self.queue = queue
        self.composer = composer
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.data_providers = data_providers or {}
        self.logger = logger or logging.getLogger("modulary.planner")

        self._emittable = self._resolve_emittable()
        self.enqueued: List[str] = [mid for mid in queue if mid in self._emittable]
        self._enqueued_set = frozenset(self.enqueued)

        self.placement = PlacementResolver(graph)
        self.priority = PriorityResolver(graph, self._enqueued_set)
        self._walks: Dict[Tuple[ImportKind, ...], Tuple[List[str], Set[str]]] = {}
        self._addresses: Dict[str, str] = {}

    # ========================================================================
    # Validity
    # ========================================================================

    def _resolve_emittable(self) -> Set[str]:
        """
        Registered modules reachable from the queue whose whole dependency
        subgraph is registered.

        A module with unregistered dependencies is excluded and reported;
        anything depending on an excluded module is excluded as well.
        """
        reachable: Set[str] = set()
        pending = list(self.queue)
        while pending:
            module_id = pending.pop()
            if module_id in reachable or module_id not in self.graph:
                continue
            reachable.add(module_id)
            pending.extend(self.graph.get(module_id).dependency_ids())

        dependents: Dict[str, List[str]] = {}
        excluded: Set[str] = set()
        for module_id in self.graph:
            if module_id not in reachable:
                continue
            for dep_id in self.graph.get(module_id).dependency_ids():
                dependents.setdefault(dep_id, []).append(module_id)
            if check_dependencies(self.graph, module_id, self.diagnostics):
                excluded.add(module_id)

        pending = list(excluded)
        while pending:
            broken = pending.pop()
            for module_id in dependents.get(broken, ()):
                if module_id not in excluded:
                    self.logger.debug(
                        f"Excluding '{module_id}': depends on excluded module '{broken}'"
                    )
                    excluded.add(module_id)
                    pending.append(module_id)

        return reachable - excluded

    def is_emittable(self, module_id: str) -> bool:
        return module_id in self._emittable

    # ========================================================================
    # Traversal
    # ========================================================================

    def _walk(self, kinds: Iterable[ImportKind]) -> Tuple[List[str], Set[str]]:
        """
        Post-order walk from the enqueued modules.

        The walk keeps an explicit stack, so chain length is unbounded.

        Returns:
            (order, reached) where ``order`` lists every visited module with
            dependencies first and ``reached`` holds the modules that were
            reached as a dependency of another visited module
        """
        kinds = tuple(kinds)
        if kinds in self._walks:
            return self._walks[kinds]

        order: List[str] = []
        reached: Set[str] = set()
        done: Set[str] = set()
        path: List[str] = []
        on_path: Dict[str, int] = {}

        def enter(module_id: str) -> Iterator[str]:
            on_path[module_id] = len(path)
            path.append(module_id)
            return iter(self.graph.get(module_id).dependency_ids(kinds))

        for root in self.enqueued:
            if root in done:
                continue
            stack = [(root, enter(root))]
            while stack:
                module_id, deps = stack[-1]
                for dep_id in deps:
                    if dep_id not in self._emittable:
                        continue
                    reached.add(dep_id)
                    if dep_id in on_path:
                        # Back edge: keep the order of first entry.
                        self.diagnostics.report(DependencyCycleFault(path[on_path[dep_id]:]))
                    elif dep_id not in done:
                        stack.append((dep_id, enter(dep_id)))
                        break
                else:
                    stack.pop()
                    path.pop()
                    del on_path[module_id]
                    done.add(module_id)
                    order.append(module_id)

        self._walks[kinds] = (order, reached)
        return order, reached

    def _address(self, module_id: str) -> str:
        if module_id not in self._addresses:
            module = self.graph.get(module_id)
            self._addresses[module_id] = self.composer(module_id, module.address, module.version)
        return self._addresses[module_id]

    # ========================================================================
    # Derived attributes
    # ========================================================================

    def effective_priority(self, module_id: str) -> Priority:
        return self.priority.effective_priority(module_id)

    def effective_placement(self, module_id: str) -> Placement:
        return self.placement.effective_placement(module_id)

    # ========================================================================
    # Plans
    # ========================================================================

    def plan_preloads(self) -> List[PreloadEntry]:
        """
        Static dependencies of the queue that are not enqueued themselves.

        Modules reachable only through a dynamic import are never preloaded.
        """
        order, _ = self._walk(STATIC_ONLY)
        entries: List[PreloadEntry] = []
        for module_id in order:
            if module_id in self._enqueued_set:
                continue
            address = self._address(module_id)
            if not address:
                continue
            entries.append(
                PreloadEntry(
                    id=module_id,
                    address=address,
                    priority=self.effective_priority(module_id),
                    declared_priority=self.graph.get(module_id).priority,
                )
            )
        return entries

    def plan_load_tags(self, placement: Placement) -> List[LoadTag]:
        """
        Enqueued modules whose effective placement matches ``placement``.

        Modules without an address get no tag.
        """
        placement = Placement(placement)
        order, _ = self._walk(ALL_KINDS)
        tags: List[LoadTag] = []
        for module_id in order:
            if module_id not in self._enqueued_set:
                continue
            if self.effective_placement(module_id) is not placement:
                continue
            address = self._address(module_id)
            if not address:
                self.logger.debug(f"No load tag for '{module_id}': empty address")
                continue
            module = self.graph.get(module_id)
            tags.append(
                LoadTag(
                    id=module_id,
                    address=address,
                    priority=self.effective_priority(module_id),
                    declared_priority=module.priority,
                    placement=placement,
                    dependencies=tuple(module.dependency_ids()),
                )
            )
        return tags

    def plan_resolution_table(self) -> List[ResolutionEntry]:
        """
        Every module reached as a static or dynamic dependency of the queue,
        enqueued or not.

        An enqueued module only appears when another visited module
        imports it.
        """
        order, reached = self._walk(ALL_KINDS)
        entries: List[ResolutionEntry] = []
        for module_id in order:
            if module_id not in reached:
                continue
            address = self._address(module_id)
            if address:
                entries.append(ResolutionEntry(id=module_id, address=address))
        return entries

    def plan_module_data(self) -> List[ModuleData]:
        """
        Data for enqueued modules and resolution-table modules.

        Providers for a module are chained; empty results are skipped and
        non-mapping results are reported and skipped.
        """
        order, reached = self._walk(ALL_KINDS)

        entries: List[ModuleData] = []
        for module_id in order:
            providers = self.data_providers.get(module_id)
            if not providers:
                continue
            if module_id not in self._enqueued_set and not (
                module_id in reached and self._address(module_id)
            ):
                continue
            data: Any = {}
            for provider in providers:
                data = provider(data)
                if not isinstance(data, Mapping):
                    break
            if not isinstance(data, Mapping):
                self.diagnostics.report(InvalidModuleDataFault(module_id, data))
                continue
            if data:
                entries.append(ModuleData(id=module_id, data=dict(data)))
        return entries

    def plan(self) -> RenderPlan:
        return RenderPlan(
            preloads=self.plan_preloads(),
            early=self.plan_load_tags(Placement.EARLY),
            late=self.plan_load_tags(Placement.LATE),
            resolution_table=self.plan_resolution_table(),
            module_data=self.plan_module_data(),
        )
