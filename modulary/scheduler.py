"""
ModuleScheduler - registry and emission scheduler for loadable modules.

One scheduler is one render pass worth of state: the registry, the queue,
module data providers and collected diagnostics. Hosts create an instance
per request (or per pass) and hand it around explicitly; there is no
module-level singleton.

Usage:
    ```python
    scheduler = ModuleScheduler(SchedulerConfig(ambient_version="1.2.0"))
    scheduler.register("shared", "/js/shared.js", options={"priority": "low"})
    scheduler.enqueue("app", "/js/app.js", ["shared"], "2.0", {"priority": "high"})

    head = scheduler.print_preloads() + scheduler.print_import_map()
    head += scheduler.print_head_modules()
    footer = scheduler.print_footer_modules() + scheduler.print_module_data()
    ```
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Set

from .addresses import AddressComposer
from .config import SchedulerConfig
from .diagnostics import Diagnostics, check_dependencies
from .faults import (
    EmptyModuleIdFault,
    InvalidDependencyFault,
    InvalidOptionsFault,
    InvalidPlacementFault,
    InvalidPriorityFault,
    UnknownModuleFault,
)
from .graph import ModuleGraph
from .planner import (
    Composer,
    DataProvider,
    EmissionPlanner,
    LoadTag,
    ModuleData,
    PreloadEntry,
    RenderPlan,
    ResolutionEntry,
)
from .queue import ModuleQueue
from .render import MarkupRenderer
from .types import DependencyRef, Module, Placement, Priority, Version


class ModuleScheduler:
    """
    Registers modules, tracks what is enqueued and plans their emission.

    Registration never fails: bad option values are clamped to their
    defaults and reported to ``diagnostics``. Every plan and print call
    recomputes from the current state, so calling them repeatedly or in
    any order gives the same output until the next mutation.

    Args:
        config: Scheduler configuration
        composer: Address composer; defaults to an ``AddressComposer``
            built from ``config``
        renderer: Markup renderer; defaults to a ``MarkupRenderer``
        diagnostics: Diagnostics collector
        logger: Logger for mutations
    """

    def __init__(
        self,
        config: Optional[SchedulerConfig] = None,
        *,
        composer: Optional[Composer] = None,
        renderer: Optional[MarkupRenderer] = None,
        diagnostics: Optional[Diagnostics] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config or SchedulerConfig()
        self.composer = composer or AddressComposer(
            self.config.ambient_version,
            version_param=self.config.version_param,
        )
        self.renderer = renderer or MarkupRenderer(self.config)
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.logger = logger or logging.getLogger("modulary.scheduler")

        self.graph = ModuleGraph()
        self.queue = ModuleQueue()
        self._data_providers: Dict[str, List[DataProvider]] = {}

    # ========================================================================
    # Registration
    # ========================================================================

    def register(
        self,
        module_id: str,
        address: Optional[str],
        dependencies: Optional[Iterable[Any]] = None,
        version: Version = False,
        options: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """
        Register a module, overwriting any previous record with the same id.

        Args:
            module_id: Unique module id
            address: Source address; empty means no load tag of its own
            dependencies: Ids, ``{"id": ..., "import": "static"|"dynamic"}``
                mappings or ``DependencyRef`` objects
            version: String version, False for the ambient version, None
                for no version suffix
            options: ``{"priority": "auto"|"low"|"high",
                "placement": "early"|"late"}``
        """
        if not module_id:
            self.diagnostics.report(EmptyModuleIdFault("register"))
            return

        if options is None:
            options = {}
        elif not isinstance(options, Mapping):
            self.diagnostics.report(InvalidOptionsFault(module_id, options))
            options = {}
        module = Module(
            id=module_id,
            address=address,
            dependencies=self._parse_dependencies(module_id, dependencies or []),
            version=version,
            priority=self._parse_priority(module_id, options.get("priority", Priority.AUTO)),
            placement=self._parse_placement(module_id, options.get("placement", Placement.EARLY)),
        )
        if module_id in self.graph:
            self.logger.debug(f"Re-registering module '{module_id}'")
        self.graph.add(module)
        self.logger.debug(
            f"Registered module '{module_id}' "
            f"({len(module.dependencies)} dependencies, {module.priority.value}, "
            f"{module.placement.value})"
        )

    def enqueue(
        self,
        module_id: str,
        address: Optional[str] = None,
        dependencies: Optional[Iterable[Any]] = None,
        version: Version = False,
        options: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """
        Mark a module for output.

        When the id is not registered yet and an address is supplied, the
        module is registered first. For an already registered id the extra
        arguments are ignored. Enqueueing an unknown id without an address
        is allowed; the module is emitted once it gets registered.
        """
        if not module_id:
            self.diagnostics.report(EmptyModuleIdFault("enqueue"))
            return

        if module_id not in self.graph and address:
            self.register(module_id, address, dependencies, version, options)
        if self.queue.add(module_id):
            self.logger.debug(f"Enqueued module '{module_id}'")

    def dequeue(self, module_id: str) -> None:
        """Remove a module from the queue; its registration survives."""
        if self.queue.discard(module_id):
            self.logger.debug(f"Dequeued module '{module_id}'")
        elif module_id not in self.graph:
            self.diagnostics.report(UnknownModuleFault(module_id, "dequeue"))

    def deregister(self, module_id: str) -> None:
        """Remove a module from both the registry and the queue."""
        queued = self.queue.discard(module_id)
        if self.graph.remove(module_id):
            self.logger.debug(f"Deregistered module '{module_id}'")
        elif not queued:
            self.diagnostics.report(UnknownModuleFault(module_id, "deregister"))

    def set_priority(self, module_id: str, priority: Any) -> bool:
        """
        Change the declared priority of a registered module.

        Returns:
            True on success; False for an unknown id or an invalid value,
            in which case the declared priority is left unchanged
        """
        module = self.graph.get(module_id)
        if module is None:
            self.diagnostics.report(UnknownModuleFault(module_id, "set the priority of"))
            return False
        parsed = Priority.parse(priority)
        if parsed is None:
            self.diagnostics.report(InvalidPriorityFault(module_id, priority))
            return False
        module.priority = parsed
        return True

    def set_placement(self, module_id: str, placement: Any) -> bool:
        """
        Change the declared placement of a registered module.

        Returns:
            True on success; False for an unknown id or an invalid value
        """
        module = self.graph.get(module_id)
        if module is None:
            self.diagnostics.report(UnknownModuleFault(module_id, "set the placement of"))
            return False
        parsed = Placement.parse(placement)
        if parsed is None:
            self.diagnostics.report(InvalidPlacementFault(module_id, placement))
            return False
        module.placement = parsed
        return True

    def add_data_provider(self, module_id: str, provider: DataProvider) -> None:
        """
        Attach a ``provider(data) -> data`` callable producing JSON data
        for a module. Providers for the same module are chained in order.
        """
        self._data_providers.setdefault(module_id, []).append(provider)

    def add_address_filter(self, address_filter: Callable[[str, str], str]) -> None:
        """
        Register an ``(address, module_id) -> address`` rewrite hook on the
        default composer.

        Raises:
            TypeError: If a custom composer without filter support is in use
        """
        if not isinstance(self.composer, AddressComposer):
            raise TypeError(
                f"{type(self.composer).__name__} does not support address filters"
            )
        self.composer.add_filter(address_filter)

    # ------------------------------------------------------------------------
    # Option parsing
    # ------------------------------------------------------------------------

    def _parse_priority(self, module_id: str, value: Any) -> Priority:
        parsed = Priority.parse(value)
        if parsed is None:
            self.diagnostics.report(InvalidPriorityFault(module_id, value))
            return Priority.AUTO
        return parsed

    def _parse_placement(self, module_id: str, value: Any) -> Placement:
        parsed = Placement.parse(value)
        if parsed is None:
            self.diagnostics.report(InvalidPlacementFault(module_id, value))
            return Placement.EARLY
        return parsed

    def _parse_dependencies(self, module_id: str, entries: Iterable[Any]) -> List[DependencyRef]:
        if isinstance(entries, (str, Mapping)):
            entries = [entries]
        elif not isinstance(entries, Iterable):
            self.diagnostics.report(InvalidDependencyFault(module_id, entries))
            return []
        dependencies: List[DependencyRef] = []
        for entry in entries:
            dep = DependencyRef.parse(entry)
            if dep is None:
                self.diagnostics.report(InvalidDependencyFault(module_id, entry))
                continue
            dependencies.append(dep)
        return dependencies

    # ========================================================================
    # Queries
    # ========================================================================

    def get_queue(self) -> List[str]:
        """Enqueued ids in first-enqueue order."""
        return self.queue.ids()

    def get_module(self, module_id: str) -> Optional[Module]:
        return self.graph.get(module_id)

    def is_registered(self, module_id: str) -> bool:
        return module_id in self.graph

    def get_dependencies(self, module_id: str) -> List[DependencyRef]:
        return self.graph.get_dependencies(module_id)

    def get_dependents(self, module_id: str) -> Set[str]:
        return self.graph.get_dependents(module_id)

    def get_recursive_dependents(self, module_id: str) -> Set[str]:
        return self.graph.get_recursive_dependents(module_id)

    def check_dependencies(self, module_id: str) -> List[str]:
        """Unregistered dependency ids of ``module_id`` (reported if any)."""
        return check_dependencies(self.graph, module_id, self.diagnostics)

    def planner(self) -> EmissionPlanner:
        """A fresh planner over the current registry and queue."""
        return EmissionPlanner(
            self.graph,
            self.queue,
            composer=self.composer,
            diagnostics=self.diagnostics,
            data_providers=self._data_providers,
        )

    def effective_priority(self, module_id: str) -> Priority:
        return self.planner().effective_priority(module_id)

    def effective_placement(self, module_id: str) -> Placement:
        return self.planner().effective_placement(module_id)

    # ========================================================================
    # Plans
    # ========================================================================

    def plan_preloads(self) -> List[PreloadEntry]:
        return self.planner().plan_preloads()

    def plan_load_tags(self, placement: Placement | str) -> List[LoadTag]:
        return self.planner().plan_load_tags(Placement(placement))

    def plan_resolution_table(self) -> List[ResolutionEntry]:
        return self.planner().plan_resolution_table()

    def plan_module_data(self) -> List[ModuleData]:
        return self.planner().plan_module_data()

    def plan(self) -> RenderPlan:
        return self.planner().plan()

    # ========================================================================
    # Printing
    # ========================================================================

    def print_preloads(self) -> str:
        return self.renderer.render_preloads(self.plan_preloads())

    def print_head_modules(self) -> str:
        return self.renderer.render_load_tags(self.plan_load_tags(Placement.EARLY))

    def print_footer_modules(self) -> str:
        return self.renderer.render_load_tags(self.plan_load_tags(Placement.LATE))

    def print_import_map(self) -> str:
        return self.renderer.render_import_map(self.plan_resolution_table())

    def print_module_data(self) -> str:
        return self.renderer.render_module_data(self.plan_module_data())

    def __repr__(self) -> str:
        return (
            f"ModuleScheduler({len(self.graph)} registered, "
            f"{len(self.queue)} enqueued)"
        )
