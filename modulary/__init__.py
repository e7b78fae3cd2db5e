"""
Modulary - dependency-aware registry and emission scheduler for ES modules.

Given registered modules and the subset enqueued for a render pass,
Modulary decides:
- Which static dependencies get a ``modulepreload`` link
- Which enqueued modules get a load tag, in the head or the footer
- Which ids go into the import map
- The fetch priority of every emitted tag

Placement flows from dependencies to dependents, priority from enqueued
dependents to their static dependencies. Everything is recomputed from the
graph on every print call.
"""

import logging

__version__ = "0.1.0"

from .types import (
    Priority,
    Placement,
    ImportKind,
    DependencyRef,
    Module,
    Version,
)
from .graph import ModuleGraph
from .queue import ModuleQueue
from .diagnostics import Diagnostics, check_dependencies
from .placement import PlacementResolver
from .priority import PriorityResolver
from .addresses import AddressComposer, add_query_arg
from .planner import (
    EmissionPlanner,
    PreloadEntry,
    LoadTag,
    ResolutionEntry,
    ModuleData,
    RenderPlan,
)
from .render import MarkupRenderer, script_safe_json
from .config import SchedulerConfig, ConfigLoader
from .scheduler import ModuleScheduler
from .manifest import Manifest, ModuleEntry, load_manifest, parse_manifest, apply_manifest
from .fingerprint import PlanFingerprint, fingerprint
from .faults import (
    Fault,
    FaultDomain,
    Severity,
    EmptyModuleIdFault,
    InvalidPriorityFault,
    InvalidPlacementFault,
    InvalidDependencyFault,
    InvalidOptionsFault,
    UnknownModuleFault,
    MissingDependencyFault,
    DependencyCycleFault,
    InvalidModuleDataFault,
    ConfigInvalidFault,
    ManifestInvalidFault,
)

logging.getLogger("modulary").addHandler(logging.NullHandler())

__all__ = [
    "__version__",

    # Model
    "Priority",
    "Placement",
    "ImportKind",
    "DependencyRef",
    "Module",
    "Version",

    # Graph & queue
    "ModuleGraph",
    "ModuleQueue",
    "PlacementResolver",
    "PriorityResolver",

    # Planning & output
    "EmissionPlanner",
    "PreloadEntry",
    "LoadTag",
    "ResolutionEntry",
    "ModuleData",
    "RenderPlan",
    "AddressComposer",
    "add_query_arg",
    "MarkupRenderer",
    "script_safe_json",

    # Facade
    "ModuleScheduler",
    "SchedulerConfig",
    "ConfigLoader",

    # Manifests & fingerprints
    "Manifest",
    "ModuleEntry",
    "load_manifest",
    "parse_manifest",
    "apply_manifest",
    "PlanFingerprint",
    "fingerprint",

    # Diagnostics
    "Diagnostics",
    "check_dependencies",
    "Fault",
    "FaultDomain",
    "Severity",
    "EmptyModuleIdFault",
    "InvalidPriorityFault",
    "InvalidPlacementFault",
    "InvalidDependencyFault",
    "InvalidOptionsFault",
    "UnknownModuleFault",
    "MissingDependencyFault",
    "DependencyCycleFault",
    "InvalidModuleDataFault",
    "ConfigInvalidFault",
    "ManifestInvalidFault",
]
