"""
Modulary faults - typed fault signals.

Scheduler anomalies are values: they carry a stable code, a domain and a
severity, and are reported to a ``Diagnostics`` collector instead of
aborting the render pass. Configuration and manifest faults are raised.
"""

from .core import (
    Fault,
    FaultDomain,
    Severity,
    DOMAIN_DEFAULTS,
)

from .domains import (
    RegistryFault,
    EmptyModuleIdFault,
    InvalidPriorityFault,
    InvalidPlacementFault,
    InvalidDependencyFault,
    InvalidOptionsFault,
    UnknownModuleFault,
    GraphFault,
    MissingDependencyFault,
    DependencyCycleFault,
    InvalidModuleDataFault,
    ConfigFault,
    ConfigInvalidFault,
    ManifestInvalidFault,
)

__all__ = [
    # Core types
    "Fault",
    "FaultDomain",
    "Severity",
    "DOMAIN_DEFAULTS",

    # Registry
    "RegistryFault",
    "EmptyModuleIdFault",
    "InvalidPriorityFault",
    "InvalidPlacementFault",
    "InvalidDependencyFault",
    "InvalidOptionsFault",
    "UnknownModuleFault",

    # Graph
    "GraphFault",
    "MissingDependencyFault",
    "DependencyCycleFault",

    # Data
    "InvalidModuleDataFault",

    # Config
    "ConfigFault",
    "ConfigInvalidFault",
    "ManifestInvalidFault",
]
