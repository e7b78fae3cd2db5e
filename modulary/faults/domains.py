"""
Modulary faults - Domain-specific fault types.

Provides concrete fault classes for each domain:
- REGISTRY faults
- GRAPH faults
- DATA faults
- CONFIG faults
"""

from typing import Any, Iterable, Optional
from .core import Fault, FaultDomain, Severity


def _describe(value: Any) -> str:
    """Render an offending option value the way diagnostics quote it."""
    if isinstance(value, str):
        return value
    return type(value).__name__


# ============================================================================
# REGISTRY Faults
# ============================================================================

class RegistryFault(Fault):
    """Base class for registration and queue faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.WARN,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.REGISTRY,
            severity=severity,
            metadata=metadata,
        )


class EmptyModuleIdFault(RegistryFault):
    """A module was registered or enqueued without an id."""

    def __init__(self, operation: str):
        super().__init__(
            code="MODULE_ID_EMPTY",
            message=f"Cannot {operation} a module with an empty id",
            metadata={"operation": operation},
        )


class InvalidPriorityFault(RegistryFault):
    """Priority option is not one of auto, low, high."""

    def __init__(self, module_id: str, value: Any):
        super().__init__(
            code="PRIORITY_INVALID",
            message=(
                f"Invalid priority `{_describe(value)}` for module \"{module_id}\", "
                f"must be one of: auto, low, high"
            ),
            metadata={"module": module_id, "value": _describe(value)},
        )


class InvalidPlacementFault(RegistryFault):
    """Placement option is not one of early, late."""

    def __init__(self, module_id: str, value: Any):
        super().__init__(
            code="PLACEMENT_INVALID",
            message=(
                f"Invalid placement `{_describe(value)}` for module \"{module_id}\", "
                f"must be one of: early, late"
            ),
            metadata={"module": module_id, "value": _describe(value)},
        )


class InvalidDependencyFault(RegistryFault):
    """A dependency entry could not be interpreted and was dropped."""

    def __init__(self, module_id: str, entry: Any):
        super().__init__(
            code="DEPENDENCY_INVALID",
            message=(
                f"Ignoring malformed dependency `{_describe(entry)}` "
                f"of module \"{module_id}\""
            ),
            metadata={"module": module_id, "entry": _describe(entry)},
        )


class InvalidOptionsFault(RegistryFault):
    """Registration options were not a mapping and were ignored."""

    def __init__(self, module_id: str, value: Any):
        super().__init__(
            code="OPTIONS_INVALID",
            message=(
                f"Ignoring options `{_describe(value)}` of module \"{module_id}\", "
                f"expected a mapping"
            ),
            metadata={"module": module_id, "value": _describe(value)},
        )


class UnknownModuleFault(RegistryFault):
    """An operation targeted an id that is not registered."""

    def __init__(self, module_id: str, operation: str):
        super().__init__(
            code="MODULE_UNKNOWN",
            message=f"Cannot {operation} unregistered module \"{module_id}\"",
            severity=Severity.INFO,
            metadata={"module": module_id, "operation": operation},
        )


# ============================================================================
# GRAPH Faults
# ============================================================================

class GraphFault(Fault):
    """Base class for dependency graph faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.ERROR,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.GRAPH,
            severity=severity,
            metadata=metadata,
        )


class MissingDependencyFault(GraphFault):
    """A module references dependency ids that are not registered."""

    def __init__(self, module_id: str, missing: Iterable[str]):
        missing = list(missing)
        super().__init__(
            code="DEPENDENCY_MISSING",
            message=(
                f"The module \"{module_id}\" was enqueued with dependencies "
                f"that are not registered: {', '.join(missing)}"
            ),
            metadata={"module": module_id, "missing": missing},
        )


class DependencyCycleFault(GraphFault):
    """Circular dependency met while ordering modules."""

    def __init__(self, cycle: list[str]):
        cycle_str = " → ".join(cycle + cycle[:1])
        super().__init__(
            code="DEPENDENCY_CYCLE",
            message=f"Circular dependency detected: {cycle_str}",
            severity=Severity.WARN,
            metadata={"cycle": cycle},
        )

    @property
    def key(self) -> tuple:
        # The same cycle may be entered from any member.
        return (self.code, frozenset(self.metadata["cycle"]))


# ============================================================================
# DATA Faults
# ============================================================================

class InvalidModuleDataFault(Fault):
    """A module data provider returned something other than a mapping."""

    def __init__(self, module_id: str, value: Any):
        super().__init__(
            code="MODULE_DATA_INVALID",
            message=(
                f"Data for module \"{module_id}\" must be a mapping, "
                f"got {type(value).__name__}"
            ),
            domain=FaultDomain.DATA,
            severity=Severity.WARN,
            metadata={"module": module_id, "type": type(value).__name__},
        )


# ============================================================================
# CONFIG Faults
# ============================================================================

class ConfigFault(Fault):
    """Base class for configuration and manifest faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.CONFIG,
            severity=Severity.ERROR,
            metadata=metadata,
        )


class ConfigInvalidFault(ConfigFault):
    """Configuration value is invalid."""

    def __init__(self, key: str, reason: str):
        super().__init__(
            code="CONFIG_INVALID",
            message=f"Configuration key '{key}' is invalid: {reason}",
            metadata={"key": key, "reason": reason},
        )


class ManifestInvalidFault(ConfigFault):
    """Manifest validation failed."""

    def __init__(self, source: str, errors: list[str]):
        super().__init__(
            code="MANIFEST_INVALID",
            message=f"Manifest '{source}' validation failed: {'; '.join(errors)}",
            metadata={"source": source, "errors": errors},
        )
