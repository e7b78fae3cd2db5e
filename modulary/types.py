"""
Core data model: modules, dependency edges and loading hints.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union


class Priority(str, Enum):
    """Relative fetch priority hint. Precedence: high > auto > low."""

    LOW = "low"
    AUTO = "auto"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANKS[self]

    @classmethod
    def parse(cls, value: Any) -> Optional["Priority"]:
        """
        Interpret a user supplied priority.

        An empty string means ``auto``. Returns None for anything that is
        not a recognised priority.
        """
        if isinstance(value, Priority):
            return value
        if not isinstance(value, str):
            return None
        if value == "":
            return cls.AUTO
        try:
            return cls(value)
        except ValueError:
            return None

    @classmethod
    def highest(cls, priorities: Iterable["Priority"]) -> Optional["Priority"]:
        """Highest-precedence value of ``priorities`` or None when empty."""
        return max(priorities, key=lambda p: p.rank, default=None)


_PRIORITY_RANKS = {
    Priority.LOW: 0,
    Priority.AUTO: 1,
    Priority.HIGH: 2,
}


class Placement(str, Enum):
    """Document placement: early (head) or late (footer) group."""

    EARLY = "early"
    LATE = "late"

    @classmethod
    def parse(cls, value: Any) -> Optional["Placement"]:
        if isinstance(value, Placement):
            return value
        if not isinstance(value, str):
            return None
        if value == "":
            return cls.EARLY
        try:
            return cls(value)
        except ValueError:
            return None


class ImportKind(str, Enum):
    """How a dependency is imported by its dependent."""

    STATIC = "static"
    DYNAMIC = "dynamic"


ALL_KINDS: Tuple[ImportKind, ...] = (ImportKind.STATIC, ImportKind.DYNAMIC)
STATIC_ONLY: Tuple[ImportKind, ...] = (ImportKind.STATIC,)


@dataclass(frozen=True)
class DependencyRef:
    """Edge from a module to the module it imports."""

    target_id: str
    import_kind: ImportKind = ImportKind.STATIC

    @property
    def is_static(self) -> bool:
        return self.import_kind is ImportKind.STATIC

    @classmethod
    def parse(cls, entry: Any) -> Optional["DependencyRef"]:
        """
        Build a reference from a dependency entry.

        Accepted forms:
            "some-id"                                   -> static import
            {"id": "some-id", "import": "dynamic"}      -> explicit kind
            DependencyRef(...)                          -> as is

        Returns None when the entry cannot be interpreted.
        """
        if isinstance(entry, DependencyRef):
            return entry
        if isinstance(entry, str):
            return cls(entry) if entry else None
        if isinstance(entry, Mapping):
            target = entry.get("id")
            if not isinstance(target, str) or not target:
                return None
            kind = entry.get("import", ImportKind.STATIC.value)
            try:
                return cls(target, ImportKind(kind))
            except ValueError:
                return None
        return None

    def to_dict(self) -> dict:
        return {"id": self.target_id, "import": self.import_kind.value}


# ``False`` selects the ambient version, ``None`` disables the suffix.
Version = Union[str, bool, None]


@dataclass
class Module:
    """
    A registrable loadable unit.

    ``priority`` and ``placement`` are the *declared* hints; the values
    used at emission time are derived from the graph and never written
    back here.
    """

    id: str
    address: Optional[str]
    dependencies: List[DependencyRef] = field(default_factory=list)
    version: Version = False
    priority: Priority = Priority.AUTO
    placement: Placement = Placement.EARLY

    def __post_init__(self):
        if not self.id:
            raise ValueError("Module must have an id")

    def dependency_ids(self, kinds: Iterable[ImportKind] = ALL_KINDS) -> List[str]:
        """Dependency ids of the given import kinds, in declaration order."""
        kinds = tuple(kinds)
        return [dep.target_id for dep in self.dependencies if dep.import_kind in kinds]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "address": self.address,
            "dependencies": [dep.to_dict() for dep in self.dependencies],
            "version": self.version,
            "priority": self.priority.value,
            "placement": self.placement.value,
        }
