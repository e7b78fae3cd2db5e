"""
Diagnostics collector for non-fatal scheduler anomalies.

Faults reported here never abort a render pass. The collector keeps an
ordered history, logs each distinct fault once and forwards it to any
registered listeners; the caller decides whether to surface them.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterator, List, Optional

from .faults import Fault, MissingDependencyFault, Severity
from .graph import ModuleGraph


class Diagnostics:
    """
    Ordered, de-duplicated record of reported faults.

    Usage:
        ```python
        diagnostics = Diagnostics()
        diagnostics.on_report(lambda fault: print(fault))
        diagnostics.report(MissingDependencyFault("app", ["ghost"]))
        diagnostics.messages()
        ```
    """

    def __init__(self, *, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("modulary.diagnostics")
        self._faults: Dict[tuple, Fault] = {}
        self._listeners: List[Callable[[Fault], None]] = []

    def on_report(self, listener: Callable[[Fault], None]) -> None:
        """
        Register a listener called once for every distinct fault.

        Args:
            listener: Callback receiving the Fault
        """
        self._listeners.append(listener)

    def report(self, fault: Fault) -> bool:
        """
        Record a fault.

        Returns:
            True if the fault is new, False if an identical one was
            already recorded
        """
        if fault.key in self._faults:
            return False
        self._faults[fault.key] = fault
        self.logger.log(fault.severity.log_level, str(fault))
        for listener in self._listeners:
            listener(fault)
        return True

    @property
    def faults(self) -> List[Fault]:
        return list(self._faults.values())

    def by_code(self, code: str) -> List[Fault]:
        return [fault for fault in self._faults.values() if fault.code == code]

    def messages(self) -> List[str]:
        """Human-readable messages in report order."""
        return [fault.message for fault in self._faults.values()]

    def has_errors(self) -> bool:
        return any(f.severity is Severity.ERROR for f in self._faults.values())

    def clear(self) -> None:
        self._faults.clear()

    def to_list(self) -> List[dict]:
        return [fault.to_dict() for fault in self._faults.values()]

    def __iter__(self) -> Iterator[Fault]:
        return iter(self.faults)

    def __len__(self) -> int:
        return len(self._faults)

    def __repr__(self) -> str:
        return f"Diagnostics({len(self._faults)} faults)"


def check_dependencies(
    graph: ModuleGraph,
    module_id: str,
    diagnostics: Optional[Diagnostics] = None,
) -> List[str]:
    """
    List the dependency ids of ``module_id`` that are not registered.

    When ``diagnostics`` is given and something is missing, a
    ``MissingDependencyFault`` naming the module and the missing ids is
    reported.
    """
    missing = graph.missing_dependencies(module_id)
    if missing and diagnostics is not None:
        diagnostics.report(MissingDependencyFault(module_id, missing))
    return missing
