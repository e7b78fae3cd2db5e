"""
Fingerprint generator for render plans.

Generates deterministic SHA-256 fingerprints so two passes over the same
graph and queue can be compared without diffing markup.
"""

import hashlib
import json
from typing import Any, Dict

from .planner import RenderPlan


class PlanFingerprint:
    """
    Generates deterministic fingerprints for render plans.

    Fingerprint includes:
    - Preloads, early and late load tags (order is significant)
    - Resolution table
    - Module data

    Excludes:
    - Diagnostics
    - Timestamps
    """

    VERSION = "1.0"

    def canonical(self, plan: RenderPlan) -> Dict[str, Any]:
        """Canonical dict representation of ``plan``."""
        return {"version": self.VERSION, "plan": plan.to_dict()}

    def generate(self, plan: RenderPlan) -> str:
        """
        Generate fingerprint from a plan.

        Returns:
            SHA-256 hex digest string
        """
        json_str = json.dumps(self.canonical(plan), sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(json_str.encode("utf-8")).hexdigest()

    def verify(self, expected: str, plan: RenderPlan) -> bool:
        return self.generate(plan) == expected

    def diff(self, expected: RenderPlan, actual: RenderPlan) -> Dict[str, Any]:
        """
        Describe how two plans differ, section by section.

        Returns:
            ``{section: {"expected": [...], "actual": [...]}}`` for every
            section that changed; empty when the plans are identical
        """
        expected_dict = expected.to_dict()
        actual_dict = actual.to_dict()
        return {
            section: {"expected": expected_dict[section], "actual": actual_dict[section]}
            for section in expected_dict
            if expected_dict[section] != actual_dict[section]
        }


def fingerprint(plan: RenderPlan) -> str:
    """Shortcut for ``PlanFingerprint().generate(plan)``."""
    return PlanFingerprint().generate(plan)
