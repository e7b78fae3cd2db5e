"""
Shared test fixtures and helpers for the Modulary test suite.
"""

import json
import os
from pathlib import Path
from typing import Any, Callable, Dict

import pytest
import yaml

from modulary.config import SchedulerConfig
from modulary.scheduler import ModuleScheduler


# ============================================================================
# Schedulers
# ============================================================================


@pytest.fixture
def scheduler() -> ModuleScheduler:
    """Scheduler without an ambient version."""
    return ModuleScheduler()


@pytest.fixture
def versioned_scheduler() -> ModuleScheduler:
    """Scheduler whose ambient version is 99.9.9."""
    return ModuleScheduler(SchedulerConfig(ambient_version="99.9.9"))


@pytest.fixture
def fetchpriority_graph(scheduler) -> ModuleScheduler:
    """
    Four-module chain used by the priority bumping tests:

        alto (high) -> auto (auto) -> bajo (low) ~> dyno (low)

    ``~>`` is a dynamic import.
    """
    scheduler.register("dyno", "/dyno.js", [], None, {"priority": "low"})
    scheduler.register(
        "bajo", "/bajo.js", [{"id": "dyno", "import": "dynamic"}], None, {"priority": "low"}
    )
    scheduler.register(
        "auto", "/auto.js", [{"id": "bajo", "import": "static"}], None, {"priority": "auto"}
    )
    scheduler.register("alto", "/alto.js", ["auto"], None, {"priority": "high"})
    return scheduler


# ============================================================================
# Manifest files
# ============================================================================


@pytest.fixture
def write_manifest(tmp_path) -> Callable[..., Path]:
    """Factory writing a manifest dict to a YAML (or JSON) file."""

    def _write(data: Dict[str, Any], name: str = "modules.yaml") -> Path:
        path = tmp_path / name
        if name.endswith(".json"):
            path.write_text(json.dumps(data))
        else:
            path.write_text(yaml.safe_dump(data, sort_keys=False))
        return path

    return _write


@pytest.fixture
def clean_env(monkeypatch):
    """Strip MODULARY_* variables inherited from the outer environment."""
    for key in list(os.environ):
        if key.startswith("MODULARY_"):
            monkeypatch.delenv(key)
