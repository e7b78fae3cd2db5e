"""
Manifest loader - populates a scheduler from a JSON or YAML file.

Loading is side-effect free: the file is parsed and validated into plain
dataclasses, and only ``apply_manifest`` touches a scheduler.

Format:
    ```yaml
    modules:
      - id: shared
        address: /js/shared.js
        priority: low
      - id: app
        address: /js/app.js
        version: "2.0"          # omitted -> ambient version, null -> none
        dependencies:
          - shared
          - {id: lazy, import: dynamic}
    enqueue:
      - app
    ```
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml

from .faults import ManifestInvalidFault
from .types import Version

_MODULE_KEYS = {"id", "address", "dependencies", "version", "priority", "placement"}
_ROOT_KEYS = {"modules", "enqueue"}


@dataclass
class ModuleEntry:
    """One module declaration from a manifest."""

    id: str
    address: str | None = None
    dependencies: List[Any] = field(default_factory=list)
    version: Version = False
    options: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Manifest:
    """Validated manifest contents."""

    source: str
    modules: List[ModuleEntry] = field(default_factory=list)
    enqueue: List[str] = field(default_factory=list)

    def __repr__(self) -> str:
        return f"Manifest({self.source}, {len(self.modules)} modules, {len(self.enqueue)} enqueued)"


def load_manifest(path: Union[str, Path]) -> Manifest:
    """
    Read and validate a manifest file.

    Args:
        path: ``.json``, ``.yaml`` or ``.yml`` file

    Returns:
        Parsed Manifest

    Raises:
        ManifestInvalidFault: If the file cannot be read or is malformed
    """
    path = Path(path)
    source = str(path)

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ManifestInvalidFault(source, [f"cannot read file: {e.strerror or e}"]) from e

    try:
        if path.suffix == ".json":
            data = json.loads(text)
        elif path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            raise ManifestInvalidFault(source, [f"unsupported manifest format: {path.suffix or '<none>'}"])
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ManifestInvalidFault(source, [f"parse error: {e}"]) from e

    return parse_manifest(data, source)


def parse_manifest(data: Any, source: str = "<memory>") -> Manifest:
    """
    Validate already-decoded manifest data.

    All problems are collected and raised together.

    Raises:
        ManifestInvalidFault: If ``data`` is malformed
    """
    if data is None:
        return Manifest(source=source)
    if not isinstance(data, dict):
        raise ManifestInvalidFault(source, ["manifest root must be a mapping"])

    errors: List[str] = []
    manifest = Manifest(source=source)

    unknown = sorted(set(data) - _ROOT_KEYS)
    if unknown:
        errors.append(f"unknown top-level keys: {', '.join(map(str, unknown))}")

    modules = data.get("modules") or []
    if not isinstance(modules, list):
        errors.append("'modules' must be a list")
        modules = []

    for index, raw in enumerate(modules):
        entry = _parse_module(raw, f"modules[{index}]", errors)
        if entry is not None:
            manifest.modules.append(entry)

    enqueue = data.get("enqueue") or []
    if not isinstance(enqueue, list):
        errors.append("'enqueue' must be a list")
        enqueue = []
    for index, module_id in enumerate(enqueue):
        if not isinstance(module_id, str) or not module_id:
            errors.append(f"enqueue[{index}]: expected a module id, got {module_id!r}")
        else:
            manifest.enqueue.append(module_id)

    if errors:
        raise ManifestInvalidFault(source, errors)
    return manifest


def _parse_module(raw: Any, where: str, errors: List[str]) -> ModuleEntry | None:
    if not isinstance(raw, dict):
        errors.append(f"{where}: module entry must be a mapping")
        return None

    module_id = raw.get("id")
    if not isinstance(module_id, str) or not module_id:
        errors.append(f"{where}: 'id' is required and must be a non-empty string")
        return None

    where = f"{where} ({module_id})"
    unknown = sorted(set(raw) - _MODULE_KEYS)
    if unknown:
        errors.append(f"{where}: unknown keys: {', '.join(map(str, unknown))}")

    address = raw.get("address")
    if address is not None and not isinstance(address, str):
        errors.append(f"{where}: 'address' must be a string or null")

    dependencies = raw.get("dependencies") or []
    if not isinstance(dependencies, list):
        errors.append(f"{where}: 'dependencies' must be a list")
        dependencies = []

    # Absent means ambient, explicit null means no version at all.
    version: Version = False
    if "version" in raw:
        version = raw["version"]
        if isinstance(version, (int, float)) and not isinstance(version, bool):
            version = str(version)
        elif version is not None and version is not False and not isinstance(version, str):
            errors.append(f"{where}: 'version' must be a string, false or null")

    options = {key: raw[key] for key in ("priority", "placement") if key in raw}

    return ModuleEntry(
        id=module_id,
        address=address if isinstance(address, str) else None,
        dependencies=list(dependencies),
        version=version,
        options=options,
    )


def apply_manifest(scheduler: Any, manifest: Manifest) -> None:
    """
    Register every module of ``manifest`` and enqueue the listed ids, in
    file order.

    Option values are not validated here; the scheduler clamps and
    reports them like any other registration.
    """
    for entry in manifest.modules:
        scheduler.register(
            entry.id,
            entry.address,
            entry.dependencies,
            entry.version,
            entry.options,
        )
    for module_id in manifest.enqueue:
        scheduler.enqueue(module_id)
