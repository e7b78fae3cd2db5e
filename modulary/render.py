"""
Markup renderer - serializes plan entries with Jinja2.

The planner decides *what* is emitted; this module only decides how it
looks in the document.
"""

from __future__ import annotations

import json
from typing import Any, Iterable, Optional

from jinja2 import DictLoader, Environment, select_autoescape
from markupsafe import Markup

from .config import SchedulerConfig
from .planner import LoadTag, ModuleData, PreloadEntry, ResolutionEntry, build_import_map
from .types import Priority


_TEMPLATES = {
    "preload.html": (
        '<link rel="modulepreload" href="{{ entry.address }}" '
        'id="{{ entry.id }}{{ config.preload_id_suffix }}"'
        '{{ priority_attrs(entry) }}>'
    ),
    "load_tag.html": (
        '<script type="module" src="{{ tag.address }}" '
        'id="{{ tag.id }}{{ config.module_id_suffix }}"'
        '{{ priority_attrs(tag) }}></script>'
    ),
    "import_map.html": (
        '<script type="importmap" id="{{ config.importmap_id }}">\n'
        '{{ payload }}\n'
        '</script>'
    ),
    "module_data.html": (
        '<script type="application/json" id="{{ config.data_id_prefix }}{{ entry.id }}">\n'
        '{{ payload }}\n'
        '</script>'
    ),
}


def script_safe_json(data: Any, *, ascii_only: bool = False) -> Markup:
    """
    Encode ``data`` as JSON that is safe inside a ``<script>`` element.

    ``<`` and ``>`` are written as unicode escapes so the payload can never
    close the element or open a comment.
    """
    payload = json.dumps(data, ensure_ascii=ascii_only, separators=(",", ":"))
    payload = payload.replace("<", "\\u003C").replace(">", "\\u003E")
    return Markup(payload)


class MarkupRenderer:
    """
    Renders plan entries into HTML markup.

    Args:
        config: Scheduler configuration (element ids, charset)

    Example:
        renderer = MarkupRenderer()
        html = renderer.render_load_tags(planner.plan_load_tags(Placement.EARLY))
    """

    def __init__(self, config: Optional[SchedulerConfig] = None):
        self.config = config or SchedulerConfig()
        self.env = Environment(
            loader=DictLoader(_TEMPLATES),
            autoescape=select_autoescape(default_for_string=True, default=True),
        )
        self.env.globals["config"] = self.config
        self.env.globals["priority_attrs"] = self._priority_attrs

    @staticmethod
    def _priority_attrs(entry: PreloadEntry | LoadTag) -> Markup:
        """
        ``fetchpriority`` when not auto, plus the declared value whenever
        propagation changed it.
        """
        attrs = Markup("")
        if entry.priority is not Priority.AUTO:
            attrs += Markup(' fetchpriority="{}"').format(entry.priority.value)
        if entry.priority is not entry.declared_priority:
            attrs += Markup(' data-fetchpriority="{}"').format(entry.declared_priority.value)
        return Markup(attrs)

    def _join(self, chunks: Iterable[str]) -> str:
        chunks = list(chunks)
        return "\n".join(chunks) + "\n" if chunks else ""

    def render_preloads(self, entries: Iterable[PreloadEntry]) -> str:
        template = self.env.get_template("preload.html")
        return self._join(template.render(entry=entry) for entry in entries)

    def render_load_tags(self, tags: Iterable[LoadTag]) -> str:
        template = self.env.get_template("load_tag.html")
        return self._join(template.render(tag=tag) for tag in tags)

    def render_import_map(self, entries: Iterable[ResolutionEntry]) -> str:
        """Import map script, or "" when there is nothing to resolve."""
        import_map = build_import_map(entries)
        if not import_map["imports"]:
            return ""
        template = self.env.get_template("import_map.html")
        return template.render(payload=script_safe_json(import_map)) + "\n"

    def render_module_data(self, entries: Iterable[ModuleData]) -> str:
        template = self.env.get_template("module_data.html")
        ascii_only = self.config.charset.lower().replace("-", "") != "utf8"
        return self._join(
            template.render(
                entry=entry,
                payload=script_safe_json(dict(entry.data), ascii_only=ascii_only),
            )
            for entry in entries
        )
