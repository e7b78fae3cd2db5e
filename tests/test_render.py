"""
Tests HTML serialization of plans.
"""

import json

from modulary.config import SchedulerConfig
from modulary.planner import LoadTag, ModuleData, PreloadEntry, ResolutionEntry
from modulary.render import MarkupRenderer, script_safe_json
from modulary.types import Placement, Priority


def preload(module_id, priority="auto", declared="auto", address=None):
    return PreloadEntry(
        id=module_id,
        address=address or f"/{module_id}.js",
        priority=Priority(priority),
        declared_priority=Priority(declared),
    )


def tag(module_id, priority="auto", declared="auto", address=None):
    return LoadTag(
        id=module_id,
        address=address or f"/{module_id}.js",
        priority=Priority(priority),
        declared_priority=Priority(declared),
        placement=Placement.EARLY,
    )


# ============================================================================
# Preloads and load tags
# ============================================================================

class TestPreloads:

    def test_auto_has_no_priority_attrs(self):
        html = MarkupRenderer().render_preloads([preload("a")])
        assert html == '<link rel="modulepreload" href="/a.js" id="a-js-modulepreload">\n'

    def test_declared_priority(self):
        html = MarkupRenderer().render_preloads([preload("a", "low", "low")])
        assert html == (
            '<link rel="modulepreload" href="/a.js" id="a-js-modulepreload" '
            'fetchpriority="low">\n'
        )

    def test_propagated_priority(self):
        html = MarkupRenderer().render_preloads([preload("a", "high", "low")])
        assert html == (
            '<link rel="modulepreload" href="/a.js" id="a-js-modulepreload" '
            'fetchpriority="high" data-fetchpriority="low">\n'
        )

    def test_propagated_to_auto(self):
        html = MarkupRenderer().render_preloads([preload("a", "auto", "low")])
        assert html == (
            '<link rel="modulepreload" href="/a.js" id="a-js-modulepreload" '
            'data-fetchpriority="low">\n'
        )

    def test_empty(self):
        assert MarkupRenderer().render_preloads([]) == ""


class TestLoadTags:

    def test_load_tag(self):
        html = MarkupRenderer().render_load_tags([tag("a", "high", "high")])
        assert html == (
            '<script type="module" src="/a.js" id="a-js-module" '
            'fetchpriority="high"></script>\n'
        )

    def test_one_line_per_tag(self):
        html = MarkupRenderer().render_load_tags([tag("a"), tag("b")])
        assert html.splitlines() == [
            '<script type="module" src="/a.js" id="a-js-module"></script>',
            '<script type="module" src="/b.js" id="b-js-module"></script>',
        ]

    def test_attributes_are_escaped(self):
        html = MarkupRenderer().render_load_tags([tag('a"b', address="/a.js?x=1&ver=2")])
        assert 'src="/a.js?x=1&amp;ver=2"' in html
        assert 'id="a&#34;b-js-module"' in html

    def test_custom_suffixes(self):
        config = SchedulerConfig(module_id_suffix="-mod", preload_id_suffix="-pre")
        renderer = MarkupRenderer(config)
        assert 'id="a-mod"' in renderer.render_load_tags([tag("a")])
        assert 'id="a-pre"' in renderer.render_preloads([preload("a")])


# ============================================================================
# Import map and module data
# ============================================================================

class TestImportMap:

    def test_import_map(self):
        html = MarkupRenderer().render_import_map([
            ResolutionEntry("a", "/a.js?ver=1"),
            ResolutionEntry("b", "/b.js"),
        ])
        assert html == (
            '<script type="importmap" id="modulary-importmap">\n'
            '{"imports":{"a":"/a.js?ver=1","b":"/b.js"}}\n'
            '</script>\n'
        )

    def test_empty_import_map(self):
        assert MarkupRenderer().render_import_map([]) == ""

    def test_payload_not_html_escaped(self):
        html = MarkupRenderer().render_import_map([ResolutionEntry("a", "/a.js?x=1&y=2")])
        assert '"/a.js?x=1&y=2"' in html

    def test_custom_id(self):
        renderer = MarkupRenderer(SchedulerConfig(importmap_id="im"))
        assert 'id="im"' in renderer.render_import_map([ResolutionEntry("a", "/a.js")])

    def test_matches_plan_import_map(self, scheduler):
        scheduler.enqueue("app", "/app.js", ["lib", {"id": "lazy", "import": "dynamic"}], None)
        scheduler.register("lib", "/lib.js", [], "2")
        scheduler.register("lazy", "/lazy.js", [], None)
        plan = scheduler.plan()

        html = MarkupRenderer().render_import_map(plan.resolution_table)
        payload = html.splitlines()[1]
        assert json.loads(payload) == plan.import_map()
        assert html == scheduler.print_import_map()


class TestModuleData:

    def test_module_data(self):
        html = MarkupRenderer().render_module_data([ModuleData("a", {"x": 1})])
        assert html == (
            '<script type="application/json" id="modulary-module-data-a">\n'
            '{"x":1}\n'
            '</script>\n'
        )

    def test_script_breakout_is_escaped(self):
        html = MarkupRenderer().render_module_data([ModuleData("a", {"s": "</script><!--"})])
        assert "</script><!--" not in html
        assert "\\u003C/script\\u003E\\u003C!--" in html

    def test_unicode_kept_for_utf8(self):
        html = MarkupRenderer().render_module_data([ModuleData("a", {"s": "é"})])
        assert '{"s":"é"}' in html

    def test_ascii_for_other_charsets(self):
        renderer = MarkupRenderer(SchedulerConfig(charset="ISO-8859-1"))
        html = renderer.render_module_data([ModuleData("a", {"s": "é"})])
        assert '{"s":"\\u00e9"}' in html

    def test_script_safe_json(self):
        assert str(script_safe_json({"a": "<b>"})) == '{"a":"\\u003Cb\\u003E"}'


# ============================================================================
# Full document
# ============================================================================

class TestSchedulerOutput:

    def test_propagated_priorities(self, scheduler):
        s = scheduler
        s.register("a", "/a.js", ["d", "e"], None, {"priority": "high"})
        s.register("b", "/b.js", ["e"], None)
        s.register("c", "/c.js", ["e", "f"], None)
        s.register("d", "/d.js", [], None)
        s.register("e", "/e.js", [], None, {"priority": "low"})
        s.register("f", "/f.js", [], None)
        s.register("x", "/x.js", ["a"], None, {"priority": "low"})
        s.register("y", "/y.js", ["b"], None, {"priority": "auto"})
        s.register("z", "/z.js", ["c"], None, {"priority": "high"})
        for module_id in "xyz":
            s.enqueue(module_id)

        assert s.print_preloads().splitlines() == [
            '<link rel="modulepreload" href="/d.js" id="d-js-modulepreload" fetchpriority="low" data-fetchpriority="auto">',
            '<link rel="modulepreload" href="/e.js" id="e-js-modulepreload" fetchpriority="high" data-fetchpriority="low">',
            '<link rel="modulepreload" href="/a.js" id="a-js-modulepreload" fetchpriority="low" data-fetchpriority="high">',
            '<link rel="modulepreload" href="/b.js" id="b-js-modulepreload">',
            '<link rel="modulepreload" href="/f.js" id="f-js-modulepreload" fetchpriority="high" data-fetchpriority="auto">',
            '<link rel="modulepreload" href="/c.js" id="c-js-modulepreload" fetchpriority="high" data-fetchpriority="auto">',
        ]
        assert s.print_head_modules().splitlines() == [
            '<script type="module" src="/x.js" id="x-js-module" fetchpriority="low"></script>',
            '<script type="module" src="/y.js" id="y-js-module"></script>',
            '<script type="module" src="/z.js" id="z-js-module" fetchpriority="high"></script>',
        ]
        assert s.print_footer_modules() == ""

    def test_late_modules_in_footer(self, versioned_scheduler):
        s = versioned_scheduler
        s.enqueue("early", "/early.js")
        s.enqueue("late", "/late.js", [], "1.0", {"placement": "late"})
        assert s.print_head_modules() == (
            '<script type="module" src="/early.js?ver=99.9.9" id="early-js-module"></script>\n'
        )
        assert s.print_footer_modules() == (
            '<script type="module" src="/late.js?ver=1.0" id="late-js-module"></script>\n'
        )

    def test_nothing_enqueued(self, scheduler):
        scheduler.register("a", "/a.js")
        assert scheduler.print_preloads() == ""
        assert scheduler.print_head_modules() == ""
        assert scheduler.print_import_map() == ""
        assert scheduler.print_module_data() == ""
