"""
Tests ModuleGraph: edge queries, closures, cycle detection and export.
"""

import pytest

from modulary.graph import ModuleGraph
from modulary.types import STATIC_ONLY, DependencyRef, ImportKind, Module


def make_graph(**edges):
    """Build a graph from ``name=[dep, ...]``; ``~dep`` marks a dynamic edge."""
    graph = ModuleGraph()
    for name, deps in edges.items():
        refs = [
            DependencyRef(d[1:], ImportKind.DYNAMIC) if d.startswith("~") else DependencyRef(d)
            for d in deps
        ]
        graph.add(Module(id=name, address=f"/{name}.js", dependencies=refs))
    return graph


# ============================================================================
# Registry table
# ============================================================================

class TestModuleGraphTable:

    def test_add_and_get(self):
        graph = make_graph(a=[])
        assert "a" in graph
        assert graph.get("a").address == "/a.js"
        assert graph.get("missing") is None
        assert len(graph) == 1

    def test_overwrite_keeps_position(self):
        graph = make_graph(a=[], b=[], c=[])
        graph.add(Module(id="a", address="/a2.js"))
        assert list(graph) == ["a", "b", "c"]
        assert graph.get("a").address == "/a2.js"

    def test_remove(self):
        graph = make_graph(a=[], b=[])
        assert graph.remove("a") is True
        assert graph.remove("a") is False
        assert list(graph) == ["b"]

    def test_iteration_is_a_snapshot(self):
        graph = make_graph(a=[], b=[])
        for name in graph:
            graph.remove(name)
        assert len(graph) == 0

    def test_modules_in_registration_order(self):
        graph = make_graph(z=[], a=[], m=[])
        assert [m.id for m in graph.modules()] == ["z", "a", "m"]


# ============================================================================
# Edge queries
# ============================================================================

class TestModuleGraphEdges:

    def test_get_dependencies_in_declaration_order(self):
        graph = make_graph(a=["c", "~b", "d"])
        assert [d.target_id for d in graph.get_dependencies("a")] == ["c", "b", "d"]
        assert [d.target_id for d in graph.get_dependencies("a", STATIC_ONLY)] == ["c", "d"]

    def test_get_dependencies_unregistered(self):
        assert make_graph().get_dependencies("nope") == []

    def test_get_dependents_one_hop(self):
        graph = make_graph(a=["c"], b=["~c"], c=["d"], d=[])
        assert graph.get_dependents("c") == {"a", "b"}
        assert graph.get_dependents("c", STATIC_ONLY) == {"a"}
        assert graph.get_dependents("d") == {"c"}

    def test_get_recursive_dependents(self):
        graph = make_graph(a=["b"], b=["c"], c=["d"], d=[], x=["~c"])
        assert graph.get_recursive_dependents("d") == {"a", "b", "c", "x"}
        assert graph.get_recursive_dependents("d", STATIC_ONLY) == {"a", "b", "c"}
        assert graph.get_recursive_dependents("a") == set()

    def test_get_recursive_dependents_cycle_safe(self):
        graph = make_graph(a=["b"], b=["a"], c=["a"])
        assert graph.get_recursive_dependents("a") == {"a", "b", "c"}

    def test_get_recursive_dependencies(self):
        graph = make_graph(a=["b", "~ghost"], b=["c"], c=[])
        assert graph.get_recursive_dependencies("a") == {"b", "c", "ghost"}
        assert graph.get_recursive_dependencies("a", STATIC_ONLY) == {"b", "c"}

    def test_missing_dependencies(self):
        graph = make_graph(a=["b", "ghost", "~phantom", "ghost"], b=[])
        assert graph.missing_dependencies("a") == ["ghost", "phantom"]
        assert graph.missing_dependencies("b") == []

    def test_reverse_index(self):
        graph = make_graph(a=["c", "ghost", "ghost"], b=["~c"], c=[])
        assert graph.reverse_index() == {"c": ["a", "b"], "ghost": ["a"]}
        assert graph.reverse_index(STATIC_ONLY) == {"c": ["a"], "ghost": ["a"]}

    def test_recursive_dependents_deep_chain(self):
        graph = make_graph(**{f"m{i}": [f"m{i + 1}"] for i in range(2000)})
        assert len(graph.get_recursive_dependents("m2000")) == 2000


# ============================================================================
# Cycles
# ============================================================================

class TestModuleGraphCycles:

    def test_no_cycle(self):
        assert make_graph(a=["b"], b=["c"], c=[]).find_cycle() is None

    def test_simple_cycle(self):
        cycle = make_graph(a=["b"], b=["c"], c=["a"]).find_cycle()
        assert set(cycle) == {"a", "b", "c"}

    def test_self_loop(self):
        assert make_graph(a=["a"]).find_cycle() == ["a"]

    def test_dynamic_cycle_filtered_by_kind(self):
        graph = make_graph(a=["b"], b=["~a"])
        assert graph.find_cycle() is not None
        assert graph.find_cycle(STATIC_ONLY) is None

    def test_unregistered_targets_ignored(self):
        assert make_graph(a=["ghost"]).find_cycle() is None

    def test_deep_chain_without_cycle(self):
        graph = make_graph(**{f"m{i}": [f"m{i + 1}"] for i in range(3000)})
        assert graph.find_cycle() is None

    def test_deep_ring(self):
        edges = {f"m{i}": [f"m{i + 1}"] for i in range(1499)}
        edges["m1499"] = ["m0"]
        cycle = make_graph(**edges).find_cycle()
        assert cycle[0] == "m0"
        assert len(cycle) == 1500


# ============================================================================
# Export
# ============================================================================

class TestModuleGraphExport:

    def test_to_dict(self):
        graph = make_graph(a=["b", "~c"], b=[])
        assert graph.to_dict() == {
            "a": [{"id": "b", "import": "static"}, {"id": "c", "import": "dynamic"}],
            "b": [],
        }

    def test_to_dot(self):
        dot = make_graph(a=["b", "~c"], b=[]).to_dot()
        assert dot.startswith("digraph modules {")
        assert '"a" -> "b";' in dot
        assert '"a" -> "c" [style=dashed];' in dot
        assert '"c" [color=red];' in dot
        assert dot.endswith("}")

    def test_repr(self):
        assert repr(make_graph(a=[])) == "ModuleGraph(1 modules)"
