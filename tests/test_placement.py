"""
Tests placement propagation from dependencies to dependents.
"""

from modulary.graph import ModuleGraph
from modulary.placement import PlacementResolver
from modulary.types import DependencyRef, ImportKind, Module, Placement


def add(graph, name, deps=(), placement=Placement.EARLY):
    refs = [
        DependencyRef(d[1:], ImportKind.DYNAMIC) if d.startswith("~") else DependencyRef(d)
        for d in deps
    ]
    graph.add(Module(id=name, address=f"/{name}.js", dependencies=refs, placement=placement))


# ============================================================================
# PlacementResolver
# ============================================================================

class TestPlacementResolver:

    def test_declared_late(self):
        graph = ModuleGraph()
        add(graph, "a", placement=Placement.LATE)
        assert PlacementResolver(graph).effective_placement("a") is Placement.LATE

    def test_default_early(self):
        graph = ModuleGraph()
        add(graph, "a", ["b"])
        add(graph, "b")
        resolver = PlacementResolver(graph)
        assert resolver.effective_placement("a") is Placement.EARLY
        assert resolver.effective_placement("b") is Placement.EARLY

    def test_propagates_through_chain(self):
        graph = ModuleGraph()
        add(graph, "a", ["b"])
        add(graph, "b", ["c"])
        add(graph, "c", ["d"])
        add(graph, "d", placement=Placement.LATE)
        resolver = PlacementResolver(graph)
        assert [resolver.effective_placement(m) for m in "abcd"] == [Placement.LATE] * 4

    def test_does_not_flow_to_dependencies(self):
        graph = ModuleGraph()
        add(graph, "a", ["b"], placement=Placement.LATE)
        add(graph, "b", ["c"])
        add(graph, "c")
        resolver = PlacementResolver(graph)
        assert resolver.effective_placement("a") is Placement.LATE
        assert resolver.effective_placement("b") is Placement.EARLY
        assert resolver.effective_placement("c") is Placement.EARLY

    def test_dynamic_edges_propagate(self):
        graph = ModuleGraph()
        add(graph, "a", ["~b"])
        add(graph, "b", placement=Placement.LATE)
        assert PlacementResolver(graph).effective_placement("a") is Placement.LATE

    def test_one_late_branch_is_enough(self):
        graph = ModuleGraph()
        add(graph, "a", ["b", "c"])
        add(graph, "b")
        add(graph, "c", placement=Placement.LATE)
        assert PlacementResolver(graph).effective_placement("a") is Placement.LATE

    def test_cycle_members_share_placement(self):
        graph = ModuleGraph()
        add(graph, "a", ["b"])
        add(graph, "b", ["a"], placement=Placement.LATE)
        resolver = PlacementResolver(graph)
        assert resolver.effective_placement("a") is Placement.LATE
        assert resolver.effective_placement("b") is Placement.LATE

    def test_unregistered_is_early(self):
        assert PlacementResolver(ModuleGraph()).effective_placement("ghost") is Placement.EARLY

    def test_never_written_back(self):
        graph = ModuleGraph()
        add(graph, "a", ["b"])
        add(graph, "b", placement=Placement.LATE)
        PlacementResolver(graph).effective_placement("a")
        assert graph.get("a").placement is Placement.EARLY
