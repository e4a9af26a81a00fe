"""
Tests for the pure graph helpers — topological sort and cycle discovery.
"""

from modreg.core.domain.dag import (
    find_cycles,
    strongly_connected_components,
    topological_sort,
)


class TestTopologicalSort:
    def test_dependencies_first(self):
        order, blocked = topological_sort({
            "app": {"api", "db"},
            "api": {"db"},
            "db": set(),
        })
        assert order == ["db", "api", "app"]
        assert blocked == []

    def test_ties_broken_by_name(self):
        order, _ = topological_sort({"c": set(), "a": set(), "b": set()})
        assert order == ["a", "b", "c"]

    def test_targets_without_entry_are_nodes(self):
        order, _ = topological_sort({"a": {"z"}})
        assert order == ["z", "a"]

    def test_cycle_blocks_dependents(self):
        order, blocked = topological_sort({
            "a": {"b"},
            "b": {"a"},
            "c": {"a"},
            "d": set(),
        })
        assert order == ["d"]
        assert blocked == ["a", "b", "c"]


class TestCycles:
    def test_scc(self):
        adjacency = {"a": {"b"}, "b": {"c"}, "c": {"a"}, "d": {"a"}}
        assert strongly_connected_components(adjacency) == [["a", "b", "c"], ["d"]]

    def test_find_cycles_ignores_acyclic_nodes(self):
        adjacency = {"a": {"b"}, "b": {"a"}, "c": {"d"}, "d": set()}
        assert find_cycles(adjacency) == [["a", "b"]]

    def test_self_loop_is_a_cycle(self):
        assert find_cycles({"a": {"a"}, "b": set()}) == [["a"]]

    def test_acyclic(self):
        assert find_cycles({"a": {"b"}, "b": set()}) == []

    def test_deep_chain_does_not_recurse(self):
        adjacency = {f"n{i}": {f"n{i + 1}"} for i in range(5000)}
        assert find_cycles(adjacency) == []
