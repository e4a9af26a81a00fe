"""
Dependency graph builder — module and component dependency graphs.

Two views over a catalog:

    module graph      payments ──identity-api──▶ identity
    component graph   payments/payments-service ──identity-api──▶ identity/identity-service

Edges point from the dependent to its dependency and carry the declared
version range plus the contract names as labels. When a selection
(module -> version) is given, those versions are used; otherwise the
latest version of each module.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from modreg.core.domain.dag import find_cycles, topological_sort
from modreg.core.domain.semver import VersionError, intersect_ranges
from modreg.core.models.catalog import Catalog
from modreg.core.models.module import ModuleDocument

logger = logging.getLogger(__name__)


class CycleError(Exception):
    """Raised when a topological order is requested for a cyclic graph."""

    def __init__(self, cycles: list[list[str]]):
        self.cycles = cycles
        rendered = "; ".join(" -> ".join(c + c[:1]) for c in cycles)
        super().__init__(f"Dependency cycle detected: {rendered}")


@dataclass
class Edge:
    """A dependency edge, ``source`` depends on ``target``.

    ``ranges`` maps each contract label to its declared version range;
    a declaration without contracts is stored under ``""``.
    """

    source: str
    target: str
    ranges: dict[str, str] = field(default_factory=dict)
    dangling: bool = False       # target could not be resolved

    @property
    def contracts(self) -> set[str]:
        return {label for label in self.ranges if label}

    @property
    def version_range(self) -> str | None:
        """The range all declarations share, or None when they differ.

        Unconstrained (``*``) declarations do not count as differing.
        """
        distinct = {r for r in self.ranges.values() if r != "*"}
        if not distinct:
            return "*"
        return distinct.pop() if len(distinct) == 1 else None

    def declare(self, version_range: str, contracts: Iterable[str] = ()) -> None:
        for label in list(contracts) or [""]:
            known = self.ranges.get(label)
            self.ranges[label] = version_range if known is None else _merge(known, version_range)

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "target": self.target,
            "version": self.version_range,
            "contracts": sorted(self.contracts),
            "ranges": dict(sorted(self.ranges.items())),
            "dangling": self.dangling,
        }


def _merge(known: str, version_range: str) -> str:
    try:
        return intersect_ranges(known, version_range)
    except VersionError:
        # malformed ranges are reported by the validator
        return known


class DependencyGraph:
    """Directed graph with labelled edges and deterministic traversals."""

    def __init__(self, kind: str = "module"):
        self.kind = kind
        self._nodes: dict[str, dict[str, Any]] = {}
        self._edges: dict[tuple[str, str], Edge] = {}

    # ── Construction ────────────────────────────────────────────

    def add_node(self, node: str, **attrs: Any) -> None:
        self._nodes.setdefault(node, {}).update(attrs)

    def add_edge(
        self,
        source: str,
        target: str,
        version_range: str = "*",
        contracts: list[str] | set[str] | tuple[str, ...] = (),
        dangling: bool = False,
    ) -> Edge:
        """Add an edge; parallel declarations merge per contract label."""
        self._nodes.setdefault(source, {})
        self._nodes.setdefault(target, {})
        edge = self._edges.get((source, target))
        if edge is None:
            edge = Edge(source, target, dangling=dangling)
            self._edges[(source, target)] = edge
        else:
            edge.dangling = edge.dangling or dangling
        edge.declare(version_range, contracts)
        return edge

    # ── Queries ─────────────────────────────────────────────────

    @property
    def nodes(self) -> list[str]:
        return sorted(self._nodes)

    @property
    def edges(self) -> list[Edge]:
        return [self._edges[k] for k in sorted(self._edges)]

    def node(self, name: str) -> dict[str, Any]:
        return self._nodes.get(name, {})

    def edge(self, source: str, target: str) -> Edge | None:
        return self._edges.get((source, target))

    def __contains__(self, node: object) -> bool:
        return node in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def dependencies(self, node: str) -> list[str]:
        """Direct dependencies of ``node``."""
        return sorted(t for (s, t) in self._edges if s == node)

    def dependents(self, node: str) -> list[str]:
        """Nodes that depend directly on ``node``."""
        return sorted(s for (s, t) in self._edges if t == node)

    def transitive_dependencies(self, node: str) -> list[str]:
        """Everything ``node`` reaches, excluding itself unless on a cycle."""
        adjacency = self.adjacency()
        seen: set[str] = set()
        queue = list(adjacency.get(node, ()))
        while queue:
            current = queue.pop(0)
            if current in seen:
                continue
            seen.add(current)
            queue.extend(sorted(adjacency.get(current, ())))
        return sorted(seen)

    def adjacency(self) -> dict[str, set[str]]:
        adjacency: dict[str, set[str]] = {n: set() for n in self._nodes}
        for source, target in self._edges:
            adjacency[source].add(target)
        return adjacency

    def dangling_edges(self) -> list[Edge]:
        return [e for e in self.edges if e.dangling]

    def cycles(self) -> list[list[str]]:
        """Every group of nodes that depend on each other (including self-loops)."""
        return find_cycles(self.adjacency())

    def topological_order(self) -> list[str]:
        """Dependencies first, ties broken by name.

        Raises:
            CycleError: If the graph has a cycle.
        """
        order, blocked = topological_sort(self.adjacency())
        if blocked:
            raise CycleError(self.cycles())
        return order

    def subgraph(self, *roots: str) -> DependencyGraph:
        """``roots`` plus everything they transitively depend on."""
        keep: set[str] = set()
        for root in roots:
            keep.add(root)
            keep.update(self.transitive_dependencies(root))
        sub = DependencyGraph(self.kind)
        for name in sorted(keep):
            if name in self._nodes:
                sub.add_node(name, **self._nodes[name])
        for (source, target), edge in self._edges.items():
            if source in keep and target in keep:
                sub._edges[(source, target)] = Edge(
                    source, target, dict(edge.ranges), edge.dangling
                )
        return sub

    def to_dict(self) -> dict[str, Any]:
        cycles = self.cycles()
        order = None if cycles else self.topological_order()
        return {
            "kind": self.kind,
            "nodes": [{"id": n, **self._nodes[n]} for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
            "order": order,
            "cycles": cycles,
        }


# ── Builders ────────────────────────────────────────────────────


def _selected_modules(
    catalog: Catalog,
    selection: dict[str, str] | None,
) -> dict[str, ModuleDocument]:
    """Module name -> document for the versions the graph should use."""
    chosen: dict[str, ModuleDocument] = {}
    if selection is None:
        for doc in catalog.latest_modules():
            chosen[doc.name] = doc
        return chosen

    for name, version in sorted(selection.items()):
        doc = catalog.module(name, version)
        if doc is None:
            logger.warning("Selected module %s@%s is not in the catalog", name, version)
            continue
        chosen[name] = doc
    return chosen


def build_module_graph(
    catalog: Catalog,
    selection: dict[str, str] | None = None,
) -> DependencyGraph:
    """Module -> module dependency graph.

    Args:
        catalog: Loaded documents.
        selection: Optional module -> version mapping. Defaults to latest.

    Returns:
        DependencyGraph with one node per module name.
    """
    graph = DependencyGraph("module")
    chosen = _selected_modules(catalog, selection)

    for name, doc in chosen.items():
        graph.add_node(name, version=doc.version, status=doc.status.value)

    for name, doc in chosen.items():
        for dep in doc.dependencies:
            known = catalog.has_module(dep.module)
            if not known:
                graph.add_node(dep.module, missing=True)
            graph.add_edge(
                name,
                dep.module,
                version_range=dep.version,
                contracts=[c.name for c in dep.contracts],
                dangling=not known,
            )

    logger.debug(
        "Module graph: %d nodes, %d edges", len(graph), len(graph.edges)
    )
    return graph


def component_id(module: str, component: str) -> str:
    return f"{module}/{component}"


def build_component_graph(
    catalog: Catalog,
    selection: dict[str, str] | None = None,
) -> DependencyGraph:
    """Component -> component dependency graph.

    A component's dependency on ``(module, contract)`` becomes an edge to
    the component of that module which owns the contract. When no owner
    can be found the edge points at the bare module id and is marked
    dangling.
    """
    graph = DependencyGraph("component")
    chosen = _selected_modules(catalog, selection)

    for module_name, doc in chosen.items():
        for classification, ref, _ in catalog.components_of(doc):
            graph.add_node(
                component_id(module_name, ref.name),
                module=module_name,
                version=ref.version,
                classification=classification.value,
            )

    for module_name, doc in chosen.items():
        for _, ref, component in catalog.components_of(doc):
            if component is None:
                continue
            source = component_id(module_name, ref.name)
            for dep in component.dependencies:
                target_doc = chosen.get(dep.module) or catalog.latest_module(dep.module)
                owner = catalog.contract_owner(target_doc, dep.contract) if target_doc else None
                if owner is None:
                    graph.add_node(dep.module, missing=True)
                    graph.add_edge(
                        source, dep.module, dep.version, [dep.contract], dangling=True
                    )
                    continue
                graph.add_edge(
                    source,
                    component_id(dep.module, owner),
                    version_range=dep.version,
                    contracts=[dep.contract],
                )

    logger.debug(
        "Component graph: %d nodes, %d edges", len(graph), len(graph.edges)
    )
    return graph
