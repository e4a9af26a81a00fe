"""
Domain — directed graph utilities (pure).

Topological ordering (Kahn's algorithm) and cycle discovery over a plain
adjacency mapping ``node -> successors``. Every function is deterministic:
ties are broken by node name.
No I/O.
"""

from __future__ import annotations

import heapq


def topological_sort(adjacency: dict[str, set[str]]) -> tuple[list[str], list[str]]:
    """Order nodes so that every node comes after its successors.

    ``adjacency`` maps a node to the nodes it depends on. The returned
    order lists dependencies first.

    Returns:
        ``(order, blocked)``. ``blocked`` holds the nodes that could not be
        ordered because they sit on, or behind, a cycle. Empty = acyclic.
    """
    nodes = set(adjacency)
    for targets in adjacency.values():
        nodes.update(targets)

    # Remaining unmet dependencies per node
    pending: dict[str, int] = {n: len(adjacency.get(n, ())) for n in nodes}
    dependents: dict[str, list[str]] = {n: [] for n in nodes}
    for node, targets in adjacency.items():
        for target in targets:
            dependents[target].append(node)

    ready = [n for n, count in pending.items() if count == 0]
    heapq.heapify(ready)
    order: list[str] = []

    while ready:
        node = heapq.heappop(ready)
        order.append(node)
        for dependent in dependents[node]:
            pending[dependent] -= 1
            if pending[dependent] == 0:
                heapq.heappush(ready, dependent)

    blocked = sorted(n for n, count in pending.items() if count > 0)
    return order, blocked


def strongly_connected_components(adjacency: dict[str, set[str]]) -> list[list[str]]:
    """Tarjan's algorithm, iterative so deep graphs don't hit the recursion limit.

    Returns every component as a sorted list; components are sorted by
    their first member.
    """
    nodes = set(adjacency)
    for targets in adjacency.values():
        nodes.update(targets)

    index_of: dict[str, int] = {}
    lowlink: dict[str, int] = {}
    on_stack: set[str] = set()
    stack: list[str] = []
    components: list[list[str]] = []
    counter = 0

    for root in sorted(nodes):
        if root in index_of:
            continue
        work: list[tuple[str, list[str]]] = [(root, sorted(adjacency.get(root, ())))]
        index_of[root] = lowlink[root] = counter
        counter += 1
        stack.append(root)
        on_stack.add(root)

        while work:
            node, successors = work[-1]
            if successors:
                succ = successors.pop(0)
                if succ not in index_of:
                    index_of[succ] = lowlink[succ] = counter
                    counter += 1
                    stack.append(succ)
                    on_stack.add(succ)
                    work.append((succ, sorted(adjacency.get(succ, ()))))
                elif succ in on_stack:
                    lowlink[node] = min(lowlink[node], index_of[succ])
                continue

            work.pop()
            if work:
                parent = work[-1][0]
                lowlink[parent] = min(lowlink[parent], lowlink[node])
            if lowlink[node] == index_of[node]:
                component: list[str] = []
                while True:
                    member = stack.pop()
                    on_stack.discard(member)
                    component.append(member)
                    if member == node:
                        break
                components.append(sorted(component))

    return sorted(components, key=lambda c: c[0])


def find_cycles(adjacency: dict[str, set[str]]) -> list[list[str]]:
    """Every strongly connected component that contains a cycle.

    A component counts when it has more than one node, or when its single
    node depends on itself.
    """
    cycles = []
    for component in strongly_connected_components(adjacency):
        if len(component) > 1:
            cycles.append(component)
        elif component[0] in adjacency.get(component[0], ()):
            cycles.append(component)
    return cycles
