"""Apply-order resolution.

Kahn's algorithm over consumer -> producer edges. Among all modules whose
producers are already placed, the smallest name goes next, so the same input
always yields the same order regardless of how the caller built its sets.
"""

from __future__ import annotations

import heapq
from collections.abc import Iterable, Sequence

import networkx as nx

from ..utils.logging import logger
from .errors import CycleDetected
from .model import Binding, DependencyGraph, Module


def resolve(modules: Iterable[Module], bindings: Iterable[Binding]) -> list[str]:
    """Compute a deterministic apply order.

    Args:
        modules: Every module taking part in the run
        bindings: Producer/consumer edges between those modules

    Returns:
        Module names, every producer before all of its consumers

    Raises:
        UnknownModuleReference: A binding names a module not in ``modules``
        CycleDetected: No valid order exists
    """
    return resolve_graph(DependencyGraph(modules, bindings))


def resolve_graph(graph: DependencyGraph) -> list[str]:
    """Compute the apply order of an already-built graph."""
    remaining = {name: len(graph.dependencies(name)) for name in graph.names}

    ready = [name for name, count in remaining.items() if count == 0]
    heapq.heapify(ready)

    order: list[str] = []
    while ready:
        name = heapq.heappop(ready)
        order.append(name)
        for consumer in graph.dependents(name):
            remaining[consumer] -= 1
            if remaining[consumer] == 0:
                heapq.heappush(ready, consumer)

    if len(order) != len(graph):
        placed = set(order)
        raise _cycle_error(graph, [name for name in graph.names if name not in placed])

    logger.debug(f"Resolved apply order for {len(order)} modules: {order}")
    return order


def _cycle_error(graph: DependencyGraph, unplaced: list[str]) -> CycleDetected:
    """Build a CycleDetected naming only modules that sit on a loop.

    Modules that merely depend on a cycle are left unplaced by Kahn's
    algorithm too; strongly connected components separate the two.
    """
    subgraph = graph.to_networkx().subgraph(unplaced)

    cycles: list[list[str]] = []
    for component in nx.strongly_connected_components(subgraph):
        if len(component) > 1:
            cycles.append(sorted(component))
        else:
            (name,) = component
            if subgraph.has_edge(name, name):
                cycles.append([name])
    cycles.sort()

    members = sorted(name for cycle in cycles for name in cycle)

    # One concrete loop for the message, searched from the smallest member
    path: list[str] = []
    if cycles:
        edges = nx.find_cycle(subgraph.subgraph(cycles[0]), source=cycles[0][0])
        path = [edge[0] for edge in edges] + [edges[0][0]]

    logger.debug(f"Cycle detected: {members} (path: {path})")
    return CycleDetected(members, cycles, path)


def verify_order(graph: DependencyGraph, order: Sequence[str]) -> list[str]:
    """Check an apply order against the graph.

    Returns:
        Human-readable violations; empty when the order is valid
    """
    violations: list[str] = []

    position: dict[str, int] = {}
    for index, name in enumerate(order):
        if name not in graph:
            violations.append(f"'{name}' is not a declared module")
        elif name in position:
            violations.append(f"'{name}' appears more than once")
        else:
            position[name] = index

    for name in graph.names:
        if name not in position:
            violations.append(f"'{name}' is missing from the order")

    for consumer, producer in graph.edges():
        if consumer in position and producer in position:
            if position[producer] >= position[consumer]:
                violations.append(f"'{producer}' must be applied before '{consumer}'")

    return violations
