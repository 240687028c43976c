"""Graph analyzer - pure algorithms over a module dependency graph.

This module provides ONLY non-interpretive graph algorithms:
- Apply layers (modules that can be provisioned concurrently)
- Destroy order (reverse apply order)
- Impact analysis (downstream consumers of a change)
- Binding checks (references to undeclared outputs/inputs)
- Statistical summaries (counts and grouping)
"""

from __future__ import annotations

from collections import deque
from typing import Any

from .errors import CycleDetected
from .model import DependencyGraph
from .resolver import resolve_graph


def apply_layers(graph: DependencyGraph) -> list[list[str]]:
    """Group modules into waves that can be applied concurrently.

    A module's layer is one past the deepest layer among its producers, so
    every dependency of a layer lives in an earlier layer.

    Returns:
        Layers in apply order, each sorted by module name

    Raises:
        CycleDetected: The graph has no valid order
    """
    depth: dict[str, int] = {}
    for name in resolve_graph(graph):
        producers = graph.dependencies(name)
        depth[name] = max((depth[p] + 1 for p in producers), default=0)

    layers: list[list[str]] = [[] for _ in range(max(depth.values(), default=-1) + 1)]
    for name in sorted(depth):
        layers[depth[name]].append(name)
    return layers


def destroy_order(graph: DependencyGraph) -> list[str]:
    """Teardown order: every consumer goes before the producers it reads."""
    return list(reversed(resolve_graph(graph)))


def impact_of_change(
    graph: DependencyGraph,
    targets: list[str],
    max_depth: int | None = None,
) -> dict[str, Any]:
    """Find modules that transitively consume the outputs of ``targets``.

    Args:
        graph: Module dependency graph
        targets: Modules being changed
        max_depth: Stop after this many hops (None = unlimited)

    Returns:
        Dict with 'targets', 'missing' (unknown names), 'impacted'
        (name -> hop distance, 1 = direct consumer) and 'apply_order'
        (impacted modules in the order they would be re-applied)
    """
    known = [t for t in targets if t in graph]
    missing = [t for t in targets if t not in graph]

    distance: dict[str, int] = {}
    queue = deque((t, 0) for t in known)
    seen = set(known)

    while queue:
        name, hops = queue.popleft()
        if max_depth is not None and hops >= max_depth:
            continue
        for consumer in sorted(graph.dependents(name)):
            if consumer in seen:
                continue
            seen.add(consumer)
            distance[consumer] = hops + 1
            queue.append((consumer, hops + 1))

    try:
        order = [name for name in resolve_graph(graph) if name in distance]
    except CycleDetected:
        # Cyclic graphs still report reachability, just without an order
        order = []

    return {
        "targets": known,
        "missing": missing,
        "impacted": dict(sorted(distance.items(), key=lambda item: (item[1], item[0]))),
        "apply_order": order,
    }


def binding_issues(graph: DependencyGraph) -> list[dict[str, str]]:
    """Report bindings that reference undeclared outputs or inputs.

    A module with an empty output (or input) set declares nothing, so its
    side of the binding is not checked.
    """
    issues = []
    for binding in graph.bindings:
        producer = graph.module(binding.producer)
        consumer = graph.module(binding.consumer)

        if binding.output and producer.outputs and binding.output not in producer.outputs:
            issues.append({
                "kind": "undeclared_output",
                "binding": str(binding),
                "module": producer.name,
                "name": binding.output,
                "message": f"'{producer.name}' does not declare output '{binding.output}'",
            })

        if binding.input and consumer.inputs and binding.input not in consumer.inputs:
            issues.append({
                "kind": "undeclared_input",
                "binding": str(binding),
                "module": consumer.name,
                "name": binding.input,
                "message": f"'{consumer.name}' does not declare input '{binding.input}'",
            })

    return issues


def graph_summary(graph: DependencyGraph, top_n: int = 5) -> dict[str, Any]:
    """Counts, roots, leaves and the most depended-upon modules."""
    names = graph.names
    roots = [n for n in names if not graph.dependencies(n)]
    leaves = [n for n in names if not graph.dependents(n)]

    fan_in = sorted(
        ((n, len(graph.dependents(n))) for n in names if graph.dependents(n)),
        key=lambda item: (-item[1], item[0]),
    )

    return {
        "modules": len(names),
        "bindings": len(graph.bindings),
        "edges": len(graph.edges()),
        "roots": roots,
        "leaves": leaves,
        "most_depended_upon": [{"module": n, "dependents": count} for n, count in fan_in[:top_n]],
    }
