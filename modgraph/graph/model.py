"""Module dependency graph.

A graph is built once per run from the full set of module declarations and
bindings and is never mutated afterwards. Edges point from a consuming module
to the module producing the value it consumes.

Usage:
    graph = DependencyGraph(modules, bindings)
    graph.dependencies("ecs")   # frozenset({'iam', 'security'})
    graph.dependents("networking")
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import asdict, dataclass, field
from types import MappingProxyType
from typing import Any

import networkx as nx

from .errors import DuplicateModuleError, UnknownModuleReference


@dataclass(frozen=True)
class Module:
    """A named unit of infrastructure configuration."""

    name: str
    inputs: frozenset[str] = frozenset()
    outputs: frozenset[str] = frozenset()
    body: Any = field(default=None, compare=False)  # Opaque, never interpreted
    source: str | None = field(default=None, compare=False)
    file: str | None = field(default=None, compare=False)
    line: int | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        # Accept any iterable of names from callers, but not a bare name
        for attr in ("inputs", "outputs"):
            if isinstance(getattr(self, attr), str):
                raise TypeError(f"Module '{self.name}': {attr} must be a collection of names, not a str")
        object.__setattr__(self, "inputs", frozenset(self.inputs))
        object.__setattr__(self, "outputs", frozenset(self.outputs))


@dataclass(frozen=True, order=True)
class Binding:
    """Edge from a producer's output to a consumer's input parameter.

    ``output`` and ``input`` are empty for ordering-only dependencies such as
    Terraform's ``depends_on``.
    """

    consumer: str
    producer: str
    input: str = ""
    output: str = ""

    def __str__(self) -> str:
        left = f"{self.consumer}.{self.input}" if self.input else self.consumer
        right = f"{self.producer}.{self.output}" if self.output else self.producer
        return f"{left} -> {right}"


class DependencyGraph:
    """Immutable consumer -> producer graph over a set of modules."""

    def __init__(self, modules: Iterable[Module], bindings: Iterable[Binding]):
        self._modules: dict[str, Module] = {}
        for module in modules:
            if module.name in self._modules:
                raise DuplicateModuleError(module.name)
            self._modules[module.name] = module

        # Sorted so that iteration never depends on caller's set ordering
        self._bindings: tuple[Binding, ...] = tuple(sorted(set(bindings)))

        deps: dict[str, set[str]] = {name: set() for name in self._modules}
        dependents: dict[str, set[str]] = {name: set() for name in self._modules}
        for binding in self._bindings:
            if binding.producer not in self._modules:
                raise UnknownModuleReference(binding, binding.producer)
            if binding.consumer not in self._modules:
                raise UnknownModuleReference(binding, binding.consumer)
            deps[binding.consumer].add(binding.producer)
            dependents[binding.producer].add(binding.consumer)

        self._deps = {name: frozenset(items) for name, items in deps.items()}
        self._dependents = {name: frozenset(items) for name, items in dependents.items()}

    def __len__(self) -> int:
        return len(self._modules)

    def __contains__(self, name: object) -> bool:
        return name in self._modules

    def __repr__(self) -> str:
        return f"DependencyGraph(modules={len(self._modules)}, bindings={len(self._bindings)})"

    @property
    def modules(self) -> MappingProxyType:
        """Read-only name -> Module mapping."""
        return MappingProxyType(self._modules)

    @property
    def bindings(self) -> tuple[Binding, ...]:
        return self._bindings

    @property
    def names(self) -> list[str]:
        """Module names, sorted."""
        return sorted(self._modules)

    def module(self, name: str) -> Module:
        return self._modules[name]

    def dependencies(self, name: str) -> frozenset[str]:
        """Modules whose outputs ``name`` consumes."""
        return self._deps[name]

    def dependents(self, name: str) -> frozenset[str]:
        """Modules consuming outputs of ``name``."""
        return self._dependents[name]

    def edges(self) -> list[tuple[str, str]]:
        """Distinct (consumer, producer) pairs, sorted."""
        return sorted(
            (consumer, producer)
            for consumer, producers in self._deps.items()
            for producer in producers
        )

    def bindings_for(self, consumer: str) -> list[Binding]:
        return [b for b in self._bindings if b.consumer == consumer]

    def to_networkx(self) -> nx.DiGraph:
        """Export as a networkx DiGraph with consumer -> producer edges."""
        graph = nx.DiGraph()
        graph.add_nodes_from(self.names)
        graph.add_edges_from(self.edges())
        return graph

    def to_dict(self) -> dict[str, Any]:
        """Serializable form (module bodies included as-is)."""
        modules = []
        for name in self.names:
            module = self._modules[name]
            data = asdict(module)
            data["inputs"] = sorted(module.inputs)
            data["outputs"] = sorted(module.outputs)
            modules.append(data)

        return {
            "modules": modules,
            "bindings": [asdict(b) for b in self._bindings],
        }
