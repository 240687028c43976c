"""Module dependency graph: model, apply-order resolution and analysis."""

from .analyzer import apply_layers, binding_issues, destroy_order, graph_summary, impact_of_change
from .errors import (
    ConfigurationError,
    CycleDetected,
    DuplicateModuleError,
    ResolutionError,
    UnknownModuleReference,
)
from .model import Binding, DependencyGraph, Module
from .resolver import resolve, resolve_graph, verify_order

__all__ = [
    "Binding",
    "ConfigurationError",
    "CycleDetected",
    "DependencyGraph",
    "DuplicateModuleError",
    "Module",
    "ResolutionError",
    "UnknownModuleReference",
    "apply_layers",
    "binding_issues",
    "destroy_order",
    "graph_summary",
    "impact_of_change",
    "resolve",
    "resolve_graph",
    "verify_order",
]
