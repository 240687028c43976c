"""Resolution errors.

Every error here means the configuration itself must change; none of them
is retryable.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .model import Binding


class ResolutionError(Exception):
    """Base class for failures while building or ordering a module graph."""


class CycleDetected(ResolutionError):
    """Raised when the module dependency graph is not acyclic.

    Attributes:
        modules: Every module sitting on a cycle, sorted by name.
        cycles: One sorted member list per independent cycle.
        path: A concrete loop, first module repeated at the end.
    """

    def __init__(self, modules: list[str], cycles: list[list[str]] | None = None,
                 path: list[str] | None = None):
        self.modules = sorted(modules)
        self.cycles = cycles if cycles is not None else [self.modules]
        self.path = path or []
        msg = f"Circular module dependency between: {', '.join(self.modules)}"
        if self.path:
            msg += f" ({' -> '.join(self.path)})"
        super().__init__(msg)


class UnknownModuleReference(ResolutionError):
    """Raised when a binding names a module that was not declared."""

    def __init__(self, binding: Binding, module_name: str):
        self.binding = binding
        self.module_name = module_name
        super().__init__(f"Binding {binding} references unknown module '{module_name}'")


class DuplicateModuleError(ResolutionError):
    """Raised when two modules are declared under the same name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Module '{name}' is declared more than once")


class ConfigurationError(Exception):
    """Raised when a manifest or Terraform file cannot be read into modules."""

    def __init__(self, message: str, file: str | None = None, line: int | None = None):
        self.file = file
        self.line = line
        location = ""
        if file:
            location = f"{file}:{line}: " if line else f"{file}: "
        super().__init__(f"{location}{message}")
