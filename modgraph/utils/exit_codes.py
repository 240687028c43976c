"""Centralized exit codes for the modgraph CLI."""


class ExitCodes:
    """Standard exit codes for modgraph CLI commands."""

    SUCCESS = 0

    BINDING_ISSUES = 1
    RESOLUTION_FAILED = 2

    TASK_INCOMPLETE = 3

    @classmethod
    def get_description(cls, code: int) -> str:
        """Get human-readable description for an exit code."""
        descriptions = {
            cls.SUCCESS: "Success - composition resolves cleanly",
            cls.BINDING_ISSUES: "Bindings reference undeclared outputs or inputs",
            cls.RESOLUTION_FAILED: "No apply order exists (cycle or unknown module)",
            cls.TASK_INCOMPLETE: "Task could not be completed due to missing input files",
        }
        return descriptions.get(code, f"Unknown exit code: {code}")
