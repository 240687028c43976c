"""Shared plumbing for modgraph commands: graph loading and JSON export."""

import json
import sys
from pathlib import Path
from typing import Any, NoReturn

import click

from ..config_runtime import load_runtime_config
from ..graph.errors import (
    ConfigurationError,
    CycleDetected,
    DuplicateModuleError,
    ResolutionError,
    UnknownModuleReference,
)
from ..graph.model import DependencyGraph
from ..manifest import load_manifest_graph
from ..terraform.loader import TerraformModuleLoader
from ..ui import console, print_error, print_status_panel
from ..utils.exit_codes import ExitCodes
from ..utils.logging import logger


def source_options(func):
    """Attach the ROOT argument and --manifest option every command shares."""
    func = click.option(
        "--manifest",
        type=click.Path(dir_okay=False),
        help="YAML/JSON manifest describing modules and bindings (instead of .tf files)",
    )(func)
    func = click.argument("root", default=".", type=click.Path(file_okay=False))(func)
    return func


def load_graph(
    root: str,
    manifest: str | None,
    export: str,
    output: str | None = None,
    output_format: str = "text",
) -> tuple[DependencyGraph, dict[str, Any], str]:
    """Build the dependency graph for a command, exiting on bad input.

    Args:
        root: Terraform root directory
        manifest: Manifest path, used instead of ``root`` when given
        export: ``paths`` config key of the command's JSON export
        output: Explicit export path (overrides ``export``)
        output_format: "text" or "json", for failure reporting

    Returns:
        (graph, runtime config, JSON export path)
    """
    config = load_runtime_config(root)
    export_path = output or config["paths"][export]

    try:
        if manifest:
            graph = load_manifest_graph(manifest)
        else:
            loader = TerraformModuleLoader(root, extensions=config["terraform"]["extensions"])
            graph = loader.load_graph()
    except (FileNotFoundError, ConfigurationError) as e:
        print_error(str(e))
        sys.exit(ExitCodes.TASK_INCOMPLETE)
    except ResolutionError as e:
        fail_resolution(e, output_format, export_path)

    logger.debug(f"Loaded {graph!r}")
    return graph, config, export_path


def resolution_failure(error: ResolutionError) -> dict[str, Any]:
    """JSON form of a resolution failure."""
    if isinstance(error, CycleDetected):
        result = {"status": "cycle", "modules": error.modules, "cycles": error.cycles, "path": error.path}
    elif isinstance(error, UnknownModuleReference):
        result = {"status": "unknown_module", "binding": str(error.binding), "module": error.module_name}
    elif isinstance(error, DuplicateModuleError):
        result = {"status": "duplicate_module", "module": error.name}
    else:
        result = {"status": "invalid"}
    result["message"] = str(error)
    return result


def fail_resolution(error: ResolutionError, output_format: str, export_path: str) -> NoReturn:
    """Export and report a resolution failure, then exit with RESOLUTION_FAILED."""
    result = resolution_failure(error)
    output_path = write_json(result, export_path)

    if output_format == "json":
        emit_json(result)
    else:
        report_resolution_error(error)
        print_export_location(output_path)
    sys.exit(ExitCodes.RESOLUTION_FAILED)


def report_resolution_error(error: ResolutionError) -> None:
    """Render a resolution failure as a status panel."""
    if isinstance(error, CycleDetected):
        detail = "\n".join(" -> ".join(cycle) for cycle in error.cycles)
        if error.path:
            detail += f"\nLoop: {' -> '.join(error.path)}"
        print_status_panel("CYCLE", f"Modules on a cycle: {', '.join(error.modules)}", detail, level="error")
    elif isinstance(error, UnknownModuleReference):
        print_status_panel(
            "UNKNOWN MODULE",
            f"Binding references undeclared module '{error.module_name}'",
            f"Binding: {error.binding}",
            level="error",
        )
    else:
        print_status_panel("INVALID", str(error), "Fix the configuration and retry", level="error")


def write_json(data: Any, path: str) -> Path:
    """Write a JSON export, creating parent directories."""
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, default=str)
    return output_path


def emit_json(data: Any) -> None:
    """Print JSON to stdout, unstyled."""
    click.echo(json.dumps(data, indent=2, default=str))


def print_export_location(path: Path) -> None:
    console.print(f"\nJSON export: [path]{path}[/path]")
