"""Validate a module composition."""

import sys

import click

from ..graph.analyzer import binding_issues, graph_summary
from ..graph.errors import CycleDetected
from ..graph.resolver import resolve_graph
from ..ui import console, print_header, print_status_panel
from ..utils.error_handler import handle_exceptions
from ..utils.exit_codes import ExitCodes
from .common import emit_json, fail_resolution, load_graph, print_export_location, source_options, write_json


@click.command("check")
@handle_exceptions
@source_options
@click.option("--format", "output_format", type=click.Choice(["text", "json"]), default="text",
              help="Output format")
@click.option("--output", help="JSON export path (default: paths.check_json)")
def check(root, manifest, output_format, output):
    """Check that a composition resolves and its bindings line up.

    \b
    CHECKS:
      - Every binding names declared modules
      - The dependency graph has no cycles
      - Referenced outputs are declared by the producing module
      - Bound inputs are declared by the consuming module

    \b
    EXIT CODES:
      0  Clean
      1  Bindings reference undeclared outputs or inputs
      2  Cycle or binding to an undeclared module
      3  ROOT or manifest missing or unreadable
    """
    graph, config, export_path = load_graph(root, manifest, "check_json", output, output_format)

    try:
        resolve_graph(graph)
    except CycleDetected as e:
        fail_resolution(e, output_format, export_path)

    issues = binding_issues(graph)
    result = {
        "status": "issues" if issues else "clean",
        "issues": issues,
        "summary": graph_summary(graph),
    }
    output_path = write_json(result, export_path)
    exit_code = ExitCodes.BINDING_ISSUES if issues else ExitCodes.SUCCESS

    if output_format == "json":
        emit_json(result)
        sys.exit(exit_code)

    print_header("COMPOSITION CHECK")
    summary = result["summary"]
    console.print(f"  Modules:  {summary['modules']}")
    console.print(f"  Bindings: {summary['bindings']}")
    console.print(f"  Roots:    {', '.join(summary['roots']) or '-'}")

    if issues:
        max_rows = config["report"]["max_issue_rows"]
        detail = "\n".join(issue["message"] for issue in issues[:max_rows])
        if len(issues) > max_rows:
            detail += f"\n... and {len(issues) - max_rows} more"
        print_status_panel("ISSUES", f"{len(issues)} binding issue(s) found", detail, level="warning")
    else:
        print_status_panel("CLEAN", "Composition resolves", ExitCodes.get_description(exit_code), level="success")

    print_export_location(output_path)
    sys.exit(exit_code)
