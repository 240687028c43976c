"""Downstream impact of changing modules."""

import click
from rich.table import Table

from ..graph.analyzer import impact_of_change
from ..ui import console, module_list, print_header, print_success, print_warning
from ..utils.error_handler import handle_exceptions
from .common import emit_json, load_graph, print_export_location, source_options, write_json


@click.command("impact")
@handle_exceptions
@click.option("--target", "targets", multiple=True, required=True,
              help="Module being changed (repeatable)")
@click.option("--depth", type=click.IntRange(min=1), default=None,
              help="Maximum hops to follow (default: unlimited)")
@click.option("--format", "output_format", type=click.Choice(["text", "json"]), default="text",
              help="Output format")
@click.option("--output", help="JSON export path (default: paths.impact_json)")
@source_options
def impact(targets, depth, output_format, output, root, manifest):
    """List modules that consume outputs of the changed modules.

    Follows bindings downstream from every --target: direct consumers are
    at distance 1, their consumers at distance 2, and so on. The result also
    gives the order in which the impacted modules would be re-applied.

    \b
    EXAMPLES:
      modgraph impact infra/ --target networking
      modgraph impact infra/ --target iam --target security --depth 1
    """
    graph, _, export_path = load_graph(root, manifest, "impact_json", output, output_format)
    result = impact_of_change(graph, list(targets), max_depth=depth)
    output_path = write_json(result, export_path)

    if output_format == "json":
        emit_json(result)
        return

    print_header("CHANGE IMPACT")
    for name in result["missing"]:
        print_warning(f"Unknown module: {name}")

    if not result["impacted"]:
        print_success(f"No module consumes outputs of {', '.join(result['targets']) or 'the targets'}")
    else:
        table = Table(show_header=True, header_style="bold")
        table.add_column("Module", style="module")
        table.add_column("Distance", justify="right")
        for name, distance in result["impacted"].items():
            table.add_row(name, str(distance))
        console.print(table)

        if result["apply_order"]:
            console.print(f"Re-apply order: {module_list(result['apply_order'], ' -> ')}")

    print_export_location(output_path)
