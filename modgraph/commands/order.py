"""Apply order and apply layers."""

import click
from rich.table import Table

from ..graph.analyzer import apply_layers, destroy_order, graph_summary
from ..graph.errors import CycleDetected
from ..graph.resolver import resolve_graph
from ..ui import console, module_list, print_header
from ..utils.error_handler import handle_exceptions
from .common import emit_json, fail_resolution, load_graph, print_export_location, source_options, write_json


@click.command("order")
@handle_exceptions
@source_options
@click.option("--destroy", is_flag=True, help="Print the teardown order instead (consumers first)")
@click.option("--format", "output_format", type=click.Choice(["text", "json"]), default="text",
              help="Output format")
@click.option("--output", help="JSON export path (default: paths.order_json)")
def order(root, manifest, destroy, output_format, output):
    """Compute the order in which modules must be applied.

    Reads every module call in ROOT (default: current directory), links them
    through their module.<name>.<output> references and depends_on lists,
    and prints an order where every module comes after all modules whose
    outputs it consumes. Ties are broken by module name, so the same
    configuration always yields the same order.

    \b
    EXAMPLES:
      modgraph order infra/
      modgraph order infra/ --destroy
      modgraph order --manifest stack.yml --format json

    \b
    EXIT CODES:
      0  Order resolved
      2  Cycle or binding to an undeclared module
      3  ROOT or manifest missing or unreadable
    """
    graph, config, export_path = load_graph(root, manifest, "order_json", output, output_format)

    try:
        sequence = destroy_order(graph) if destroy else resolve_graph(graph)
    except CycleDetected as e:
        fail_resolution(e, output_format, export_path)

    direction = "destroy" if destroy else "apply"
    result = {
        "direction": direction,
        "order": sequence,
        "summary": graph_summary(graph),
        "graph": graph.to_dict(),
    }
    output_path = write_json(result, export_path)

    if output_format == "json":
        emit_json({"direction": direction, "order": sequence})
        return

    print_header(f"{direction.upper()} ORDER")
    table = Table(show_header=True, header_style="bold")
    table.add_column("#", justify="right")
    table.add_column("Module", style="module")
    table.add_column("Consumes")
    table.add_column("Source", style="dim")

    max_rows = config["report"]["max_rows"]
    for index, name in enumerate(sequence[:max_rows], start=1):
        module = graph.module(name)
        table.add_row(
            str(index),
            name,
            ", ".join(sorted(graph.dependencies(name))) or "-",
            module.source or "-",
        )
    console.print(table)

    if len(sequence) > max_rows:
        console.print(f"[dim]... and {len(sequence) - max_rows} more[/dim]")

    print_export_location(output_path)


@click.command("layers")
@handle_exceptions
@source_options
@click.option("--format", "output_format", type=click.Choice(["text", "json"]), default="text",
              help="Output format")
@click.option("--output", help="JSON export path (default: paths.layers_json)")
def layers(root, manifest, output_format, output):
    """Group modules into waves that can be applied concurrently.

    Every module in a wave only consumes outputs of modules in earlier waves,
    so each wave can be applied in parallel once the previous one finished.

    \b
    EXAMPLES:
      modgraph layers infra/
      modgraph layers --manifest stack.yml --format json
    """
    graph, _, export_path = load_graph(root, manifest, "layers_json", output, output_format)

    try:
        waves = apply_layers(graph)
    except CycleDetected as e:
        fail_resolution(e, output_format, export_path)

    output_path = write_json({"layers": waves}, export_path)

    if output_format == "json":
        emit_json({"layers": waves})
        return

    print_header("APPLY LAYERS")
    for index, wave in enumerate(waves, start=1):
        console.print(f"[bold]Layer {index}[/bold] ({len(wave)}): {module_list(wave)}")

    print_export_location(output_path)
