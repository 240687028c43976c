"""Terminal output for modgraph commands.

One themed rich Console shared by every command. Module names are always
rendered with the ``module`` style so orders, layers and impact lists read
the same everywhere.

Usage:
    from modgraph.ui import console, module_list, print_header

    print_header("APPLY LAYERS")
    console.print(f"Layer 1: {module_list(['networking', 's3'])}")
"""

import sys
from collections.abc import Iterable

from rich.console import Console
from rich.panel import Panel
from rich.text import Text
from rich.theme import Theme

MODGRAPH_THEME = Theme({
    "warning": "bold yellow",
    "error": "bold red",
    "success": "bold green",
    "module": "bold magenta",
    "path": "bold cyan",
    "dim": "dim white",
})

# Panel border colour per outcome
_PANEL_STYLES = {
    "error": "red",
    "warning": "yellow",
    "success": "green",
}

console = Console(
    theme=MODGRAPH_THEME,
    force_terminal=sys.stdout.isatty(),
    highlight=False,
)


def module_list(names: Iterable[str], separator: str = ", ") -> str:
    """Markup for a sequence of module names."""
    return separator.join(f"[module]{name}[/module]" for name in names)


def print_header(title: str) -> None:
    console.rule(f"[bold]{title}[/bold]")


def print_error(msg: str) -> None:
    console.print(f"[error]ERROR:[/error] {msg}")


def print_warning(msg: str) -> None:
    console.print(f"[warning]WARNING:[/warning] {msg}")


def print_success(msg: str) -> None:
    console.print(f"[success]OK:[/success] {msg}")


def print_status_panel(status: str, message: str, detail: str = "", level: str = "success") -> None:
    """Print the outcome of a command as a titled panel.

    Args:
        status: Panel title (e.g., "CYCLE", "CLEAN")
        message: Main line
        detail: Further lines, plain text
        level: "error", "warning" or "success"
    """
    colour = _PANEL_STYLES[level]
    body = Text(message, style=f"bold {colour}")
    if detail:
        body.append(f"\n{detail}", style=colour)

    console.print(Panel(
        body,
        title=Text(status, style=f"bold {colour}"),
        title_align="left",
        border_style=colour,
        expand=False,
    ))
