"""modgraph CLI - main entry point and command registration hub."""
# ruff: noqa: E402 - Intentional lazy loading: commands imported after cli group definition

import click

from modgraph import __version__
from modgraph.utils.logging import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="modgraph")
@click.help_option("-h", "--help")
@click.option("-v", "--verbose", is_flag=True, help="Log loading and resolution details to stderr")
def cli(verbose):
    """modgraph - apply order for Terraform module compositions

    \b
    QUICK START:
      modgraph order infra/              # Apply order
      modgraph layers infra/             # Concurrent apply waves
      modgraph impact infra/ --target networking
      modgraph check infra/              # Cycles and binding issues

    \b
    Every command also accepts --manifest stack.yml instead of .tf files.
    For detailed options: modgraph <command> --help"""
    if verbose:
        configure_logging(level="DEBUG")


from modgraph.commands.check import check
from modgraph.commands.impact import impact
from modgraph.commands.order import layers, order

cli.add_command(order)
cli.add_command(layers)
cli.add_command(impact)
cli.add_command(check)


def main():
    """Main entry point for console script."""
    cli()


if __name__ == "__main__":
    main()
