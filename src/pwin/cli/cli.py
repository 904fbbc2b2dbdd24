import logging

import click

from pwin.cli.commands.config import config_group
from pwin.cli.commands.info import info_cmd
from pwin.cli.commands.install import install_cmd
from pwin.cli.commands.remove import remove_cmd
from pwin.cli.commands.update import update_cmd
from pwin.core.context import create_context

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags

_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def setup_logging(verbosity: int) -> None:
    """Route log records to stderr: WARNING by default, -v INFO, -vv DEBUG."""
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format=_LOG_FORMAT, force=True)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="pwin")
@click.option("-v", "--verbose", count=True, help="Increase log output (-vv for debug).")
@click.pass_context
def cli(ctx: click.Context, verbose: int) -> None:
    """Install and manage PHP for Windows versions."""
    setup_logging(verbose)
    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        ctx.obj = create_context()
        ctx.call_on_close(ctx.obj.win_php.close)


cli.add_command(install_cmd)
cli.add_command(remove_cmd)
cli.add_command(update_cmd)
cli.add_command(info_cmd)
cli.add_command(config_group)


def main() -> None:
    """CLI entry point used by the `pwin` console script."""
    cli()
