import click

from pwin.cli.error_boundary import cli_error_boundary
from pwin.cli.output import machine_output, user_output
from pwin.core.context import PwinContext
from pwin.core.version_manager import info


@click.command("info")
@click.pass_obj
@cli_error_boundary
def info_cmd(ctx: PwinContext) -> None:
    """List info about all installed PHP versions."""
    entries = info(ctx)
    if not entries:
        user_output("No PHP versions installed")
        return

    for entry in entries:
        machine_output(f"{entry.version} {entry.arch.token} {entry.thread_safety.label}")
