import click

from pwin.cli.error_boundary import cli_error_boundary
from pwin.cli.output import machine_output, user_output
from pwin.cli.params import VERSION
from pwin.core.context import PwinContext
from pwin.core.version import PhpVersion
from pwin.core.version_manager import RemoveStatus, remove


@click.command("remove")
@click.argument("version", type=VERSION)
@click.pass_obj
@cli_error_boundary
def remove_cmd(ctx: PwinContext, version: PhpVersion) -> None:
    """Remove a version of PHP."""
    result = remove(ctx, version)

    if result.status is RemoveStatus.NOT_INSTALLED:
        user_output(f"Version {version} not installed")
        return

    machine_output(f"Version {result.version} removed")
