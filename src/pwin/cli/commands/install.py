import click

from pwin.cli.error_boundary import cli_error_boundary
from pwin.cli.output import machine_output, user_output
from pwin.cli.params import VERSION
from pwin.core.context import PwinContext
from pwin.core.version import PhpVersion
from pwin.core.version_manager import InstallStatus, install


@click.command("install")
@click.argument("version", type=VERSION)
@click.pass_obj
@cli_error_boundary
def install_cmd(ctx: PwinContext, version: PhpVersion) -> None:
    """Install a version of PHP.

    VERSION is major.minor (8.3); the latest published patch of that line is
    installed. A patch in VERSION is accepted but ignored.
    """
    result = install(ctx, version)

    match result.status:
        case InstallStatus.ALREADY_INSTALLED:
            user_output(f"Version {version} already installed")
        case InstallStatus.NO_MATCHING_BUILD:
            user_output(
                f"No matching release for thread safety `{result.thread_safety.label}` "
                f"and arch `{result.arch.token}`"
            )
        case InstallStatus.INSTALLED:
            message = f"Version {result.version} installed to {result.install_dir}"
            machine_output(click.style(message, fg="green"))
