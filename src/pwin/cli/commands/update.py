import click

from pwin.cli.error_boundary import cli_error_boundary
from pwin.cli.output import machine_output, user_output
from pwin.cli.params import VERSION
from pwin.core.context import PwinContext
from pwin.core.version import PhpVersion
from pwin.core.version_manager import UpdateAction, UpdateStatus, update


def _describe(action: UpdateAction) -> str:
    match action.status:
        case UpdateStatus.UPDATED:
            return f"{action.installed} -> {action.available}"
        case UpdateStatus.WOULD_UPDATE:
            return f"[dry-run] would update {action.installed} -> {action.available}"
        case UpdateStatus.UP_TO_DATE:
            return f"{action.installed} is up to date"
        case UpdateStatus.NOT_IN_CATALOG:
            return f"{action.installed} not found in release catalog"
        case UpdateStatus.NO_MATCHING_BUILD:
            assert action.thread_safety is not None and action.arch is not None
            return (
                f"{action.installed}: no {action.available} release for thread safety "
                f"`{action.thread_safety.label}` and arch `{action.arch.token}`"
            )
        case UpdateStatus.NOT_INSTALLED:
            return f"{action.installed} not installed"


@click.command("update")
@click.argument("version", type=VERSION, required=False)
@click.option("--dry-run", is_flag=True, help="Output the operations without performing them.")
@click.pass_obj
@cli_error_boundary
def update_cmd(ctx: PwinContext, version: PhpVersion | None, dry_run: bool) -> None:
    """Update installed PHP versions to their latest patch.

    Updates VERSION only when given, otherwise every installed version.
    """
    actions = update(ctx, version, dry_run)

    if not actions:
        user_output("No PHP versions installed")
        return

    for action in actions:
        machine_output(_describe(action))
