"""Output utilities for CLI commands with clear intent.

user_output is for messages addressed to a person and goes to stderr;
machine_output is for results other tools may consume and goes to stdout.
"""

import click


def user_output(message: str = "") -> None:
    click.echo(message, err=True)


def machine_output(message: str = "") -> None:
    click.echo(message)


def error_output(message: str) -> None:
    """Show a red "Error:" prefixed message on stderr."""
    user_output(click.style("Error: ", fg="red") + message)
