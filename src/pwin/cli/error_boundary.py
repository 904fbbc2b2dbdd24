"""Error boundary handling for CLI commands.

This module provides a decorator to catch pwin's expected failures at CLI
entry points and display clean error messages without stack traces.
"""

import functools
import logging
from collections.abc import Callable
from typing import Any

from pwin.cli.output import error_output
from pwin.core.errors import PwinError

logger = logging.getLogger(__name__)


def cli_error_boundary[T: Callable[..., Any]](func: T) -> T:
    """Decorator that turns PwinError into an error message and exit code 1.

    All other exceptions bubble up normally with full stack traces.

    Example:
        @click.command()
        @cli_error_boundary
        def my_command():
            ...
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except PwinError as e:
            logger.debug("Command failed", exc_info=True)
            error_output(str(e))
            raise SystemExit(1) from None

    return wrapper  # type: ignore[return-value]
