"""Custom click parameter types."""

import click

from pwin.core.errors import VersionParseError
from pwin.core.version import PhpVersion


class VersionParamType(click.ParamType):
    """A `major.minor[.patch]` argument, rejected before any I/O happens."""

    name = "version"

    def convert(
        self, value: object, param: click.Parameter | None, ctx: click.Context | None
    ) -> PhpVersion:
        if isinstance(value, PhpVersion):
            return value
        try:
            return PhpVersion.parse(str(value))
        except VersionParseError as e:
            self.fail(str(e), param, ctx)


VERSION = VersionParamType()
