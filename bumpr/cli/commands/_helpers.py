"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import typer

from bumpr.core.result import Err, Result
from bumpr.output.errors import print_release_error, release_error_exit_code
from bumpr.services.release.errors import ReleaseError

if TYPE_CHECKING:
    from bumpr.cli.context import CLIContext


def unwrap_or_exit[T](result: Result[T, ReleaseError], ctx: CLIContext) -> T:
    """Return the Ok value, or report the error and exit with its code.

    This helper reduces boilerplate for the common pattern:
        match result:
            case Err(e):
                print_release_error(e, ctx.console)
                raise typer.Exit(code=release_error_exit_code(e))
            case Ok(value):
                ...
    """
    if isinstance(result, Err):
        print_release_error(result.error, ctx.console)
        exit_with_code(release_error_exit_code(result.error))
    return result.value


def exit_with_code(code: int) -> NoReturn:
    """Exit with given code. Explicit helper for clarity."""
    raise typer.Exit(code=code)
