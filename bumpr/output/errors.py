"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from bumpr.core.config import ConfigError
from bumpr.core.errors import ErrorCode
from bumpr.output.console import Style
from bumpr.services.release.errors import ReleaseError

if TYPE_CHECKING:
    from bumpr.output.console import ConsoleProtocol

__all__ = ["print_release_error", "print_config_error", "release_error_exit_code"]


def print_release_error(error: ReleaseError, console: ConsoleProtocol) -> None:
    """Print a release error with the failing step and the API's hint."""
    if error.step is not None:
        console.error(f"{error.step}: {error.message}")
    else:
        console.error(error.message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)

    match error.step:
        case "create_tag" if error.kind != "conflict":
            console.print(
                "the manifest commit is already on the integration branch; "
                "re-run the same bump to resume (on a first release, tag that commit by hand)",
                Style.DIM,
            )
        case "read_history" | "open_pull_request":
            console.print(
                "the tag is published; run `bumpr pr` instead of bumping again",
                Style.DIM,
            )
        case _:
            pass


def print_config_error(error: ConfigError, console: ConsoleProtocol) -> None:
    console.error(error.message)
    if error.path is not None:
        console.print(f"config: {error.path}", Style.DIM)


def release_error_exit_code(error: ReleaseError) -> int:
    """Get exit code for a release error."""
    match error.kind:
        case "validation" | "config":
            return int(ErrorCode.USER_ERROR)
        case "not_found":
            return int(ErrorCode.NOT_FOUND)
        case "conflict":
            return int(ErrorCode.CONFLICT)
        case "transport":
            return int(ErrorCode.NETWORK_ERROR)
        case "auth":
            return int(ErrorCode.AUTH_ERROR)
        case "api" | "invalid_response":
            return int(ErrorCode.API_ERROR)
