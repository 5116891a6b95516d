"""Process exit codes.

Each release error kind maps to its own exit code so that automation can tell
"version already tagged" apart from "network blip" before re-triggering a run.
Code 2 is left to typer/click for command-line usage errors.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    These values are used as process exit codes and should remain stable:
    - 0: Success
    - 1: User error (bad bump kind, invalid configuration)
    - 3: Not found (repository, branch or manifest missing)
    - 4: Network error (timeout, connection failure, 5xx)
    - 5: Conflict (stale manifest revision, existing tag or pull request)
    - 6: Authentication error (missing or rejected token)
    - 7: API error (unexpected status or payload)
    """

    OK = 0
    USER_ERROR = 1
    NOT_FOUND = 3
    NETWORK_ERROR = 4
    CONFLICT = 5
    AUTH_ERROR = 6
    API_ERROR = 7

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK

    @property
    def is_error(self) -> bool:
        return self != ErrorCode.OK
