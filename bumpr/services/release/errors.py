from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Literal

from bumpr.github.http import HttpError

if TYPE_CHECKING:
    from bumpr.services.release.model import ReleaseStep

ReleaseErrorKind = Literal[
    "validation",
    "config",
    "not_found",
    "conflict",
    "transport",
    "auth",
    "api",
    "invalid_response",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    """Canonical release error payload.

    ``step`` is filled in by the orchestrator once the error leaves the
    component that produced it.
    """

    kind: ReleaseErrorKind
    message: str
    hint: str | None = None
    step: ReleaseStep | None = None

    def at(self, step: ReleaseStep) -> ReleaseError:
        if self.step is not None:
            return self
        return replace(self, step=step)

    def pretty(self) -> str:
        prefix = f"[{self.step}] " if self.step is not None else ""
        if self.hint:
            return f"{prefix}{self.message} (hint: {self.hint})"
        return f"{prefix}{self.message}"


def http_error_kind(status: int) -> ReleaseErrorKind:
    if status == 0 or status >= 500:
        return "transport"
    if status in (401, 403):
        return "auth"
    if status == 404:
        return "not_found"
    if status in (409, 422):
        return "conflict"
    return "api"


def release_error_from_http(
    error: HttpError,
    *,
    message: str,
    conflict_message: str | None = None,
) -> ReleaseError:
    """Translate a transport error into the release taxonomy.

    The API's own message becomes the hint; ``conflict_message`` replaces
    ``message`` for 409/422 answers where the caller knows what collided.
    """
    kind = http_error_kind(error.status)
    if kind == "conflict" and conflict_message is not None:
        message = conflict_message
    return ReleaseError(kind=kind, message=message, hint=str(error))


def invalid_response(message: str, *, hint: str | None = None) -> ReleaseError:
    return ReleaseError(kind="invalid_response", message=message, hint=hint)
