from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from bumpr.services.release.semver import BumpKind, SemVer

__all__ = [
    "BumpKind",
    "LatestTag",
    "Manifest",
    "PullRequestSummary",
    "ReleaseHistory",
    "ReleaseOutcome",
    "ReleasePullRequest",
    "ReleaseStep",
    "SemVer",
    "TagRef",
]


class ReleaseStep(StrEnum):
    """Orchestrator states, in execution order."""

    RESOLVE_VERSION = "resolve_version"
    READ_MANIFEST_REVISION = "read_manifest_revision"
    WRITE_MANIFEST = "write_manifest"
    CREATE_TAG = "create_tag"
    READ_HISTORY = "read_history"
    COMPOSE_NOTES = "compose_notes"
    OPEN_PULL_REQUEST = "open_pull_request"


@dataclass(frozen=True, slots=True)
class Manifest:
    """A JSON manifest as read from the integration branch."""

    path: str
    branch: str
    sha: str  # revision marker of the blob
    data: dict[str, object]

    @property
    def version(self) -> str:
        value = self.data.get("version")
        return value if isinstance(value, str) else ""


@dataclass(frozen=True, slots=True)
class LatestTag:
    name: str
    commit_sha: str
    version: SemVer


@dataclass(frozen=True, slots=True)
class TagRef:
    name: str
    ref: str
    object_sha: str
    commit_sha: str


@dataclass(frozen=True, slots=True)
class PullRequestSummary:
    number: int
    title: str
    url: str
    merged_at: datetime


@dataclass(frozen=True, slots=True)
class ReleasePullRequest:
    head: str
    base: str
    title: str
    body: str
    maintainer_can_modify: bool = True


@dataclass(frozen=True, slots=True)
class ReleaseHistory:
    last_release_at: datetime
    pull_requests: tuple[PullRequestSummary, ...]


@dataclass(frozen=True, slots=True)
class ReleaseOutcome:
    previous_version: str
    version: str
    commit_sha: str
    tag: str
    last_release_at: datetime
    pull_requests: tuple[PullRequestSummary, ...]
    notes: str
    pr_url: str
    resumed: bool = False
    dry_run: bool = False
