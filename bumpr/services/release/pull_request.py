from __future__ import annotations

from bumpr.core.config import ReleaseConfig
from bumpr.core.result import Err, Ok, Result
from bumpr.core.structured import get_str
from bumpr.github.http import HttpClient
from bumpr.services.release.errors import ReleaseError, invalid_response
from bumpr.services.release.gh import gh_object, repo_path
from bumpr.services.release.model import ReleasePullRequest, TagRef
from bumpr.services.release.tags import create_ref, ref_commit_sha


def release_title(cfg: ReleaseConfig, version: str) -> str:
    return f"{cfg.release_marker_prefix}v{version}"


def snapshot_branch(tag: TagRef) -> str:
    return f"release/{tag.name}"


def prepare_head(
    client: HttpClient,
    cfg: ReleaseConfig,
    tag: TagRef,
    *,
    dry_run: bool = False,
    reuse_existing: bool = False,
) -> Result[str, ReleaseError]:
    """Branch name to open the release PR from.

    With the ``snapshot`` strategy a branch is created at the tagged commit so
    later pushes to the integration branch cannot leak into the release PR.
    With ``reuse_existing`` a branch left by an earlier run is accepted as long
    as it still points at the tagged commit.
    """
    if cfg.head_strategy == "integration":
        return Ok(cfg.integration_branch)

    branch = snapshot_branch(tag)
    if dry_run:
        return Ok(branch)

    ref = f"refs/heads/{branch}"
    created = create_ref(client, cfg, ref=ref, sha=tag.commit_sha, what=f"branch {branch}")
    if isinstance(created, Ok):
        return Ok(branch)
    if not reuse_existing or created.error.kind != "conflict":
        return created

    existing = ref_commit_sha(client, cfg, ref)
    if isinstance(existing, Err):
        return existing
    if existing.value != tag.commit_sha:
        return Err(
            ReleaseError(
                kind="conflict",
                message=(
                    f"branch {branch} points at {existing.value[:8]}, "
                    f"not at {tag.name} ({tag.commit_sha[:8]})"
                ),
                hint=f"delete {branch} or move it to {tag.name}",
            )
        )
    return Ok(branch)


def build_release_pull_request(
    cfg: ReleaseConfig, *, head: str, version: str, notes: str
) -> ReleasePullRequest:
    return ReleasePullRequest(
        head=head,
        base=cfg.release_branch,
        title=release_title(cfg, version),
        body=notes,
    )


def open_release_pull_request(
    client: HttpClient, cfg: ReleaseConfig, request: ReleasePullRequest
) -> Result[str, ReleaseError]:
    """Open the PR and return its web URL."""
    obj = gh_object(
        client,
        "POST",
        repo_path(cfg, "pulls"),
        body={
            "title": request.title,
            "head": request.head,
            "base": request.base,
            "body": request.body,
            "maintainer_can_modify": request.maintainer_can_modify,
        },
        message=f"failed to open pull request {request.head} -> {request.base}",
        conflict_message=(
            f"a pull request {request.head} -> {request.base} already exists or is invalid"
        ),
    )
    if isinstance(obj, Err):
        return obj

    url = get_str(obj.value, "html_url")
    if url is None:
        return Err(invalid_response("pull request payload has no html_url"))
    return Ok(url)
