"""Release orchestration.

The workflow is a straight line of remote steps; each step consumes what the
previous ones produced:

    resolve_version -> read_manifest_revision -> write_manifest -> create_tag
        -> read_history -> compose_notes -> open_pull_request

The first failure stops the run and is returned stamped with its step. There
are no retries and no rollback: a manifest commit that was already pushed
stays pushed. Re-running is safe because the baseline version comes from the
last tag (immutable) rather than from the manifest, and a manifest that
already carries the target version is not written again.
"""

from __future__ import annotations

from dataclasses import dataclass

from bumpr.core.config import ReleaseConfig
from bumpr.core.result import Err, Ok, Result
from bumpr.github.http import HttpClient
from bumpr.output.console import ConsoleProtocol, Style
from bumpr.services.release.errors import ReleaseError
from bumpr.services.release.history import read_history
from bumpr.services.release.manifest import fetch_manifest, last_manifest_commit, write_manifest
from bumpr.services.release.model import (
    BumpKind,
    LatestTag,
    Manifest,
    ReleaseHistory,
    ReleaseOutcome,
    ReleaseStep,
    TagRef,
)
from bumpr.services.release.notes import compose_notes
from bumpr.services.release.pull_request import (
    build_release_pull_request,
    open_release_pull_request,
    prepare_head,
)
from bumpr.services.release.semver import parse_bump_kind, parse_version
from bumpr.services.release.tags import create_tag, latest_tag, recent_tags, tag_name

DRY_RUN = "(dry-run)"


@dataclass(frozen=True, slots=True)
class VersionPlan:
    bump: BumpKind
    previous: LatestTag | None
    current: str
    target: str
    manifest: Manifest | None  # already fetched when it served as the baseline


def resolve_version(
    client: HttpClient, cfg: ReleaseConfig, bump_text: str
) -> Result[VersionPlan, ReleaseError]:
    """Pick the baseline and compute the target version.

    The bump kind is validated before any remote call. The latest tag is the
    baseline; the manifest is only consulted when no version tag exists yet.
    """
    bump = parse_bump_kind(bump_text)
    if isinstance(bump, Err):
        return bump

    tag = latest_tag(client, cfg)
    if isinstance(tag, Err):
        return tag

    if tag.value is not None:
        current = tag.value.version
        return Ok(
            VersionPlan(
                bump=bump.value,
                previous=tag.value,
                current=str(current),
                target=str(current.bump(bump.value)),
                manifest=None,
            )
        )

    manifest = fetch_manifest(client, cfg)
    if isinstance(manifest, Err):
        return manifest

    parsed = parse_version(manifest.value.version)
    if parsed is None:
        return Err(
            ReleaseError(
                kind="validation",
                message=(
                    f"{manifest.value.path} version is not a semantic version: "
                    f"{manifest.value.version!r}"
                ),
            )
        )
    return Ok(
        VersionPlan(
            bump=bump.value,
            previous=None,
            current=str(parsed),
            target=str(parsed.bump(bump.value)),
            manifest=manifest.value,
        )
    )


def commit_manifest(
    client: HttpClient,
    cfg: ReleaseConfig,
    manifest: Manifest,
    version: str,
    *,
    console: ConsoleProtocol,
    dry_run: bool,
) -> Result[tuple[str, bool], ReleaseError]:
    """Write the bumped manifest; returns (commit sha, resumed)."""
    if manifest.version == version:
        console.warning(f"{manifest.path} already at {version}; resuming from its last commit")
        sha = last_manifest_commit(client, cfg)
        if isinstance(sha, Err):
            return sha
        return Ok((sha.value, True))

    console.print(f"PUT {manifest.path} ({manifest.branch}) version={version}", Style.DIM)
    if dry_run:
        return Ok((DRY_RUN, False))

    written = write_manifest(client, cfg, manifest, version)
    if isinstance(written, Err):
        return written
    return Ok((written.value, False))


def publish_tag(
    client: HttpClient,
    cfg: ReleaseConfig,
    commit_sha: str,
    version: str,
    *,
    console: ConsoleProtocol,
    dry_run: bool,
) -> Result[TagRef, ReleaseError]:
    name = tag_name(version)
    console.print(f"POST git/tags + git/refs {name} -> {commit_sha[:8]}", Style.DIM)
    if dry_run:
        return Ok(
            TagRef(name=name, ref=f"refs/tags/{name}", object_sha=DRY_RUN, commit_sha=commit_sha)
        )
    return create_tag(client, cfg, commit_sha, version)


def run_release(
    client: HttpClient,
    cfg: ReleaseConfig,
    bump: str,
    *,
    console: ConsoleProtocol,
    dry_run: bool = False,
) -> Result[ReleaseOutcome, ReleaseError]:
    """Run the whole release; the error names the step that failed."""
    step = ReleaseStep.RESOLVE_VERSION
    plan = resolve_version(client, cfg, bump)
    if isinstance(plan, Err):
        return plan.map_err(lambda e: e.at(step))
    console.print(f"Current version: {plan.value.current}")
    console.print(f"Next version: {plan.value.target} ({plan.value.bump})")

    step = ReleaseStep.READ_MANIFEST_REVISION
    manifest: Manifest
    if plan.value.manifest is not None:
        manifest = plan.value.manifest
    else:
        fetched = fetch_manifest(client, cfg)
        if isinstance(fetched, Err):
            return fetched.map_err(lambda e: e.at(step))
        manifest = fetched.value
    console.print(f"{manifest.path} revision: {manifest.sha[:8]}", Style.DIM)

    step = ReleaseStep.WRITE_MANIFEST
    committed = commit_manifest(
        client, cfg, manifest, plan.value.target, console=console, dry_run=dry_run
    )
    if isinstance(committed, Err):
        return committed.map_err(lambda e: e.at(step))
    commit_sha, resumed = committed.value
    console.print(f"Manifest commit: {commit_sha}")

    step = ReleaseStep.CREATE_TAG
    tag = publish_tag(
        client, cfg, commit_sha, plan.value.target, console=console, dry_run=dry_run
    )
    if isinstance(tag, Err):
        return tag.map_err(lambda e: e.at(step))
    console.print(f"Tag: {tag.value.name}")

    step = ReleaseStep.READ_HISTORY
    history = read_history(client, cfg, plan.value.previous)
    if isinstance(history, Err):
        return history.map_err(lambda e: e.at(step))
    console.print(f"Last release: {history.value.last_release_at.isoformat()}")
    console.print(f"Found {len(history.value.pull_requests)} merged pull request(s)")

    notes = compose_notes(history.value.pull_requests)

    step = ReleaseStep.OPEN_PULL_REQUEST
    pr_url = _open_pull_request(
        client,
        cfg,
        tag.value,
        plan.value.target,
        notes,
        history.value,
        console=console,
        dry_run=dry_run,
    )
    if isinstance(pr_url, Err):
        return pr_url.map_err(lambda e: e.at(step))

    return Ok(
        ReleaseOutcome(
            previous_version=plan.value.current,
            version=plan.value.target,
            commit_sha=commit_sha,
            tag=tag.value.name,
            last_release_at=history.value.last_release_at,
            pull_requests=history.value.pull_requests,
            notes=notes,
            pr_url=pr_url.value,
            resumed=resumed,
            dry_run=dry_run,
        )
    )


def _open_pull_request(
    client: HttpClient,
    cfg: ReleaseConfig,
    tag: TagRef,
    version: str,
    notes: str,
    history: ReleaseHistory,
    *,
    console: ConsoleProtocol,
    dry_run: bool,
    reuse_existing: bool = False,
) -> Result[str, ReleaseError]:
    head = prepare_head(client, cfg, tag, dry_run=dry_run, reuse_existing=reuse_existing)
    if isinstance(head, Err):
        return head

    request = build_release_pull_request(cfg, head=head.value, version=version, notes=notes)
    console.print(
        f"POST pulls {request.head} -> {request.base} "
        f"({len(history.pull_requests)} change log entries)",
        Style.DIM,
    )
    if dry_run:
        return Ok(DRY_RUN)
    return open_release_pull_request(client, cfg, request)


def preview_notes(
    client: HttpClient, cfg: ReleaseConfig
) -> Result[tuple[LatestTag | None, ReleaseHistory, str], ReleaseError]:
    """Change log for the next release without touching the repository."""
    tag = latest_tag(client, cfg)
    if isinstance(tag, Err):
        return tag.map_err(lambda e: e.at(ReleaseStep.RESOLVE_VERSION))

    history = read_history(client, cfg, tag.value)
    if isinstance(history, Err):
        return history.map_err(lambda e: e.at(ReleaseStep.READ_HISTORY))

    return Ok((tag.value, history.value, compose_notes(history.value.pull_requests)))


def reopen_pull_request(
    client: HttpClient,
    cfg: ReleaseConfig,
    *,
    console: ConsoleProtocol,
    dry_run: bool = False,
) -> Result[ReleaseOutcome, ReleaseError]:
    """Open the release PR for the latest tag.

    Recovery path for a run that published its tag but failed afterwards:
    re-running the bump would cut another version, so the remaining steps are
    replayed against the existing tag instead.
    """
    tags = recent_tags(client, cfg, limit=2)
    if isinstance(tags, Err):
        return tags.map_err(lambda e: e.at(ReleaseStep.RESOLVE_VERSION))
    if not tags.value:
        return Err(
            ReleaseError(
                kind="not_found",
                message=f"no version tag in {cfg.slug}",
                hint="run a release first",
                step=ReleaseStep.RESOLVE_VERSION,
            )
        )

    latest = tags.value[0]
    previous = tags.value[1] if len(tags.value) > 1 else None
    version = str(latest.version)
    console.print(f"Tag: {latest.name} ({latest.commit_sha[:8]})")

    history = read_history(client, cfg, previous)
    if isinstance(history, Err):
        return history.map_err(lambda e: e.at(ReleaseStep.READ_HISTORY))
    console.print(f"Last release: {history.value.last_release_at.isoformat()}")
    console.print(f"Found {len(history.value.pull_requests)} merged pull request(s)")

    notes = compose_notes(history.value.pull_requests)
    tag = TagRef(
        name=latest.name,
        ref=f"refs/tags/{latest.name}",
        object_sha="",
        commit_sha=latest.commit_sha,
    )
    # A failed run may already have created the snapshot branch for this tag.
    pr_url = _open_pull_request(
        client,
        cfg,
        tag,
        version,
        notes,
        history.value,
        console=console,
        dry_run=dry_run,
        reuse_existing=True,
    )
    if isinstance(pr_url, Err):
        return pr_url.map_err(lambda e: e.at(ReleaseStep.OPEN_PULL_REQUEST))

    return Ok(
        ReleaseOutcome(
            previous_version=str(previous.version) if previous is not None else "",
            version=version,
            commit_sha=latest.commit_sha,
            tag=latest.name,
            last_release_at=history.value.last_release_at,
            pull_requests=history.value.pull_requests,
            notes=notes,
            pr_url=pr_url.value,
            resumed=True,
            dry_run=dry_run,
        )
    )
