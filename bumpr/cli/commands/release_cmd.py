from __future__ import annotations

from pathlib import Path

import typer

from bumpr.cli.commands._helpers import exit_with_code, unwrap_or_exit
from bumpr.cli.context import CLIContext, build_context
from bumpr.core.config import DEFAULT_CONFIG_FILE
from bumpr.core.result import Err
from bumpr.output.console import ConsoleProtocol, RichConsole, Style
from bumpr.output.errors import print_release_error, release_error_exit_code
from bumpr.services.release.model import ReleaseOutcome
from bumpr.services.release.semver import parse_bump_kind
from bumpr.services.release.service import preview_notes, reopen_pull_request, run_release

_CONFIG_OPTION = typer.Option(
    Path(DEFAULT_CONFIG_FILE), "--config", "-c", help="Release config (TOML)"
)
_OWNER_OPTION = typer.Option(None, "--owner", help="Repository owner (overrides config)")
_REPO_OPTION = typer.Option(None, "--repo", help="Repository name (overrides config)")
_DRY_RUN_OPTION = typer.Option(False, "--dry-run", help="Read only; print actions without mutating")


def _print_outcome(outcome: ReleaseOutcome, console: ConsoleProtocol) -> None:
    console.newline()
    if outcome.dry_run:
        console.success(f"dry-run complete for {outcome.tag}")
        console.header("Change log")
        console.print(outcome.notes)
        return

    if outcome.resumed:
        console.print("resumed from existing remote state", Style.DIM)
    console.success(f"released {outcome.tag}")
    console.print(f"Pull request: {outcome.pr_url}", Style.BOLD)


def release(
    bump: str = typer.Argument(..., help="Version component to bump: major|minor|patch"),
    config: Path = _CONFIG_OPTION,
    owner: str | None = _OWNER_OPTION,
    repo: str | None = _REPO_OPTION,
    dry_run: bool = _DRY_RUN_OPTION,
) -> None:
    """Bump the version, tag it and open the release pull request."""
    kind = parse_bump_kind(bump)
    if isinstance(kind, Err):
        # Rejected before the config is read or any request is sent.
        print_release_error(kind.error, RichConsole())
        exit_with_code(release_error_exit_code(kind.error))

    ctx: CLIContext = build_context(config_path=config, owner=owner, repo=repo)
    ctx.console.header(f"Release {ctx.config.slug} ({kind.value})")
    outcome = unwrap_or_exit(
        run_release(ctx.client, ctx.config, kind.value, console=ctx.console, dry_run=dry_run),
        ctx,
    )
    _print_outcome(outcome, ctx.console)


def pr(
    config: Path = _CONFIG_OPTION,
    owner: str | None = _OWNER_OPTION,
    repo: str | None = _REPO_OPTION,
    dry_run: bool = _DRY_RUN_OPTION,
) -> None:
    """Open the release pull request for the latest tag (after a failed run)."""
    ctx = build_context(config_path=config, owner=owner, repo=repo)
    ctx.console.header(f"Release pull request {ctx.config.slug}")
    outcome = unwrap_or_exit(
        reopen_pull_request(ctx.client, ctx.config, console=ctx.console, dry_run=dry_run),
        ctx,
    )
    _print_outcome(outcome, ctx.console)


def notes(
    config: Path = _CONFIG_OPTION,
    owner: str | None = _OWNER_OPTION,
    repo: str | None = _REPO_OPTION,
) -> None:
    """Print the change log the next release would carry."""
    ctx = build_context(config_path=config, owner=owner, repo=repo)
    tag, history, text = unwrap_or_exit(preview_notes(ctx.client, ctx.config), ctx)

    since = tag.name if tag is not None else "the beginning"
    ctx.console.print(
        f"since {since} ({history.last_release_at.isoformat()}): "
        f"{len(history.pull_requests)} pull request(s)",
        Style.DIM,
    )
    ctx.console.print(text)
