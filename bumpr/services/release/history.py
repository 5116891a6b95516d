from __future__ import annotations

from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

from bumpr.core.config import ReleaseConfig, parse_timestamp
from bumpr.core.result import Err, Ok, Result
from bumpr.core.structured import StrDict, as_str_dict, get_int, get_str, get_table
from bumpr.github.http import HttpClient
from bumpr.services.release.errors import ReleaseError, invalid_response
from bumpr.services.release.gh import gh_list, gh_object, repo_path
from bumpr.services.release.model import LatestTag, PullRequestSummary, ReleaseHistory

_PULLS_PER_PAGE = 100


def commit_timestamp(
    client: HttpClient, cfg: ReleaseConfig, sha: str
) -> Result[datetime, ReleaseError]:
    """Author timestamp of a commit."""
    obj = gh_object(
        client,
        "GET",
        repo_path(cfg, f"commits/{sha}"),
        message=f"failed to read commit {sha[:8]}",
    )
    if isinstance(obj, Err):
        return obj

    commit = get_table(obj.value, "commit")
    author = get_table(commit, "author") if commit is not None else None
    date = get_str(author, "date") if author is not None else None
    parsed = parse_timestamp(date) if date is not None else None
    if parsed is None:
        return Err(invalid_response(f"commit {sha[:8]} has no author date", hint=date))
    return Ok(parsed)


def last_release_timestamp(
    client: HttpClient, cfg: ReleaseConfig, tag: LatestTag | None
) -> Result[datetime, ReleaseError]:
    """When the previous release was cut.

    Without a previous tag the legacy epoch is returned, so the first release
    covers the whole history.
    """
    if tag is None:
        return Ok(cfg.epoch)
    return commit_timestamp(client, cfg, tag.commit_sha)


def list_closed_pull_requests(
    client: HttpClient, cfg: ReleaseConfig
) -> Result[list[StrDict], ReleaseError]:
    """Closed PRs into the integration branch, most recently updated first."""
    out: list[StrDict] = []
    for page in range(1, cfg.max_pages + 1):
        items = gh_list(
            client,
            repo_path(cfg, "pulls"),
            params={
                "state": "closed",
                "base": cfg.integration_branch,
                "sort": "updated",
                "direction": "desc",
                "per_page": _PULLS_PER_PAGE,
                "page": page,
            },
            message=f"failed to list pull requests of {cfg.slug}",
        )
        if isinstance(items, Err):
            return items

        for item in items.value:
            d = as_str_dict(item)
            if d is not None:
                out.append(d)

        if len(items.value) < _PULLS_PER_PAGE:
            break
    return Ok(out)


def _summarize(item: StrDict) -> PullRequestSummary | None:
    merged = get_str(item, "merged_at")
    if merged is None:
        return None
    merged_at = parse_timestamp(merged)
    title = get_str(item, "title")
    url = get_str(item, "html_url")
    if merged_at is None or title is None or url is None:
        return None
    return PullRequestSummary(
        number=get_int(item, "number") or 0,
        title=title,
        url=url,
        merged_at=merged_at,
    )


def filter_merged_since(
    items: Iterable[StrDict], since: datetime, marker: str
) -> list[PullRequestSummary]:
    """Merged PRs strictly after ``since``, without the workflow's own release PRs.

    Input order is kept; the change log follows the listing order.
    """
    out: list[PullRequestSummary] = []
    for item in items:
        pr = _summarize(item)
        if pr is None:
            continue
        if pr.merged_at <= since:
            continue
        if pr.title.startswith(marker):
            continue
        out.append(pr)
    return out


def merged_prs_since(
    client: HttpClient, cfg: ReleaseConfig, since: datetime
) -> Result[list[PullRequestSummary], ReleaseError]:
    items = list_closed_pull_requests(client, cfg)
    if isinstance(items, Err):
        return items
    return Ok(filter_merged_since(items.value, since, cfg.release_marker_prefix))


def read_history(
    client: HttpClient, cfg: ReleaseConfig, previous: LatestTag | None
) -> Result[ReleaseHistory, ReleaseError]:
    """Resolve the last release timestamp and the PR listing concurrently.

    The two reads are independent; filtering waits for both, so the
    timestamp is always known before any PR is judged.
    """
    with ThreadPoolExecutor(max_workers=2) as executor:
        since_future = executor.submit(last_release_timestamp, client, cfg, previous)
        pulls_future = executor.submit(list_closed_pull_requests, client, cfg)
        since = since_future.result()
        pulls = pulls_future.result()

    if isinstance(since, Err):
        return since
    if isinstance(pulls, Err):
        return pulls

    merged = filter_merged_since(pulls.value, since.value, cfg.release_marker_prefix)
    return Ok(ReleaseHistory(last_release_at=since.value, pull_requests=tuple(merged)))
