from __future__ import annotations

from bumpr.core.config import ReleaseConfig
from bumpr.core.result import Err, Ok, Result
from bumpr.core.structured import as_str_dict, get_str, get_table
from bumpr.github.http import HttpClient
from bumpr.services.release.errors import ReleaseError, invalid_response
from bumpr.services.release.gh import gh_list, gh_object, repo_path
from bumpr.services.release.model import LatestTag, TagRef
from bumpr.services.release.semver import parse_version

_TAGS_PER_PAGE = 100


def tag_name(version: str) -> str:
    return f"v{version}"


def recent_tags(
    client: HttpClient, cfg: ReleaseConfig, *, limit: int
) -> Result[list[LatestTag], ReleaseError]:
    """Up to ``limit`` version tags, most recent first.

    Non-version tags (``nightly``, ``docs-2024``) are skipped.
    """
    items = gh_list(
        client,
        repo_path(cfg, "tags"),
        params={"per_page": _TAGS_PER_PAGE},
        message=f"failed to list tags of {cfg.slug}",
    )
    if isinstance(items, Err):
        return items

    out: list[LatestTag] = []
    for item in items.value:
        if len(out) >= limit:
            break

        d = as_str_dict(item)
        if d is None:
            continue

        name = get_str(d, "name")
        if name is None:
            continue

        version = parse_version(name)
        if version is None:
            continue

        commit = get_table(d, "commit")
        sha = get_str(commit, "sha") if commit is not None else None
        if sha is None:
            return Err(invalid_response(f"tag {name} has no commit sha"))

        out.append(LatestTag(name=name, commit_sha=sha, version=version))

    return Ok(out)


def latest_tag(client: HttpClient, cfg: ReleaseConfig) -> Result[LatestTag | None, ReleaseError]:
    """Most recent version tag, or None when the repository has none."""
    tags = recent_tags(client, cfg, limit=1)
    if isinstance(tags, Err):
        return tags
    return Ok(tags.value[0] if tags.value else None)


def create_ref(
    client: HttpClient,
    cfg: ReleaseConfig,
    *,
    ref: str,
    sha: str,
    what: str,
) -> Result[None, ReleaseError]:
    """Publish a new reference. Existing references are never moved."""
    obj = gh_object(
        client,
        "POST",
        repo_path(cfg, "git/refs"),
        body={"ref": ref, "sha": sha},
        message=f"failed to create {what}",
        conflict_message=f"{what} already exists",
    )
    if isinstance(obj, Err):
        return obj
    return Ok(None)


def create_tag(
    client: HttpClient,
    cfg: ReleaseConfig,
    commit_sha: str,
    version: str,
) -> Result[TagRef, ReleaseError]:
    """Create the annotated tag ``v<version>`` on ``commit_sha``.

    Two calls: the tag object, then the ``refs/tags`` reference. If the second
    call fails the tag object is left unreferenced (harmless, collected by the
    platform) and the tag must not be considered published.
    """
    name = tag_name(version)
    obj = gh_object(
        client,
        "POST",
        repo_path(cfg, "git/tags"),
        body={
            "tag": name,
            "message": name,
            "object": commit_sha,
            "type": "commit",
        },
        message=f"failed to create tag object {name}",
    )
    if isinstance(obj, Err):
        return obj

    object_sha = get_str(obj.value, "sha")
    if object_sha is None:
        return Err(invalid_response(f"missing sha for tag object {name}"))

    ref = f"refs/tags/{name}"
    published = create_ref(client, cfg, ref=ref, sha=object_sha, what=f"tag {name}")
    if isinstance(published, Err):
        return published

    return Ok(TagRef(name=name, ref=ref, object_sha=object_sha, commit_sha=commit_sha))


def ref_commit_sha(
    client: HttpClient, cfg: ReleaseConfig, ref: str
) -> Result[str, ReleaseError]:
    """Sha a ``refs/...`` reference points at."""
    short = ref.removeprefix("refs/")
    obj = gh_object(
        client,
        "GET",
        repo_path(cfg, f"git/ref/{short}"),
        message=f"failed to read {ref}",
    )
    if isinstance(obj, Err):
        return obj

    target = get_table(obj.value, "object")
    sha = get_str(target, "sha") if target is not None else None
    if sha is None:
        return Err(invalid_response(f"{ref} has no object sha"))
    return Ok(sha)
