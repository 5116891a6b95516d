from __future__ import annotations

import base64
import binascii
import json

from bumpr.core.config import ReleaseConfig
from bumpr.core.result import Err, Ok, Result
from bumpr.core.structured import as_str_dict, get_str, get_table
from bumpr.github.http import HttpClient
from bumpr.services.release.errors import ReleaseError, invalid_response
from bumpr.services.release.gh import gh_list, gh_object, repo_path
from bumpr.services.release.model import Manifest


def _decode_content(content: str, *, path: str) -> Result[dict[str, object], ReleaseError]:
    try:
        raw = base64.b64decode(content, validate=False)
    except (binascii.Error, ValueError) as e:
        return Err(invalid_response(f"failed to decode {path}: {e}"))

    try:
        obj: object = json.loads(raw.decode("utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        return Err(invalid_response(f"{path} is not valid JSON: {e}"))

    data = as_str_dict(obj)
    if data is None:
        return Err(invalid_response(f"{path} must contain a JSON object"))
    return Ok(data)


def fetch_manifest(client: HttpClient, cfg: ReleaseConfig) -> Result[Manifest, ReleaseError]:
    """Read the manifest and its revision marker from the integration branch.

    Content and sha come from the same response, so the later write is
    conditioned on exactly the revision that was parsed.
    """
    path = cfg.manifest_path
    branch = cfg.integration_branch
    obj = gh_object(
        client,
        "GET",
        repo_path(cfg, f"contents/{path}"),
        params={"ref": branch},
        message=f"failed to read {path} on {branch}",
    )
    if isinstance(obj, Err):
        return obj

    data = obj.value
    sha = get_str(data, "sha")
    content = get_str(data, "content")
    if sha is None or content is None or get_str(data, "encoding") != "base64":
        return Err(invalid_response(f"unexpected contents payload for {path}"))

    decoded = _decode_content(content, path=path)
    if isinstance(decoded, Err):
        return decoded

    manifest = Manifest(path=path, branch=branch, sha=sha, data=decoded.value)
    if not manifest.version:
        return Err(
            ReleaseError(
                kind="validation",
                message=f"{path} has no string 'version' field",
            )
        )
    return Ok(manifest)


def fetch_revision(client: HttpClient, cfg: ReleaseConfig) -> Result[str, ReleaseError]:
    return fetch_manifest(client, cfg).map(lambda m: m.sha)


def render_manifest(data: dict[str, object], version: str) -> str:
    """Serialize the manifest with ``version`` replaced.

    Key order is preserved and indentation fixed so the commit diff is a
    single line.
    """
    updated = dict(data)
    updated["version"] = version
    return json.dumps(updated, indent=2, ensure_ascii=False) + "\n"


def write_manifest(
    client: HttpClient,
    cfg: ReleaseConfig,
    manifest: Manifest,
    version: str,
) -> Result[str, ReleaseError]:
    """Commit the bumped manifest and return the new commit sha.

    The write carries the revision marker read earlier; a stale marker is a
    conflict and is never retried.
    """
    text = render_manifest(manifest.data, version)
    obj = gh_object(
        client,
        "PUT",
        repo_path(cfg, f"contents/{manifest.path}"),
        body={
            "message": f"Bump version to {version}",
            "content": base64.b64encode(text.encode("utf-8")).decode("ascii"),
            "sha": manifest.sha,
            "branch": manifest.branch,
        },
        message=f"failed to write {manifest.path} on {manifest.branch}",
        conflict_message=(
            f"{manifest.path} changed on {manifest.branch} since revision {manifest.sha[:8]}"
        ),
    )
    if isinstance(obj, Err):
        return obj

    commit = get_table(obj.value, "commit")
    sha = get_str(commit, "sha") if commit is not None else None
    if sha is None:
        return Err(invalid_response(f"missing commit sha after writing {manifest.path}"))
    return Ok(sha)


def last_manifest_commit(client: HttpClient, cfg: ReleaseConfig) -> Result[str, ReleaseError]:
    """Sha of the most recent commit touching the manifest on the integration branch."""
    items = gh_list(
        client,
        repo_path(cfg, "commits"),
        params={"path": cfg.manifest_path, "sha": cfg.integration_branch, "per_page": 1},
        message=f"failed to list commits for {cfg.manifest_path}",
    )
    if isinstance(items, Err):
        return items

    for item in items.value:
        d = as_str_dict(item)
        sha = get_str(d, "sha") if d is not None else None
        if sha is not None:
            return Ok(sha)
    return Err(
        ReleaseError(
            kind="not_found",
            message=f"no commit touches {cfg.manifest_path} on {cfg.integration_branch}",
        )
    )
