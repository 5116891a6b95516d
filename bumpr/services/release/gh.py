from __future__ import annotations

from collections.abc import Mapping

from bumpr.core.config import ReleaseConfig
from bumpr.core.result import Err, Ok, Result
from bumpr.core.structured import StrDict, as_obj_list, as_str_dict
from bumpr.github.http import HttpClient, Params
from bumpr.services.release.errors import (
    ReleaseError,
    invalid_response,
    release_error_from_http,
)


def repo_path(cfg: ReleaseConfig, suffix: str) -> str:
    return f"/repos/{cfg.owner}/{cfg.repo}/{suffix.lstrip('/')}"


def gh_call(
    client: HttpClient,
    method: str,
    path: str,
    *,
    message: str,
    conflict_message: str | None = None,
    params: Params | None = None,
    body: Mapping[str, object] | None = None,
) -> Result[object, ReleaseError]:
    result = client.request_json(method, path, params=params, body=body)
    if isinstance(result, Err):
        return Err(
            release_error_from_http(
                result.error,
                message=message,
                conflict_message=conflict_message,
            )
        )
    return Ok(result.value)


def gh_object(
    client: HttpClient,
    method: str,
    path: str,
    *,
    message: str,
    conflict_message: str | None = None,
    params: Params | None = None,
    body: Mapping[str, object] | None = None,
) -> Result[StrDict, ReleaseError]:
    """Like ``gh_call`` but the response must be a JSON object."""
    result = gh_call(
        client,
        method,
        path,
        message=message,
        conflict_message=conflict_message,
        params=params,
        body=body,
    )
    if isinstance(result, Err):
        return result

    data = as_str_dict(result.value)
    if data is None:
        return Err(invalid_response(f"unexpected payload: {method} {path}"))
    return Ok(data)


def gh_list(
    client: HttpClient,
    path: str,
    *,
    message: str,
    params: Params | None = None,
) -> Result[list[object], ReleaseError]:
    """GET a JSON array."""
    result = gh_call(client, "GET", path, message=message, params=params)
    if isinstance(result, Err):
        return result

    items = as_obj_list(result.value)
    if items is None:
        return Err(invalid_response(f"expected a list: GET {path}"))
    return Ok(items)
