from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer

from bumpr.core.config import ReleaseConfig, load_config_or_default
from bumpr.core.errors import ErrorCode
from bumpr.core.result import Err
from bumpr.github.http import HttpClient, RealHttpClient
from bumpr.output.console import ConsoleProtocol, RichConsole
from bumpr.output.errors import print_config_error


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: ReleaseConfig
    client: HttpClient
    console: ConsoleProtocol


def build_client(config: ReleaseConfig) -> HttpClient:
    # A missing token is not an error here; the API answers 401 and that is reported.
    token = os.environ.get(config.token_env) or None
    return RealHttpClient(base_url=config.api_url, token=token, timeout=config.timeout)


def build_context(
    *,
    config_path: Path,
    owner: str | None = None,
    repo: str | None = None,
) -> CLIContext:
    console = RichConsole()

    loaded = load_config_or_default(config_path)
    if isinstance(loaded, Err):
        print_config_error(loaded.error, console)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    validated = loaded.value.with_overrides(owner=owner, repo=repo).validate()
    if isinstance(validated, Err):
        print_config_error(validated.error, console)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    config = validated.value
    return CLIContext(config=config, client=build_client(config), console=console)
