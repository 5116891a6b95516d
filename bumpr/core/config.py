"""Typed release configuration.

The target repository and its branch topology are read from a TOML file
(``bumpr.toml`` by default) with a single ``[release]`` table:

    [release]
    owner = "acme"
    repo = "widgets"
    integration_branch = "main"
    release_branch = "release"
    manifest_path = "package.json"

Everything except ``owner`` and ``repo`` has a default.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path
from typing import Literal

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_float, get_int, get_str, get_table

__all__ = [
    "ReleaseConfig",
    "ConfigError",
    "HeadStrategy",
    "load_config",
    "load_config_or_default",
    "parse_timestamp",
    "DEFAULT_CONFIG_FILE",
    "DEFAULT_API_URL",
    "DEFAULT_LEGACY_EPOCH",
]

HeadStrategy = Literal["snapshot", "integration"]

DEFAULT_CONFIG_FILE = "bumpr.toml"
DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TOKEN_ENV = "GITHUB_TOKEN"
DEFAULT_LEGACY_EPOCH = "1970-01-01T00:00:00Z"
DEFAULT_RELEASE_MARKER = "Release: "
DEFAULT_TIMEOUT_SECONDS = 60.0
DEFAULT_MAX_PAGES = 10

_HEAD_STRATEGIES: tuple[HeadStrategy, ...] = ("snapshot", "integration")


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or is invalid."""

    message: str
    path: Path | None = None


def parse_timestamp(text: str) -> datetime | None:
    """Parse an ISO-8601 timestamp as returned by the REST API.

    Naive values are rejected; every timestamp in the workflow is compared
    against timezone-aware API timestamps.
    """
    try:
        value = datetime.fromisoformat(text.strip())
    except ValueError:
        return None
    if value.tzinfo is None:
        return None
    return value


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Everything the release workflow needs to know about its target."""

    owner: str = ""
    repo: str = ""
    integration_branch: str = "main"
    release_branch: str = "release"
    release_marker_prefix: str = DEFAULT_RELEASE_MARKER
    legacy_epoch: str = DEFAULT_LEGACY_EPOCH
    manifest_path: str = "package.json"
    api_url: str = DEFAULT_API_URL
    token_env: str = DEFAULT_TOKEN_ENV
    head_strategy: HeadStrategy = "snapshot"
    max_pages: int = DEFAULT_MAX_PAGES
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def epoch(self) -> datetime:
        """The legacy epoch as a datetime (validated by ``validate``)."""
        parsed = parse_timestamp(self.legacy_epoch)
        if parsed is None:
            raise ValueError(f"invalid legacy_epoch: {self.legacy_epoch}")
        return parsed

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ReleaseConfig:
        """Create a config from a parsed TOML document."""
        release: StrDict = get_table(data, "release") or {}
        defaults = cls()

        head = get_str(release, "head_strategy") or defaults.head_strategy
        if head not in _HEAD_STRATEGIES:
            raise ValueError(f"head_strategy must be one of {', '.join(_HEAD_STRATEGIES)}")

        # The marker prefix keeps its trailing space, so it is not stripped.
        marker = release.get("release_marker_prefix")
        if not isinstance(marker, str) or not marker.strip():
            marker = defaults.release_marker_prefix

        max_pages = get_int(release, "max_pages")
        timeout = get_float(release, "timeout")

        return cls(
            owner=get_str(release, "owner") or "",
            repo=get_str(release, "repo") or "",
            integration_branch=get_str(release, "integration_branch")
            or defaults.integration_branch,
            release_branch=get_str(release, "release_branch") or defaults.release_branch,
            release_marker_prefix=marker,
            legacy_epoch=get_str(release, "legacy_epoch") or defaults.legacy_epoch,
            manifest_path=get_str(release, "manifest_path") or defaults.manifest_path,
            api_url=(get_str(release, "api_url") or defaults.api_url).rstrip("/"),
            token_env=get_str(release, "token_env") or defaults.token_env,
            head_strategy="integration" if head == "integration" else "snapshot",
            max_pages=defaults.max_pages if max_pages is None else max_pages,
            timeout=defaults.timeout if timeout is None else timeout,
        )

    def with_overrides(self, *, owner: str | None = None, repo: str | None = None) -> ReleaseConfig:
        """Return a copy with command-line overrides applied."""
        changes: dict[str, str] = {}
        if owner:
            changes["owner"] = owner.strip()
        if repo:
            changes["repo"] = repo.strip()
        return replace(self, **changes) if changes else self

    def validate(self) -> Result[ReleaseConfig, ConfigError]:
        if not self.owner or not self.repo:
            return Err(
                ConfigError("owner and repo are required (set [release] or pass --owner/--repo)")
            )
        if parse_timestamp(self.legacy_epoch) is None:
            return Err(
                ConfigError(
                    f"legacy_epoch is not an ISO-8601 timestamp with offset: {self.legacy_epoch}"
                )
            )
        if self.max_pages < 1:
            return Err(ConfigError("max_pages must be at least 1"))
        if self.timeout <= 0:
            return Err(ConfigError("timeout must be positive"))
        if self.integration_branch == self.release_branch:
            return Err(ConfigError("integration_branch and release_branch must differ"))
        return Ok(self)


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and syntax errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load configuration from a TOML file.

    The result is not validated; call ``validate()`` once command-line
    overrides have been applied.

    Args:
        path: Path to the TOML file

    Returns:
        Ok(ReleaseConfig) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(ReleaseConfig.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[ReleaseConfig, ConfigError]:
    """Like ``load_config`` but a missing file yields the defaults.

    A present but broken file is still an error.
    """
    if not path.exists():
        return Ok(ReleaseConfig())
    return load_config(path)
