from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from bumpr import __version__
from bumpr.cli.app import app
from bumpr.core.config import ReleaseConfig
from bumpr.core.errors import ErrorCode
from bumpr.github.fake import FakeRepository, pull_request_item
from bumpr.github.http import HttpClient

runner = CliRunner()


@pytest.fixture(autouse=True)
def _wide_terminal(monkeypatch: pytest.MonkeyPatch) -> None:
    # Rich wraps at 80 columns when not attached to a terminal.
    monkeypatch.setenv("COLUMNS", "200")


def _write_config(tmp_path: Path) -> Path:
    path = tmp_path / "bumpr.toml"
    path.write_text(
        '[release]\nowner = "acme"\nrepo = "widgets"\nhead_strategy = "integration"\n',
        encoding="utf-8",
    )
    return path


def _use_repository(monkeypatch: pytest.MonkeyPatch, repo: FakeRepository) -> None:
    import bumpr.cli.context as context_mod

    def fake_build_client(config: ReleaseConfig) -> HttpClient:
        del config
        return repo.client

    monkeypatch.setattr(context_mod, "build_client", fake_build_client)


def _released_repo() -> FakeRepository:
    repo = FakeRepository()
    repo.tags(("v1.2.3", "c0"))
    repo.commit("c0", "2024-01-10T12:00:00Z")
    repo.manifest({"name": "widgets", "version": "1.2.3"})
    repo.pulls([pull_request_item(7, "Add feature X", "2024-01-10T12:05:00Z")])
    return repo


def test_version_option() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_missing_bump_argument_is_usage_error() -> None:
    result = runner.invoke(app, ["release"])
    assert result.exit_code == 2


def test_invalid_bump_kind_exits_before_any_request(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    repo = _released_repo()
    _use_repository(monkeypatch, repo)

    result = runner.invoke(app, ["release", "foo", "--config", str(_write_config(tmp_path))])

    assert result.exit_code == int(ErrorCode.USER_ERROR)
    assert "foo is not valid, must be one of the following: major, minor, patch" in result.output
    assert repo.client.calls == []


def test_release_prints_pull_request_url(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    repo = _released_repo()
    repo.accept_manifest_write("c1")
    repo.accept_tag_object("t1")
    repo.accept_refs()
    url = repo.accept_pull_request()
    _use_repository(monkeypatch, repo)

    result = runner.invoke(app, ["release", "patch", "-c", str(_write_config(tmp_path))])

    assert result.exit_code == 0, result.output
    assert "released v1.2.4" in result.output
    assert url in result.output


def test_release_conflict_exit_code(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    repo = _released_repo()
    repo.reject("PUT", "contents/package.json", 409, "does not match")
    _use_repository(monkeypatch, repo)

    result = runner.invoke(app, ["release", "patch", "-c", str(_write_config(tmp_path))])

    assert result.exit_code == int(ErrorCode.CONFLICT)
    assert "write_manifest" in result.output


def test_owner_and_repo_flags_without_config(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    repo = _released_repo()
    _use_repository(monkeypatch, repo)

    result = runner.invoke(
        app,
        [
            "release",
            "minor",
            "--dry-run",
            "-c",
            str(tmp_path / "missing.toml"),
            "--owner",
            "acme",
            "--repo",
            "widgets",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "dry-run complete for v1.3.0" in result.output
    assert "- Add feature X: https://github.com/acme/widgets/pull/7" in result.output
    assert repo.client.mutating_calls == []


def test_missing_owner_is_user_error(tmp_path: Path) -> None:
    result = runner.invoke(app, ["release", "patch", "-c", str(tmp_path / "missing.toml")])
    assert result.exit_code == int(ErrorCode.USER_ERROR)
    assert "owner and repo are required" in result.output


def test_notes_command(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    repo = _released_repo()
    _use_repository(monkeypatch, repo)

    result = runner.invoke(app, ["notes", "-c", str(_write_config(tmp_path))])

    assert result.exit_code == 0, result.output
    assert "since v1.2.3" in result.output
    assert "# Change log" in result.output
    assert repo.client.mutating_calls == []


def test_pr_command(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    repo = FakeRepository()
    repo.tags(("v1.2.4", "c1"), ("v1.2.3", "c0"))
    repo.commit("c0", "2024-01-10T12:00:00Z")
    repo.pulls([])
    url = repo.accept_pull_request()
    _use_repository(monkeypatch, repo)

    result = runner.invoke(app, ["pr", "-c", str(_write_config(tmp_path))])

    assert result.exit_code == 0, result.output
    assert url in result.output
