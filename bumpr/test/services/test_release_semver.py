from __future__ import annotations

import pytest

from bumpr.core.result import Err, Ok
from bumpr.services.release.semver import (
    BUMP_KINDS,
    SemVer,
    parse_bump_kind,
    parse_version,
    resolve_next_version,
)


@pytest.mark.parametrize(
    ("current", "kind", "expected"),
    [
        ("1.2.3", "patch", "1.2.4"),
        ("1.2.3", "minor", "1.3.0"),
        ("1.2.3", "major", "2.0.0"),
        ("0.9.9", "minor", "0.10.0"),
        ("v1.2.3", "patch", "1.2.4"),
        ("1.2.3-beta.1", "patch", "1.2.3"),
        ("1.2.3+build.5", "major", "2.0.0"),
    ],
)
def test_resolve_next_version(current: str, kind: str, expected: str) -> None:
    assert resolve_next_version(current, kind) == Ok(expected)


def test_bump_kind_is_case_insensitive() -> None:
    assert parse_bump_kind(" Minor ") == Ok("minor")


def test_invalid_bump_kind_message_lists_the_choices() -> None:
    result = parse_bump_kind("foo")
    assert isinstance(result, Err)
    assert result.error.kind == "validation"
    assert result.error.message == (
        "foo is not valid, must be one of the following: major, minor, patch"
    )


def test_invalid_kind_is_reported_before_invalid_version() -> None:
    result = resolve_next_version("garbage", "huge")
    assert isinstance(result, Err)
    assert "huge is not valid" in result.error.message


def test_invalid_current_version() -> None:
    result = resolve_next_version("1.2", "patch")
    assert isinstance(result, Err)
    assert result.error.kind == "validation"


@pytest.mark.parametrize("text", ["", "1", "1.2", "01.2.3", "1.2.3.4", "latest", "v"])
def test_parse_version_rejects(text: str) -> None:
    assert parse_version(text) is None


def test_parse_version_parts() -> None:
    v = parse_version("v2.0.0-rc.1+sha.abc")
    assert v == SemVer(2, 0, 0, "rc.1", "sha.abc")
    assert v is not None and str(v) == "2.0.0-rc.1+sha.abc"
    assert v.to_tag() == "v2.0.0-rc.1+sha.abc"


def test_prerelease_sorts_before_release() -> None:
    assert SemVer(1, 0, 0, "rc.1") < SemVer(1, 0, 0)
    assert SemVer(1, 0, 0) < SemVer(1, 0, 1, "alpha")
    assert SemVer(1, 10, 0) > SemVer(1, 9, 9)


@pytest.mark.parametrize(
    ("current", "kind", "expected"),
    [
        ("1.2.4-beta", "patch", "1.2.4"),
        ("1.3.0-rc.1", "minor", "1.3.0"),
        ("2.0.0-alpha.3", "major", "2.0.0"),
        ("1.2.4-beta", "minor", "1.3.0"),
        ("1.3.0-rc.1", "major", "2.0.0"),
        ("2.0.0-alpha.3", "minor", "2.0.0"),
        ("2.0.0-alpha.3", "patch", "2.0.0"),
        ("1.2.4-beta+build.7", "patch", "1.2.4"),
    ],
)
def test_prerelease_is_promoted_to_the_release_it_leads_up_to(
    current: str, kind: str, expected: str
) -> None:
    assert resolve_next_version(current, kind) == Ok(expected)


def test_bump_always_increases() -> None:
    for text in ("1.2.4-beta", "1.3.0-rc.1", "2.0.0-alpha", "1.2.3"):
        version = parse_version(text)
        assert version is not None
        for kind in BUMP_KINDS:
            assert version.bump(kind) > version
