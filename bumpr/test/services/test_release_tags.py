from __future__ import annotations

from bumpr.core.config import ReleaseConfig
from bumpr.core.result import Err, Ok
from bumpr.github.fake import FakeRepository
from bumpr.services.release.semver import SemVer
from bumpr.services.release.tags import create_tag, latest_tag, recent_tags

CFG = ReleaseConfig(owner="acme", repo="widgets")


def test_latest_tag_skips_non_version_tags() -> None:
    repo = FakeRepository()
    repo.tags(("nightly", "n0"), ("v1.2.3", "c0"), ("v1.2.2", "b0"))

    result = latest_tag(repo.client, CFG)

    assert isinstance(result, Ok)
    assert result.value is not None
    assert result.value.name == "v1.2.3"
    assert result.value.commit_sha == "c0"
    assert result.value.version == SemVer(1, 2, 3)


def test_latest_tag_none_when_repository_has_no_tags() -> None:
    repo = FakeRepository()
    repo.tags()
    assert latest_tag(repo.client, CFG) == Ok(None)


def test_recent_tags_limit() -> None:
    repo = FakeRepository()
    repo.tags(("v3.0.0", "c3"), ("v2.0.0", "c2"), ("v1.0.0", "c1"))

    result = recent_tags(repo.client, CFG, limit=2)

    assert isinstance(result, Ok)
    assert [t.name for t in result.value] == ["v3.0.0", "v2.0.0"]


def test_tag_listing_failure_is_auth_error() -> None:
    repo = FakeRepository()
    repo.reject("GET", "tags", 401, "Bad credentials")

    result = latest_tag(repo.client, CFG)

    assert isinstance(result, Err)
    assert result.error.kind == "auth"


def test_create_tag_creates_object_then_ref() -> None:
    repo = FakeRepository()
    repo.accept_tag_object("tag-obj-1")
    repo.accept_refs()

    result = create_tag(repo.client, CFG, "c1", "1.2.4")

    assert isinstance(result, Ok)
    assert result.value.name == "v1.2.4"
    assert result.value.ref == "refs/tags/v1.2.4"
    assert result.value.object_sha == "tag-obj-1"

    tag_call, ref_call = repo.client.mutating_calls
    assert tag_call.path == repo.path("git/tags")
    assert tag_call.body == {
        "tag": "v1.2.4",
        "message": "v1.2.4",
        "object": "c1",
        "type": "commit",
    }
    assert ref_call.path == repo.path("git/refs")
    assert ref_call.body == {"ref": "refs/tags/v1.2.4", "sha": "tag-obj-1"}


def test_existing_tag_is_conflict_and_never_moved() -> None:
    repo = FakeRepository()
    repo.accept_tag_object("tag-obj-1")
    repo.reject("POST", "git/refs", 422, "Reference already exists")

    result = create_tag(repo.client, CFG, "c1", "1.2.4")

    assert isinstance(result, Err)
    assert result.error.kind == "conflict"
    assert result.error.message == "tag v1.2.4 already exists"
    assert repo.client.calls_to("PATCH") == []
    assert repo.client.calls_to("DELETE") == []
