from __future__ import annotations

from datetime import UTC, datetime, timedelta

from bumpr.core.config import ReleaseConfig
from bumpr.core.result import Err, Ok
from bumpr.github.fake import FakeRepository, pull_request_item
from bumpr.services.release.history import (
    filter_merged_since,
    list_closed_pull_requests,
    read_history,
)
from bumpr.services.release.model import LatestTag
from bumpr.services.release.semver import SemVer

CFG = ReleaseConfig(owner="acme", repo="widgets")
T = datetime(2024, 1, 10, 12, 0, tzinfo=UTC)


def _iso(value: datetime) -> str:
    return value.isoformat().replace("+00:00", "Z")


def test_filter_keeps_strictly_later_merges_in_listing_order() -> None:
    items = [
        pull_request_item(5, "Later", _iso(T + timedelta(minutes=5))),
        pull_request_item(4, "At the tag", _iso(T)),
        pull_request_item(3, "Earlier", _iso(T - timedelta(minutes=10))),
        pull_request_item(2, "Also later", _iso(T + timedelta(days=1))),
    ]

    prs = filter_merged_since(items, T, "Release: ")

    assert [pr.number for pr in prs] == [5, 2]


def test_filter_drops_unmerged_and_release_pull_requests() -> None:
    items = [
        pull_request_item(8, "Closed without merge", None),
        pull_request_item(7, "Release: v1.2.3", _iso(T + timedelta(hours=1))),
        pull_request_item(6, "Add feature X", _iso(T + timedelta(hours=2))),
    ]

    prs = filter_merged_since(items, T, "Release: ")

    assert [pr.title for pr in prs] == ["Add feature X"]


def test_list_closed_pull_requests_query() -> None:
    repo = FakeRepository()
    repo.pulls([])

    assert list_closed_pull_requests(repo.client, CFG) == Ok([])

    (call,) = repo.client.calls
    assert call.params == {
        "state": "closed",
        "base": "main",
        "sort": "updated",
        "direction": "desc",
        "per_page": "100",
        "page": "1",
    }


def test_list_closed_pull_requests_follows_full_pages() -> None:
    repo = FakeRepository()
    repo.pulls([pull_request_item(n, f"PR {n}", None) for n in range(100)], page=1)
    repo.pulls([pull_request_item(100, "last", None)], page=2)

    result = list_closed_pull_requests(repo.client, CFG)

    assert isinstance(result, Ok)
    assert len(result.value) == 101
    assert len(repo.client.calls) == 2


def test_list_closed_pull_requests_stops_at_max_pages() -> None:
    repo = FakeRepository()
    full = [pull_request_item(n, f"PR {n}", None) for n in range(100)]
    repo.client.set_json("GET", repo.path("pulls"), full)
    cfg = ReleaseConfig(owner="acme", repo="widgets", max_pages=3)

    result = list_closed_pull_requests(repo.client, cfg)

    assert isinstance(result, Ok)
    assert len(repo.client.calls) == 3


def test_read_history_since_previous_tag() -> None:
    repo = FakeRepository()
    repo.commit("c0", _iso(T))
    repo.pulls(
        [
            pull_request_item(2, "New", _iso(T + timedelta(minutes=5))),
            pull_request_item(1, "Old", _iso(T - timedelta(minutes=10))),
        ]
    )
    previous = LatestTag(name="v1.2.3", commit_sha="c0", version=SemVer(1, 2, 3))

    result = read_history(repo.client, CFG, previous)

    assert isinstance(result, Ok)
    assert result.value.last_release_at == T
    assert [pr.title for pr in result.value.pull_requests] == ["New"]


def test_read_history_without_tag_uses_legacy_epoch() -> None:
    repo = FakeRepository()
    repo.pulls([pull_request_item(1, "Initial import", "2010-05-01T00:00:00Z")])

    result = read_history(repo.client, CFG, None)

    assert isinstance(result, Ok)
    assert result.value.last_release_at == CFG.epoch
    assert len(result.value.pull_requests) == 1
    assert repo.client.calls_to("GET", repo.path("pulls"))
    assert not [c for c in repo.client.calls if "/commits/" in c.path]


def test_read_history_fails_when_listing_fails() -> None:
    repo = FakeRepository()
    repo.commit("c0", _iso(T))
    repo.reject("GET", "pulls", 502, "Bad Gateway")
    previous = LatestTag(name="v1.2.3", commit_sha="c0", version=SemVer(1, 2, 3))

    result = read_history(repo.client, CFG, previous)

    assert isinstance(result, Err)
    assert result.error.kind == "transport"
