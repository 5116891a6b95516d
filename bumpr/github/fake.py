"""Route presets that make MockHttpClient behave like one GitHub repository.

Used by the service and CLI tests; every method registers the payload shape
the REST API returns for that endpoint.
"""

from __future__ import annotations

import base64
import json
from dataclasses import dataclass, field

from bumpr.github.http import MockHttpClient

__all__ = ["FakeRepository", "pull_request_item"]


def pull_request_item(
    number: int,
    title: str,
    merged_at: str | None,
    *,
    owner: str = "acme",
    repo: str = "widgets",
) -> dict[str, object]:
    """A closed pull request as listed by ``GET /pulls``."""
    return {
        "number": number,
        "title": title,
        "html_url": f"https://github.com/{owner}/{repo}/pull/{number}",
        "state": "closed",
        "merged_at": merged_at,
    }


@dataclass
class FakeRepository:
    owner: str = "acme"
    repo: str = "widgets"
    client: MockHttpClient = field(default_factory=MockHttpClient)

    @property
    def base(self) -> str:
        return f"/repos/{self.owner}/{self.repo}"

    def path(self, suffix: str) -> str:
        return f"{self.base}/{suffix}"

    # Reads

    def manifest(
        self,
        data: dict[str, object],
        *,
        sha: str = "blob-sha-1",
        path: str = "package.json",
    ) -> None:
        content = base64.b64encode(json.dumps(data).encode("utf-8")).decode("ascii")
        self.client.set_json(
            "GET",
            self.path(f"contents/{path}"),
            {"type": "file", "path": path, "sha": sha, "encoding": "base64", "content": content},
        )

    def tags(self, *tags: tuple[str, str]) -> None:
        """Register the tag listing; pass (name, commit sha) pairs, most recent first."""
        self.client.set_json(
            "GET",
            self.path("tags"),
            [{"name": name, "commit": {"sha": sha}} for name, sha in tags],
        )

    def commit(self, sha: str, author_date: str) -> None:
        self.client.set_json(
            "GET",
            self.path(f"commits/{sha}"),
            {"sha": sha, "commit": {"author": {"date": author_date}}},
        )

    def manifest_history(self, *shas: str) -> None:
        self.client.set_json("GET", self.path("commits"), [{"sha": sha} for sha in shas])

    def branch(self, name: str, sha: str) -> None:
        self.client.set_json(
            "GET",
            self.path(f"git/ref/heads/{name}"),
            {"ref": f"refs/heads/{name}", "object": {"type": "commit", "sha": sha}},
        )

    def pulls(self, items: list[dict[str, object]], *, page: int = 1) -> None:
        self.client.set_json("GET", self.path("pulls"), items, params={"page": page})

    # Writes

    def accept_manifest_write(self, commit_sha: str, *, path: str = "package.json") -> None:
        self.client.set_json(
            "PUT",
            self.path(f"contents/{path}"),
            {"content": {"path": path, "sha": "blob-sha-2"}, "commit": {"sha": commit_sha}},
        )

    def accept_tag_object(self, object_sha: str) -> None:
        self.client.set_json("POST", self.path("git/tags"), {"sha": object_sha})

    def accept_refs(self) -> None:
        self.client.set_json("POST", self.path("git/refs"), {"ref": "ok", "object": {}})

    def accept_pull_request(self, number: int = 42) -> str:
        url = f"https://github.com/{self.owner}/{self.repo}/pull/{number}"
        self.client.set_json("POST", self.path("pulls"), {"number": number, "html_url": url})
        return url

    def reject(self, method: str, suffix: str, status: int, message: str) -> None:
        self.client.set_error(method, self.path(suffix), status, message)
