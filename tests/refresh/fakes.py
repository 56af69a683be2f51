from __future__ import annotations

from typing import Any

from prboard.crawlers.github_client import GitHubAPIError


def make_pull(number: int, *, title: str | None = None, draft: bool = False, login: str = "octocat") -> dict[str, Any]:
    return {
        "number": number,
        "title": title or f"PR {number}",
        "draft": draft,
        "html_url": f"https://github.com/acme/repo/pull/{number}",
        "updated_at": f"2024-05-{number:02d}T10:00:00Z",
        "user": {"login": login},
    }


def make_reviews(*states: str) -> list[dict[str, Any]]:
    return [{"id": index, "state": state} for index, state in enumerate(states, start=1)]


class FakeGitHubClient:
    def __init__(
        self,
        *,
        repos: list[dict[str, Any]] | None = None,
        pulls: dict[str, list[dict[str, Any]] | None] | None = None,
        reviews: dict[tuple[str, int], list[dict[str, Any]]] | None = None,
        fail_repositories: bool = False,
    ) -> None:
        self.repos = repos or []
        self.pulls = pulls or {}
        self.reviews = reviews or {}
        self.fail_repositories = fail_repositories
        self.calls: list[tuple[Any, ...]] = []
        self.truncation_warnings: list[Any] = []

    async def __aenter__(self) -> "FakeGitHubClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        del exc_type, exc, tb

    async def list_repositories(self, org: str) -> list[dict[str, Any]]:
        self.calls.append(("repos", org))
        if self.fail_repositories:
            raise GitHubAPIError("connection refused", path=f"/orgs/{org}/repos")
        return self.repos

    async def list_open_pull_requests(self, org: str, repo: str) -> list[dict[str, Any]]:
        self.calls.append(("pulls", org, repo))
        return self.pulls.get(repo) or []

    async def list_reviews(self, org: str, repo: str, number: int) -> list[dict[str, Any]]:
        self.calls.append(("reviews", org, repo, number))
        return self.reviews.get((repo, number), [])

    def review_calls(self) -> list[tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == "reviews"]


class FakeStore:
    def __init__(self) -> None:
        self.documents: dict[tuple[str, str], dict[str, Any]] = {}
        self.fail_ids: set[str] = set()
        self.writes: list[tuple[str, str]] = []

    def set_document(self, collection: str, doc_id: str, data: dict[str, Any]) -> dict[str, Any]:
        if doc_id in self.fail_ids:
            raise RuntimeError(f"write rejected for {doc_id}")
        self.writes.append((collection, doc_id))
        existing = self.documents.get((collection, doc_id), {})
        stored = {**existing, **data}
        self.documents[(collection, doc_id)] = stored
        return stored

    def get_document(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        found = self.documents.get((collection, doc_id))
        return dict(found) if found is not None else None

    def list_documents(self, collection: str) -> list[dict[str, Any]]:
        return [
            {**data, "id": doc_id}
            for (name, doc_id), data in sorted(self.documents.items())
            if name == collection
        ]
