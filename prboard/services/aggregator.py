"""Turn organization repositories, pull requests and reviews into approval records."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Protocol, Sequence

from prboard.models.records import PullRequestRecord, build_record_id

logger = logging.getLogger(__name__)

APPROVED_STATE = "APPROVED"


class PullRequestSource(Protocol):
    async def list_repositories(self, org: str) -> list[dict[str, Any]]: ...

    async def list_open_pull_requests(self, org: str, repo: str) -> list[dict[str, Any]]: ...

    async def list_reviews(self, org: str, repo: str, number: int) -> list[dict[str, Any]]: ...


def is_draft(pull: dict[str, Any]) -> bool:
    return pull.get("draft") is True


def count_approvals(reviews: Iterable[dict[str, Any]]) -> int:
    """Number of reviews in state `APPROVED`.

    Exact, case-sensitive match. Repeated approvals by one reviewer each count.
    """
    return sum(1 for review in reviews if review.get("state") == APPROVED_STATE)


def build_record(*, org: str, repo_name: str, pull: dict[str, Any], approvals: int) -> PullRequestRecord:
    """Map a GitHub pull request payload to a `PullRequestRecord`.

    Missing fields raise `KeyError`/`TypeError`; a malformed payload aborts the refresh.
    """
    number = pull["number"]
    return PullRequestRecord(
        id=build_record_id(repo_name, number),
        title=pull["title"],
        repo=f"{org}/{repo_name}",
        author=pull["user"]["login"],
        url=pull["html_url"],
        updated_at=pull["updated_at"],
        approvals=approvals,
    )


def sort_by_approvals(records: Sequence[PullRequestRecord]) -> list[PullRequestRecord]:
    # sorted() is stable: ties keep repository order, then pull request order
    return sorted(records, key=lambda record: record.approvals)


async def aggregate_pull_requests(client: PullRequestSource, org: str) -> list[PullRequestRecord]:
    """Fetch every open, non-draft pull request of `org` with its approval count.

    Calls are strictly sequential. Drafts are dropped before their reviews are
    requested. The result is sorted ascending by approvals.
    """
    records: list[PullRequestRecord] = []

    repositories = await client.list_repositories(org)
    logger.info(f"Found {len(repositories)} repositories in {org}")

    for repo in repositories:
        repo_name = repo["name"]
        pulls = await client.list_open_pull_requests(org, repo_name)
        if not pulls:
            continue

        for pull in pulls:
            if is_draft(pull):
                continue
            reviews = await client.list_reviews(org, repo_name, pull["number"])
            records.append(
                build_record(
                    org=org,
                    repo_name=repo_name,
                    pull=pull,
                    approvals=count_approvals(reviews),
                )
            )

    logger.info(f"Aggregated {len(records)} open pull requests for {org}")
    return sort_by_approvals(records)
