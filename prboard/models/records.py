"""Normalized records written by the refresh pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

PRS_COLLECTION = "prs"
METADATA_COLLECTION = "metadata"
METADATA_DOC_ID = "system"


def build_record_id(repo_name: str, number: int | str) -> str:
    """Stable document id for a pull request: `{repo}-{number}`."""
    return f"{repo_name}-{number}"


@dataclass(frozen=True)
class PullRequestRecord:
    """One open, non-draft pull request with its approval snapshot."""

    id: str
    title: str
    repo: str
    author: str
    url: str
    updated_at: str
    approvals: int

    def to_document(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RefreshMetadata:
    """Singleton `metadata/system` document."""

    lastRefresh: str
    lastRefreshCount: int

    def to_document(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> "RefreshMetadata":
        return cls(
            lastRefresh=str(data.get("lastRefresh") or ""),
            lastRefreshCount=int(data.get("lastRefreshCount") or 0),
        )
