"""Read model for the dashboard view: sorting, priority badges, refresh label."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Optional

from prboard.models.records import METADATA_COLLECTION, METADATA_DOC_ID, PRS_COLLECTION, RefreshMetadata

SORT_APPROVALS = "approvals"
SORT_UPDATED = "updated"
SORT_TITLE = "title"

SORT_MODES = (SORT_APPROVALS, SORT_UPDATED, SORT_TITLE)


def _parse_timestamp(raw: Any) -> Optional[datetime]:
    if not raw:
        return None
    try:
        parsed = datetime.fromisoformat(str(raw))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def priority_for(approvals: int | None) -> str:
    approvals = approvals or 0
    if approvals == 0:
        return "high"
    if approvals <= 2:
        return "medium"
    return "low"


def badge_for(approvals: int | None) -> str:
    approvals = approvals or 0
    if approvals == 0:
        return "red"
    if approvals == 1:
        return "yellow"
    return "green"


def sort_pull_requests(items: list[dict[str, Any]], sort_by: str = SORT_APPROVALS) -> list[dict[str, Any]]:
    """Order documents the way the dashboard sort selector does.

    `approvals` ascending, `updated` newest first (undated last), `title` alphabetical.
    """
    if sort_by == SORT_APPROVALS:
        return sorted(items, key=lambda item: item.get("approvals") or 0)
    if sort_by == SORT_UPDATED:
        dated = [item for item in items if _parse_timestamp(item.get("updated_at"))]
        undated = [item for item in items if not _parse_timestamp(item.get("updated_at"))]
        dated.sort(key=lambda item: _parse_timestamp(item.get("updated_at")), reverse=True)
        return dated + undated
    if sort_by == SORT_TITLE:
        return sorted(items, key=lambda item: (item.get("title") or "").casefold())
    raise ValueError(f"Unknown sort mode: {sort_by}")


def list_pull_requests(store: Any, sort_by: str = SORT_APPROVALS) -> list[dict[str, Any]]:
    items = sort_pull_requests(store.list_documents(PRS_COLLECTION), sort_by)
    return [
        {**item, "priority": priority_for(item.get("approvals")), "badge": badge_for(item.get("approvals"))}
        for item in items
    ]


def get_refresh_metadata(store: Any) -> Optional[RefreshMetadata]:
    data = store.get_document(METADATA_COLLECTION, METADATA_DOC_ID)
    return RefreshMetadata.from_document(data) if data else None


def format_last_refresh(raw: Any, now: Optional[datetime] = None) -> Optional[str]:
    """Relative label for the last refresh time, e.g. `Just now` or `5m ago`."""
    moment = _parse_timestamp(raw)
    if moment is None:
        return None

    now = now or datetime.now(UTC)
    diff_seconds = (now - moment).total_seconds()
    diff_minutes = int(diff_seconds // 60)
    diff_hours = int(diff_seconds // 3600)

    if diff_minutes < 1:
        return "Just now"
    if diff_minutes < 60:
        return f"{diff_minutes}m ago"
    if diff_hours < 24:
        return f"{diff_hours}h ago"
    return f"{moment:%b} {moment.day}, {moment:%I:%M %p}"
