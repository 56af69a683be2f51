"""Persists refreshed pull request records and the refresh metadata document."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from prboard.crawlers.github_client import sanitize_log_extra
from prboard.models.records import (
    METADATA_COLLECTION,
    METADATA_DOC_ID,
    PRS_COLLECTION,
    PullRequestRecord,
    RefreshMetadata,
)

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """Raised when records or refresh metadata could not be written."""


@dataclass(frozen=True)
class WriteOutcome:
    """Result of one record upsert within a batch."""

    id: str
    success: bool
    error: Optional[str] = None


class PersistenceStage:
    """Merge-upserts records by id; no transaction spans the batch."""

    def __init__(self, store: Any) -> None:
        self._store = store

    async def upsert_records(self, records: Sequence[PullRequestRecord]) -> list[WriteOutcome]:
        """Write all records concurrently and report one outcome per record.

        Writes that succeed stay applied when others fail.
        """
        outcomes = await asyncio.gather(*(self._upsert_one(record) for record in records))
        failed = [outcome for outcome in outcomes if not outcome.success]
        logger.info(f"Upserted {len(outcomes) - len(failed)}/{len(outcomes)} pull request records")
        return list(outcomes)

    async def write_metadata(self, *, last_refresh: str, count: int) -> RefreshMetadata:
        metadata = RefreshMetadata(lastRefresh=last_refresh, lastRefreshCount=count)
        await asyncio.to_thread(
            self._store.set_document,
            METADATA_COLLECTION,
            METADATA_DOC_ID,
            metadata.to_document(),
        )
        return metadata

    async def _upsert_one(self, record: PullRequestRecord) -> WriteOutcome:
        try:
            await asyncio.to_thread(
                self._store.set_document,
                PRS_COLLECTION,
                record.id,
                record.to_document(),
            )
        except Exception as exc:
            logger.warning(
                "Pull request record write failed",
                extra=sanitize_log_extra(record_id=record.id, error=str(exc)),
            )
            return WriteOutcome(id=record.id, success=False, error=str(exc))
        return WriteOutcome(id=record.id, success=True)
