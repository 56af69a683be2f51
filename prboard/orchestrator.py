"""Refresh orchestrator: GitHub fetch, aggregation and persistence in one pass."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Callable, Optional

from prboard.crawlers.github_client import GitHubClient, sanitize_for_log, sanitize_log_extra
from prboard.crawlers.persistence_stage import PersistenceError, PersistenceStage
from prboard.services.aggregator import aggregate_pull_requests
from prboard.services.document_store import DocumentStore

logger = logging.getLogger(__name__)


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a `Z` suffix."""
    moment = now or datetime.now(UTC)
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class RefreshConfig:
    """Organization and credential for one refresh, resolved at process start."""

    org: Optional[str]
    token: Optional[str]
    base_url: str = GitHubClient.BASE_URL
    timeout_seconds: Optional[float] = None
    user_agent: Optional[str] = None

    @classmethod
    def from_settings(cls, source: Any) -> "RefreshConfig":
        return cls(
            org=source.GITHUB_ORG,
            token=source.GITHUB_TOKEN,
            base_url=source.GITHUB_API_BASE_URL,
            timeout_seconds=source.GITHUB_TIMEOUT_SECONDS,
            user_agent=source.USER_AGENT,
        )


class RefreshOrchestrator:
    """Runs the full refresh and reports `{success, count}` or `{success, error}`.

    A run either completes every step or stops at the first failure. Nothing
    is written before all GitHub reads have succeeded.
    """

    def __init__(
        self,
        config: RefreshConfig,
        *,
        store: Any | None = None,
        github_client_factory: Callable[[], Any] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._config = config
        self._store = store if store is not None else DocumentStore()
        self._github_client_factory = github_client_factory or self._default_client
        self._clock = clock or (lambda: datetime.now(UTC))

    async def run_refresh(self) -> dict[str, Any]:
        org = self._config.org
        logger.info("Refresh started", extra=sanitize_log_extra(org=org))

        try:
            if not org:
                raise ValueError("GitHub organization is not configured")

            async with self._github_client_factory() as client:
                records = await aggregate_pull_requests(client, org)
                warnings = [str(warning) for warning in getattr(client, "truncation_warnings", [])]

            persistence = PersistenceStage(self._store)
            outcomes = await persistence.upsert_records(records)
            failed = [outcome for outcome in outcomes if not outcome.success]
            if failed:
                raise PersistenceError(
                    f"{len(failed)} of {len(outcomes)} record writes failed; first error: {failed[0].error}"
                )

            metadata = await persistence.write_metadata(
                last_refresh=utc_timestamp(self._clock()),
                count=len(records),
            )
        except Exception as e:
            logger.error(f"Refresh failed: {sanitize_for_log(str(e))}", exc_info=True)
            return {"success": False, "error": sanitize_for_log(str(e))}

        logger.info(f"Refresh completed: {metadata.lastRefreshCount} pull requests written")
        return {
            "success": True,
            "count": metadata.lastRefreshCount,
            "lastRefresh": metadata.lastRefresh,
            "warnings": warnings,
        }

    def _default_client(self) -> GitHubClient:
        return GitHubClient(
            token=self._config.token,
            base_url=self._config.base_url,
            timeout_seconds=self._config.timeout_seconds,
            user_agent=self._config.user_agent,
        )
