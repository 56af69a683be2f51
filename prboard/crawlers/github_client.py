"""Async GitHub REST client for the organization pull request refresh."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)

_REDACTED_VALUE = "***REDACTED***"
_SENSITIVE_KEYS = (
    "authorization",
    "token",
    "api_key",
    "apikey",
    "secret",
    "password",
    "cookie",
)
_TOKEN_PATTERNS = (
    re.compile(r"(?i)(bearer\s+)[^\s,;]+"),
    re.compile(r"(?i)(token\s*[=:]\s*)[^\s,;]+"),
    re.compile(r"(?i)(access_token=)[^&\s]+"),
    re.compile(r"(?i)(api[_-]?key\s*[=:]\s*)[^\s,;]+"),
    re.compile(r"(?i)(secret\s*[=:]\s*)[^\s,;]+"),
)


def sanitize_for_log(value: Any, *, key: Optional[str] = None) -> Any:
    """Return a recursively sanitized copy of log payloads."""

    if isinstance(value, dict):
        sanitized: dict[str, Any] = {}
        for raw_key, raw_value in value.items():
            field = str(raw_key)
            if _contains_keyword(field, _SENSITIVE_KEYS):
                sanitized[field] = _REDACTED_VALUE
                continue
            sanitized[field] = sanitize_for_log(raw_value, key=field)
        return sanitized

    if isinstance(value, (list, tuple, set)):
        return [sanitize_for_log(item, key=key) for item in value]

    if isinstance(value, str):
        return _redact_text(value)

    return value


def sanitize_log_extra(**kwargs: Any) -> dict[str, Any]:
    """Helper for `extra=` payloads in structured logging."""

    return {key: sanitize_for_log(value, key=key) for key, value in kwargs.items()}


def _contains_keyword(field_name: str, keywords: tuple[str, ...]) -> bool:
    lowered = field_name.lower()
    return any(keyword in lowered for keyword in keywords)


def _redact_text(raw: str) -> str:
    redacted = raw
    for pattern in _TOKEN_PATTERNS:
        redacted = pattern.sub(rf"\1{_REDACTED_VALUE}", redacted)
    return redacted


class GitHubAPIError(Exception):
    """Raised when a GitHub call fails or returns an unusable payload."""

    def __init__(self, message: str, *, path: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.path = path
        self.status_code = status_code


@dataclass(frozen=True)
class TruncationWarning:
    """A list response that filled its page; items beyond it were not fetched."""

    path: str
    page_size: int

    def __str__(self) -> str:
        return f"{self.path} returned a full page of {self.page_size} items; results may be truncated"


class GitHubClient:
    """Single-page GitHub reads for repositories, open pull requests and reviews.

    No pagination and no retries: every failure raises `GitHubAPIError`.
    Responses that fill a whole page are recorded in `truncation_warnings`.
    """

    BASE_URL = "https://api.github.com"
    API_VERSION = "2022-11-28"
    ACCEPT_JSON = "application/vnd.github+json"
    DEFAULT_USER_AGENT = "PRApprovalBoard/1.0"

    # GitHub's page size when `per_page` is not sent
    DEFAULT_PAGE_SIZE = 30
    PULLS_PAGE_SIZE = 20

    def __init__(
        self,
        *,
        token: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        user_agent: Optional[str] = None,
        transport: Optional[Any] = None,
    ) -> None:
        self._token = token
        self._base_url = base_url or self.BASE_URL
        self._timeout_seconds = timeout_seconds
        self._user_agent = user_agent or self.DEFAULT_USER_AGENT
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self.truncation_warnings: list[TruncationWarning] = []

    async def __aenter__(self) -> "GitHubClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def list_repositories(self, org: str) -> list[dict[str, Any]]:
        path = f"/orgs/{org}/repos"
        repos = await self._fetch_list(path)
        self._check_truncation(path, repos, self.DEFAULT_PAGE_SIZE)
        return repos

    async def list_open_pull_requests(self, org: str, repo: str) -> list[dict[str, Any]]:
        """Open pull requests of one repository, first page only.

        A `null` or empty body counts as no pull requests.
        """

        path = f"/repos/{org}/{repo}/pulls"
        pulls = await self._fetch_list(
            path,
            params={"state": "open", "per_page": self.PULLS_PAGE_SIZE},
            allow_null=True,
        )
        self._check_truncation(path, pulls, self.PULLS_PAGE_SIZE)
        return pulls

    async def list_reviews(self, org: str, repo: str, number: int) -> list[dict[str, Any]]:
        path = f"/repos/{org}/{repo}/pulls/{number}/reviews"
        reviews = await self._fetch_list(path)
        self._check_truncation(path, reviews, self.DEFAULT_PAGE_SIZE)
        return reviews

    async def _fetch_list(
        self,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        allow_null: bool = False,
    ) -> list[dict[str, Any]]:
        payload = await self._request(path, params=params)
        if payload is None and allow_null:
            return []
        if not isinstance(payload, list):
            raise GitHubAPIError(
                f"Expected a JSON array from {path}, got {type(payload).__name__}",
                path=path,
            )
        return payload

    async def _request(self, path: str, *, params: Optional[dict[str, Any]] = None) -> Any:
        client = await self._ensure_client()

        try:
            response = await client.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            status_code = getattr(getattr(exc, "response", None), "status_code", None)
            logger.warning(
                "GitHub request failed",
                extra=sanitize_log_extra(path=path, params=params, error=str(exc), status_code=status_code),
            )
            raise GitHubAPIError(
                f"GitHub request to {path} failed: {sanitize_for_log(str(exc))}",
                path=path,
                status_code=status_code,
            ) from exc

        try:
            return response.json()
        except ValueError as exc:
            raise GitHubAPIError(
                f"GitHub returned invalid JSON for {path}",
                path=path,
                status_code=response.status_code,
            ) from exc

    def _check_truncation(self, path: str, items: list[dict[str, Any]], page_size: int) -> None:
        if len(items) < page_size:
            return
        warning = TruncationWarning(path=path, page_size=page_size)
        self.truncation_warnings.append(warning)
        logger.warning(
            "GitHub list response filled a whole page; later pages are not fetched",
            extra=sanitize_log_extra(path=path, page_size=page_size),
        )

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client:
            return self._client

        headers = {
            "Accept": self.ACCEPT_JSON,
            "User-Agent": self._user_agent,
            "X-GitHub-Api-Version": self.API_VERSION,
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers=headers,
            timeout=self._timeout_seconds,
            transport=self._transport,
        )
        return self._client
