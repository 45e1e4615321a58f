"""Read-only client for persisted, shareable analysis reports.

A finished session may announce a ``share_id``. The report behind it is
stored by the analysis service; this module only builds share links and
fetches reports by id.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

import httpx
import tenacity
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from paystream.exceptions import ReportNotFoundError, TransportError
from paystream.models.config import SessionConfig

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS_CODES = {500, 502, 503, 504}


class ReportMeta(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    unit_count: int = Field(
        default=0, validation_alias=AliasChoices("fileCount", "unitCount", "unit_count")
    )
    tags: tuple[str, ...] = Field(
        default=(), validation_alias=AliasChoices("languages", "tags")
    )


class SharedReport(BaseModel):
    """A persisted analysis report as returned by the report endpoint."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    subject_name: str = Field(
        validation_alias=AliasChoices("repoName", "subjectName", "subject_name")
    )
    subject_ref: str = Field(
        default="", validation_alias=AliasChoices("repoUrl", "subjectRef", "subject_ref")
    )
    meta: ReportMeta = Field(default_factory=ReportMeta)
    created_at: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("createdAt", "created_at")
    )
    data: dict[str, Any] = Field(default_factory=dict)


def share_url(base_url: str, share_id: str) -> str:
    """Return the public link for a shared report."""
    return f"{base_url.rstrip('/')}/report/{share_id}"


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in _RETRYABLE_STATUS_CODES
    return isinstance(exc, (httpx.ConnectError, httpx.ConnectTimeout))


class ReportClient:
    """Sync httpx client for the shared-report endpoint.

    Retries connection errors and 5xx responses with exponential backoff.
    A 404 means the report never existed or has expired.

    Usage::

        with ReportClient(SessionConfig.from_env()) as client:
            report = client.fetch(share_id)
    """

    def __init__(
        self,
        config: SessionConfig | None = None,
        *,
        timeout: float = 30.0,
        max_retries: int = 3,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._config = config or SessionConfig()
        self._max_retries = max_retries
        self._client = httpx.Client(
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    def fetch(self, share_id: str) -> SharedReport:
        """Fetch the report behind *share_id*.

        Raises:
            ReportNotFoundError: If the report does not exist or has expired.
            TransportError: If the service cannot be reached or answers
                with an unexpected status or body.
        """
        if not share_id or not share_id.strip():
            raise ReportNotFoundError(share_id)
        retryer = tenacity.Retrying(
            retry=tenacity.retry_if_exception(_is_retryable),
            wait=(
                tenacity.wait_exponential(multiplier=1, min=1, max=10)
                + tenacity.wait_random(0, 1)
            ),
            stop=tenacity.stop_after_attempt(self._max_retries),
            before_sleep=tenacity.before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        try:
            payload = retryer(self._do_fetch, share_id.strip())
        except httpx.HTTPError as exc:
            raise TransportError("Failed to load report.") from exc
        try:
            return SharedReport.model_validate(payload)
        except ValueError as exc:
            raise TransportError(f"Unexpected report format: {exc}") from exc

    def _do_fetch(self, share_id: str) -> Any:
        """Execute a single report request (no retry)."""
        response = self._client.get(self._config.report_url(share_id))
        if response.status_code == 404:
            raise ReportNotFoundError(share_id)
        response.raise_for_status()
        try:
            return response.json()
        except ValueError as exc:
            raise TransportError(f"Unexpected report format: {exc}") from exc

    def close(self) -> None:
        """Close the underlying httpx client."""
        self._client.close()

    def __enter__(self) -> ReportClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
