"""Configuration models for PayStream.

SessionConfig holds the settings a SessionController and the HTTP
collaborators need: where the analysis service lives, which subjects are
accepted, and the budget bounds offered to users.
"""

from __future__ import annotations

import os
from typing import Optional

from pydantic import BaseModel, Field

DEFAULT_SERVER_URL = "http://localhost:3001"


class SessionConfig(BaseModel):
    """Per-controller configuration.

    Attributes:
        server_url: Base URL of the analysis service.
        analyze_path: Path of the event-stream endpoint.
        report_path: Path prefix of the shared-report endpoint.
        allowed_hosts: Hosts a subject reference must mention. An empty
            tuple accepts any non-empty reference.
        min_budget: Smallest budget a session may start with.
        max_budget: Largest budget a session may start with.
        default_budget: Budget used when none is given.
        connect_timeout: Seconds to wait for the stream to open.
        read_timeout: Seconds between frames before the stream is
            considered dropped (None = wait forever).
    """

    server_url: str = DEFAULT_SERVER_URL
    analyze_path: str = "/api/analyze"
    report_path: str = "/api/report"
    allowed_hosts: tuple[str, ...] = ("github.com",)
    min_budget: float = Field(default=0.5, gt=0)
    max_budget: float = 5.0
    default_budget: float = 1.5
    connect_timeout: float = 10.0
    read_timeout: Optional[float] = None

    @classmethod
    def from_env(cls, **overrides: object) -> SessionConfig:
        """Build a config from ``PAYSTREAM_*`` environment variables.

        Explicit keyword overrides win over the environment.
        """
        values: dict[str, object] = {}
        server_url = os.environ.get("PAYSTREAM_SERVER_URL")
        if server_url:
            values["server_url"] = server_url
        timeout = os.environ.get("PAYSTREAM_TIMEOUT")
        if timeout:
            values["connect_timeout"] = float(timeout)
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    @property
    def analyze_url(self) -> str:
        return self.server_url.rstrip("/") + self.analyze_path

    def report_url(self, share_id: str) -> str:
        return f"{self.server_url.rstrip('/')}{self.report_path}/{share_id}"
