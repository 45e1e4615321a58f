"""Tests for SessionConfig."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from paystream.models.config import DEFAULT_SERVER_URL, SessionConfig


class TestSessionConfig:
    def test_defaults(self):
        config = SessionConfig()
        assert config.server_url == DEFAULT_SERVER_URL
        assert (config.min_budget, config.default_budget, config.max_budget) == (0.5, 1.5, 5.0)
        assert config.analyze_url == "http://localhost:3001/api/analyze"
        assert config.report_url("xyz") == "http://localhost:3001/api/report/xyz"

    def test_min_budget_must_be_positive(self):
        with pytest.raises(ValidationError):
            SessionConfig(min_budget=0)

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("PAYSTREAM_SERVER_URL", "https://paystream.example/")
        monkeypatch.setenv("PAYSTREAM_TIMEOUT", "3.5")
        config = SessionConfig.from_env()
        assert config.connect_timeout == 3.5
        assert config.analyze_url == "https://paystream.example/api/analyze"

    def test_overrides_win_and_none_is_skipped(self, monkeypatch):
        monkeypatch.setenv("PAYSTREAM_SERVER_URL", "https://from-env")
        assert SessionConfig.from_env(server_url="http://cli").server_url == "http://cli"
        assert SessionConfig.from_env(server_url=None).server_url == "https://from-env"

    def test_from_env_without_variables(self, monkeypatch):
        monkeypatch.delenv("PAYSTREAM_SERVER_URL", raising=False)
        monkeypatch.delenv("PAYSTREAM_TIMEOUT", raising=False)
        assert SessionConfig.from_env() == SessionConfig()
