"""Unit tests for correlation ids and structlog configuration."""

from __future__ import annotations

import json
import logging
import os
from unittest.mock import patch

import pytest
import structlog

from src.bootstrap.logging import configure_structlog as bootstrap_configure
from src.infrastructure.observability import (
    configure_structlog,
    correlation_id_processor,
    correlation_scope,
    get_correlation_id,
    resolve_log_level,
    set_correlation_id,
)


@pytest.fixture
def reset_structlog():
    yield
    structlog.reset_defaults()


class TestCorrelationScope:
    def test_generates_and_restores(self) -> None:
        set_correlation_id("outer")

        with correlation_scope() as correlation_id:
            assert correlation_id != "outer"
            assert get_correlation_id() == correlation_id

        assert get_correlation_id() == "outer"
        set_correlation_id("")

    def test_explicit_id(self) -> None:
        with correlation_scope("sweep-1") as correlation_id:
            assert correlation_id == "sweep-1"

        assert get_correlation_id() == ""


class TestCorrelationProcessor:
    def test_adds_current_id(self) -> None:
        with correlation_scope("abc"):
            event = correlation_id_processor(None, "info", {"event": "x"})

        assert event["correlation_id"] == "abc"

    def test_keeps_bound_id(self) -> None:
        with correlation_scope("abc"):
            event = correlation_id_processor(
                None, "info", {"event": "x", "correlation_id": "bound"}
            )

        assert event["correlation_id"] == "bound"

    def test_no_id_outside_scope(self) -> None:
        event = correlation_id_processor(None, "info", {"event": "x"})

        assert "correlation_id" not in event


class TestConfigureStructlog:
    def test_production_renders_json(self, capsys, reset_structlog) -> None:
        configure_structlog(environment="production")

        with correlation_scope("req-1"):
            structlog.get_logger().info("phase_transition_executed", proposal_id="p")

        line = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert line["event"] == "phase_transition_executed"
        assert line["correlation_id"] == "req-1"
        assert line["level"] == "info"
        assert "timestamp" in line

    def test_development_uses_console_renderer(self, reset_structlog) -> None:
        configure_structlog(environment="development")

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_log_level_filters(self, capsys, reset_structlog) -> None:
        with patch.dict(os.environ, {"LOG_LEVEL": "WARNING"}):
            configure_structlog(environment="production")

        structlog.get_logger().info("hidden_event")

        assert "hidden_event" not in capsys.readouterr().out

    def test_bootstrap_resolves_environment(self, reset_structlog) -> None:
        with patch.dict(os.environ, {"ENVIRONMENT": "development"}, clear=True):
            assert bootstrap_configure() == "development"
        with patch.dict(os.environ, {}, clear=True):
            assert bootstrap_configure() == "production"
        assert bootstrap_configure("staging") == "staging"

    def test_explicit_level_overrides_environment(
        self, capsys, reset_structlog
    ) -> None:
        with patch.dict(os.environ, {"LOG_LEVEL": "DEBUG"}):
            configure_structlog(environment="production", log_level="error")

        structlog.get_logger().warning("dropped_warning")

        assert "dropped_warning" not in capsys.readouterr().out


class TestResolveLogLevel:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [("debug", logging.DEBUG), ("WARNING", logging.WARNING), ("loud", logging.INFO)],
    )
    def test_names(self, name: str, expected: int) -> None:
        assert resolve_log_level(name) == expected

    def test_environment_default(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            assert resolve_log_level() == logging.INFO
