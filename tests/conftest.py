"""
Pytest configuration and shared fixtures for governance core tests.

Testing Standards:
- All async tests use pytest.mark.asyncio (auto mode enabled in pyproject.toml)
- Time-dependent tests use FakeTimeAuthority, never the wall clock
- Each test gets its own Prometheus registry through the `metrics` fixture
"""

import pytest
from prometheus_client import CollectorRegistry

from src.bootstrap.governance import GovernanceCore, build_in_memory_core
from src.config.governance_config import GovernanceConfig
from src.infrastructure.monitoring.governance_metrics import GovernanceMetricsCollector
from tests.helpers.fake_time_authority import FakeTimeAuthority


@pytest.fixture
def anyio_backend() -> str:
    """Use asyncio as the async backend."""
    return "asyncio"


@pytest.fixture
def project_version() -> str:
    """Provide the current project version for tests."""
    from src import __version__

    return __version__


@pytest.fixture
def fake_time_authority() -> FakeTimeAuthority:
    """Clock frozen at 2026-01-01T00:00:00 UTC."""
    return FakeTimeAuthority()


@pytest.fixture
def metrics() -> GovernanceMetricsCollector:
    """Metrics collector with an isolated registry."""
    return GovernanceMetricsCollector(registry=CollectorRegistry())


@pytest.fixture
def governance_config() -> GovernanceConfig:
    """Default configuration, independent of GOVERNANCE_* variables."""
    return GovernanceConfig()


@pytest.fixture
def core(
    fake_time_authority: FakeTimeAuthority,
    governance_config: GovernanceConfig,
    metrics: GovernanceMetricsCollector,
) -> GovernanceCore:
    """Governance core wired over in-memory stubs."""
    return build_in_memory_core(
        time_authority=fake_time_authority,
        config=governance_config,
        metrics=metrics,
    )
