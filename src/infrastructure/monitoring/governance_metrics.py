"""Governance metrics for Prometheus exposition.

This module provides Prometheus collectors for phase transitions, automatic
sweeps and vote casting. The collector owns its own CollectorRegistry so
tests can create isolated instances.
"""

from __future__ import annotations

import os
import threading

from prometheus_client import CollectorRegistry, Counter, Gauge, generate_latest

# Content type for Prometheus metrics endpoint
METRICS_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"

# Thread lock for singleton initialization
_metrics_lock = threading.Lock()

TRIGGER_MANUAL = "manual"
TRIGGER_AUTOMATIC = "automatic"


class GovernanceMetricsCollector:
    """Collects governance core metrics for Prometheus.

    Attributes:
        phase_transitions_total: Executed transitions by edge and trigger.
        sweep_failures_total: Proposals whose sweep evaluation failed.
        votes_cast_total: Votes recorded by decision.
        last_sweep_transitions: Transitions applied by the latest sweep.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize governance metrics collector.

        Args:
            registry: Optional custom registry for testing isolation.
        """
        self._registry = registry or CollectorRegistry()
        self._environment = os.environ.get("ENVIRONMENT", "development")
        self._service_name = os.environ.get("SERVICE_NAME", "agora-governance")

        self.phase_transitions_total = Counter(
            name="governance_phase_transitions_total",
            documentation="Total executed phase transitions",
            labelnames=["from_phase", "to_phase", "trigger", "service", "environment"],
            registry=self._registry,
        )

        self.sweep_failures_total = Counter(
            name="governance_sweep_failures_total",
            documentation="Total proposals that failed during an automatic sweep",
            labelnames=["service", "environment"],
            registry=self._registry,
        )

        self.votes_cast_total = Counter(
            name="governance_votes_cast_total",
            documentation="Total votes recorded, upserts included",
            labelnames=["decision", "service", "environment"],
            registry=self._registry,
        )

        self.last_sweep_transitions = Gauge(
            name="governance_last_sweep_transitions",
            documentation="Transitions applied by the most recent automatic sweep",
            labelnames=["service", "environment"],
            registry=self._registry,
        )

    def record_transition(self, from_phase: str, to_phase: str, trigger: str) -> None:
        """Record an executed phase transition.

        Args:
            from_phase: Source phase value.
            to_phase: Target phase value.
            trigger: "manual" or "automatic".
        """
        self.phase_transitions_total.labels(
            from_phase=from_phase,
            to_phase=to_phase,
            trigger=trigger,
            service=self._service_name,
            environment=self._environment,
        ).inc()

    def record_sweep_failure(self) -> None:
        self.sweep_failures_total.labels(
            service=self._service_name,
            environment=self._environment,
        ).inc()

    def record_vote(self, decision: str) -> None:
        self.votes_cast_total.labels(
            decision=decision,
            service=self._service_name,
            environment=self._environment,
        ).inc()

    def set_last_sweep_transitions(self, count: int) -> None:
        self.last_sweep_transitions.labels(
            service=self._service_name,
            environment=self._environment,
        ).set(count)

    def get_registry(self) -> CollectorRegistry:
        """Get the collector registry."""
        return self._registry


# Singleton instance
_governance_metrics_collector: GovernanceMetricsCollector | None = None


def get_governance_metrics_collector() -> GovernanceMetricsCollector:
    """Get the singleton GovernanceMetricsCollector instance (thread-safe).

    Uses double-checked locking for thread-safe lazy initialization.
    """
    global _governance_metrics_collector
    if _governance_metrics_collector is None:
        with _metrics_lock:
            if _governance_metrics_collector is None:
                _governance_metrics_collector = GovernanceMetricsCollector()
    return _governance_metrics_collector


def generate_metrics() -> bytes:
    """Generate governance metrics in Prometheus exposition format."""
    return generate_latest(get_governance_metrics_collector().get_registry())


def reset_governance_metrics_collector() -> None:
    """Reset the singleton collector (for testing only)."""
    global _governance_metrics_collector
    with _metrics_lock:
        _governance_metrics_collector = None
