"""Infrastructure monitoring components.

Prometheus metrics collection for the governance core: phase transitions,
automatic sweeps and vote casting.
"""

from src.infrastructure.monitoring.governance_metrics import (
    METRICS_CONTENT_TYPE,
    TRIGGER_AUTOMATIC,
    TRIGGER_MANUAL,
    GovernanceMetricsCollector,
    generate_metrics,
    get_governance_metrics_collector,
    reset_governance_metrics_collector,
)

__all__: list[str] = [
    "METRICS_CONTENT_TYPE",
    "TRIGGER_AUTOMATIC",
    "TRIGGER_MANUAL",
    "GovernanceMetricsCollector",
    "generate_metrics",
    "get_governance_metrics_collector",
    "reset_governance_metrics_collector",
]
