"""Configuration module for the governance core.

Available Configurations:
- GovernanceConfig: Phase durations, participation requirements and switches
- PhaseConfiguration: Per-phase defaults
"""

from src.config.governance_config import (
    DEFAULT_GOVERNANCE_CONFIG,
    GovernanceConfig,
    ParticipationRequirements,
    PhaseConfiguration,
)

__all__ = [
    "GovernanceConfig",
    "PhaseConfiguration",
    "ParticipationRequirements",
    "DEFAULT_GOVERNANCE_CONFIG",
]
