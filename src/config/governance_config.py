"""Governance phase and voting configuration.

This module defines the immutable configuration consumed by the phase state
machine and the voting engine. A single GovernanceConfig is constructed at
startup and passed by reference into the services; administrative
reconfiguration produces a new object rather than mutating the old one.

Environment Variables:
- GOVERNANCE_AUTOMATIC_TRANSITIONS: Enable the automatic sweep (default: true)
- GOVERNANCE_NOTIFICATIONS: Emit transition events to the sink (default: true)
- GOVERNANCE_AUDIT_LOG: Write the transition audit log line (default: true)
- GOVERNANCE_MIN_DISCUSSION_HOURS: Minimum discussion time (default: 12, min: 0, max: 168)
- GOVERNANCE_CONSENSUS_THRESHOLD: Approve weight fraction required (default: 0.7, min: 0.0, max: 1.0)
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import timedelta
from types import MappingProxyType
from typing import Any

from src.domain.errors.configuration import InvalidConfigurationError
from src.domain.models.governance_phase import GovernancePhase

# =============================================================================
# Discussion Configuration
# =============================================================================

# Hard floor on discussion time, independent of the nominal phase duration
DEFAULT_MIN_DISCUSSION_HOURS = 12

MIN_DISCUSSION_HOURS_FLOOR = 0

# One week
MAX_DISCUSSION_HOURS = 168

# =============================================================================
# Consensus Configuration
# =============================================================================

# Approve weight must reach 70% of total weight
DEFAULT_CONSENSUS_THRESHOLD = 0.7

# Minimum distinct voters when no phase requirement is configured
DEFAULT_MIN_PARTICIPANTS = 1


def _get_int_env(key: str, default: int) -> int:
    """Get integer environment variable with default.

    Args:
        key: Environment variable name.
        default: Default value if not set or invalid.

    Returns:
        Parsed integer value or default.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float_env(key: str, default: float) -> float:
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_bool_env(key: str, default: bool) -> bool:
    value = os.environ.get(key)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class ParticipationRequirements:
    """Participation requirements for a phase.

    Attributes:
        min_participants: Minimum distinct participants (or voters).
        consensus_threshold: Informational phase-level threshold (0-1).
        required_roles: Roles expected to take part.
    """

    min_participants: int | None = None
    consensus_threshold: float | None = None
    required_roles: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.min_participants is not None and self.min_participants < 0:
            raise InvalidConfigurationError(
                f"min_participants must be >= 0, got {self.min_participants}"
            )
        if self.consensus_threshold is not None and not (
            0.0 <= self.consensus_threshold <= 1.0
        ):
            raise InvalidConfigurationError(
                "consensus_threshold must be between 0.0 and 1.0, "
                f"got {self.consensus_threshold}"
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "min_participants": self.min_participants,
            "consensus_threshold": self.consensus_threshold,
            "required_roles": list(self.required_roles),
        }


@dataclass(frozen=True)
class PhaseConfiguration:
    """Per-phase defaults.

    Attributes:
        phase: Phase this configuration applies to.
        default_duration: Nominal phase length; zero means no deadline.
        requires_manual_progression: Phase is left only by explicit request.
        allowed_extensions: Number of deadline extensions permitted.
        extension_duration: Length of each extension.
        participation_requirements: Optional participation requirements.
        min_duration: Optional lower bound on phase length.
        max_duration: Optional upper bound on phase length.
    """

    phase: GovernancePhase
    default_duration: timedelta
    requires_manual_progression: bool = False
    allowed_extensions: int = 0
    extension_duration: timedelta = timedelta(0)
    participation_requirements: ParticipationRequirements | None = None
    min_duration: timedelta | None = None
    max_duration: timedelta | None = None

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.default_duration < timedelta(0):
            raise InvalidConfigurationError(
                f"default_duration for {self.phase.value} must not be negative"
            )
        if self.extension_duration < timedelta(0):
            raise InvalidConfigurationError(
                f"extension_duration for {self.phase.value} must not be negative"
            )
        if self.allowed_extensions < 0:
            raise InvalidConfigurationError(
                f"allowed_extensions for {self.phase.value} must be >= 0, "
                f"got {self.allowed_extensions}"
            )

    @property
    def has_deadline(self) -> bool:
        """True when entering the phase sets a deadline."""
        return self.default_duration > timedelta(0)

    @property
    def min_participants(self) -> int | None:
        if self.participation_requirements is None:
            return None
        return self.participation_requirements.min_participants

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "phase": self.phase.value,
            "default_duration_seconds": self.default_duration.total_seconds(),
            "requires_manual_progression": self.requires_manual_progression,
            "allowed_extensions": self.allowed_extensions,
            "extension_duration_seconds": self.extension_duration.total_seconds(),
            "participation_requirements": (
                self.participation_requirements.to_dict()
                if self.participation_requirements
                else None
            ),
            "min_duration_seconds": (
                self.min_duration.total_seconds() if self.min_duration else None
            ),
            "max_duration_seconds": (
                self.max_duration.total_seconds() if self.max_duration else None
            ),
        }


def _default_phase_configurations() -> dict[GovernancePhase, PhaseConfiguration]:
    configs = [
        PhaseConfiguration(
            phase=GovernancePhase.PROPOSAL,
            default_duration=timedelta(hours=24),
            allowed_extensions=2,
            extension_duration=timedelta(hours=12),
            participation_requirements=ParticipationRequirements(
                min_participants=1,
                required_roles=("proposer",),
            ),
        ),
        PhaseConfiguration(
            phase=GovernancePhase.DISCUSSION,
            default_duration=timedelta(hours=48),
            allowed_extensions=3,
            extension_duration=timedelta(hours=24),
            participation_requirements=ParticipationRequirements(
                min_participants=3,
                consensus_threshold=0.6,
            ),
        ),
        PhaseConfiguration(
            phase=GovernancePhase.REVISION,
            default_duration=timedelta(hours=24),
            requires_manual_progression=True,
            allowed_extensions=2,
            extension_duration=timedelta(hours=12),
        ),
        PhaseConfiguration(
            phase=GovernancePhase.VOTING,
            default_duration=timedelta(hours=72),
            allowed_extensions=1,
            extension_duration=timedelta(hours=24),
            participation_requirements=ParticipationRequirements(
                min_participants=5,
                consensus_threshold=0.67,
                required_roles=("voter",),
            ),
        ),
        PhaseConfiguration(
            phase=GovernancePhase.RESOLUTION,
            default_duration=timedelta(hours=12),
        ),
        PhaseConfiguration(
            phase=GovernancePhase.EXECUTION,
            default_duration=timedelta(days=7),
            requires_manual_progression=True,
            allowed_extensions=5,
            extension_duration=timedelta(hours=24),
        ),
    ]
    return {config.phase: config for config in configs}


@dataclass(frozen=True)
class GovernanceConfig:
    """Immutable configuration for the governance core.

    Attributes:
        phase_configurations: Per-phase defaults keyed by phase.
        enable_automatic_transitions: When False the sweep is a no-op.
        notification_enabled: When False transition events are not emitted.
        audit_enabled: When False the transition audit log line is skipped.
        minimum_discussion_time: Floor on time spent in DISCUSSION.
        default_consensus_threshold: Approve weight fraction for approval.
    """

    phase_configurations: Mapping[GovernancePhase, PhaseConfiguration] = field(
        default_factory=_default_phase_configurations
    )
    enable_automatic_transitions: bool = True
    notification_enabled: bool = True
    audit_enabled: bool = True
    minimum_discussion_time: timedelta = timedelta(hours=DEFAULT_MIN_DISCUSSION_HOURS)
    default_consensus_threshold: float = DEFAULT_CONSENSUS_THRESHOLD

    def __post_init__(self) -> None:
        """Validate and freeze configuration values."""
        if not 0.0 <= self.default_consensus_threshold <= 1.0:
            raise InvalidConfigurationError(
                "default_consensus_threshold must be between 0.0 and 1.0, "
                f"got {self.default_consensus_threshold}"
            )
        if self.minimum_discussion_time < timedelta(0):
            raise InvalidConfigurationError(
                "minimum_discussion_time must not be negative"
            )
        for phase, config in self.phase_configurations.items():
            if config.phase != phase:
                raise InvalidConfigurationError(
                    f"Configuration for {config.phase.value} registered under "
                    f"{phase.value}"
                )
        object.__setattr__(
            self,
            "phase_configurations",
            MappingProxyType(dict(self.phase_configurations)),
        )

    def get_phase_configuration(
        self, phase: GovernancePhase
    ) -> PhaseConfiguration | None:
        """Get configuration for a phase, if one is defined."""
        return self.phase_configurations.get(phase)

    def min_participants_for(self, phase: GovernancePhase, default: int) -> int:
        """Get the minimum participants for a phase or the given default."""
        config = self.phase_configurations.get(phase)
        if config is None or not config.min_participants:
            return default
        return config.min_participants

    def phase_duration(self, phase: GovernancePhase, default: timedelta) -> timedelta:
        """Get the nominal duration for a phase or the given default."""
        config = self.phase_configurations.get(phase)
        if config is None or not config.has_deadline:
            return default
        return config.default_duration

    def with_phase_configuration(
        self, phase: GovernancePhase, **changes: Any
    ) -> GovernanceConfig:
        """Return a new config with one phase configuration updated.

        Args:
            phase: Phase whose configuration changes.
            **changes: PhaseConfiguration fields to replace.

        Returns:
            New GovernanceConfig. Unchanged if the phase has no configuration.

        Raises:
            InvalidConfigurationError: If the changes produce invalid values.
        """
        existing = self.phase_configurations.get(phase)
        if existing is None:
            return self
        if "phase" in changes and changes["phase"] != phase:
            raise InvalidConfigurationError("Cannot change the phase of a configuration")
        updated = dict(self.phase_configurations)
        updated[phase] = replace(existing, **changes)
        return replace(self, phase_configurations=updated)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "phase_configurations": [
                config.to_dict() for config in self.phase_configurations.values()
            ],
            "enable_automatic_transitions": self.enable_automatic_transitions,
            "notification_enabled": self.notification_enabled,
            "audit_enabled": self.audit_enabled,
            "minimum_discussion_seconds": self.minimum_discussion_time.total_seconds(),
            "default_consensus_threshold": self.default_consensus_threshold,
        }

    @classmethod
    def from_environment(cls) -> GovernanceConfig:
        """Create config from environment variables with defaults.

        Environment Variables:
            GOVERNANCE_AUTOMATIC_TRANSITIONS: Enable the sweep (default: true)
            GOVERNANCE_NOTIFICATIONS: Emit transition events (default: true)
            GOVERNANCE_AUDIT_LOG: Write transition audit lines (default: true)
            GOVERNANCE_MIN_DISCUSSION_HOURS: Discussion floor in hours (default: 12)
            GOVERNANCE_CONSENSUS_THRESHOLD: Approval fraction (default: 0.7)

        Returns:
            GovernanceConfig with values from environment or defaults.
        """
        min_discussion_hours = _get_int_env(
            "GOVERNANCE_MIN_DISCUSSION_HOURS",
            DEFAULT_MIN_DISCUSSION_HOURS,
        )
        # Clamp to valid range
        min_discussion_hours = max(
            MIN_DISCUSSION_HOURS_FLOOR,
            min(min_discussion_hours, MAX_DISCUSSION_HOURS),
        )

        threshold = _get_float_env(
            "GOVERNANCE_CONSENSUS_THRESHOLD",
            DEFAULT_CONSENSUS_THRESHOLD,
        )
        threshold = max(0.0, min(threshold, 1.0))

        return cls(
            enable_automatic_transitions=_get_bool_env(
                "GOVERNANCE_AUTOMATIC_TRANSITIONS", True
            ),
            notification_enabled=_get_bool_env("GOVERNANCE_NOTIFICATIONS", True),
            audit_enabled=_get_bool_env("GOVERNANCE_AUDIT_LOG", True),
            minimum_discussion_time=timedelta(hours=min_discussion_hours),
            default_consensus_threshold=threshold,
        )


# Default production config
DEFAULT_GOVERNANCE_CONFIG = GovernanceConfig()
