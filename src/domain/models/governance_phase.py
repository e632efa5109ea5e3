"""Governance phase and proposal status vocabulary.

Proposals move through six ordered phases. Each phase maps to one canonical
status that is recorded when the phase is entered; RESOLUTION additionally
admits REJECTED once voting has been determined.
"""

from __future__ import annotations

from enum import Enum


class GovernancePhase(Enum):
    """Ordered governance phases a proposal moves through."""

    PROPOSAL = "proposal"
    DISCUSSION = "discussion"
    REVISION = "revision"
    VOTING = "voting"
    RESOLUTION = "resolution"
    EXECUTION = "execution"


class ProposalStatus(Enum):
    """Finer-grained proposal status correlated with the phase."""

    DRAFT = "draft"
    DISCUSSION = "discussion"
    REVISION = "revision"
    VOTING = "voting"
    APPROVED = "approved"
    REJECTED = "rejected"
    EXECUTED = "executed"


# Canonical phase order
PHASE_ORDER: tuple[GovernancePhase, ...] = tuple(GovernancePhase)

# Status recorded when a phase is entered
PHASE_STATUS_MAP: dict[GovernancePhase, ProposalStatus] = {
    GovernancePhase.PROPOSAL: ProposalStatus.DRAFT,
    GovernancePhase.DISCUSSION: ProposalStatus.DISCUSSION,
    GovernancePhase.REVISION: ProposalStatus.REVISION,
    GovernancePhase.VOTING: ProposalStatus.VOTING,
    # Approval pending determination by the voting outcome
    GovernancePhase.RESOLUTION: ProposalStatus.APPROVED,
    GovernancePhase.EXECUTION: ProposalStatus.EXECUTED,
}

# Statuses a proposal may carry while in each phase
ALLOWED_STATUSES: dict[GovernancePhase, frozenset[ProposalStatus]] = {
    phase: frozenset({status}) for phase, status in PHASE_STATUS_MAP.items()
}
ALLOWED_STATUSES[GovernancePhase.RESOLUTION] = frozenset(
    {ProposalStatus.APPROVED, ProposalStatus.REJECTED}
)

# Proposals in these statuses are skipped by the automatic sweep
SETTLED_STATUSES: frozenset[ProposalStatus] = frozenset(
    {ProposalStatus.APPROVED, ProposalStatus.REJECTED, ProposalStatus.EXECUTED}
)


def status_for_phase(phase: GovernancePhase) -> ProposalStatus:
    """Get the canonical status recorded on entering a phase.

    Args:
        phase: Target phase.

    Returns:
        The status that accompanies the phase.
    """
    return PHASE_STATUS_MAP[phase]


def is_status_consistent(phase: GovernancePhase, status: ProposalStatus) -> bool:
    """Check whether a status is valid for the given phase."""
    return status in ALLOWED_STATUSES[phase]


def is_settled(status: ProposalStatus) -> bool:
    """Check whether a status excludes the proposal from automatic sweeps."""
    return status in SETTLED_STATUSES
