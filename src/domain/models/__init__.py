"""Domain models for the governance core.

Contains value objects and domain models that represent core governance
concepts. These models are immutable and contain no infrastructure
dependencies.
"""

from src.domain.models.audit_chain import (
    AuditChainEntry,
    AuditEntryType,
    ChainVerification,
)
from src.domain.models.governance_phase import (
    PHASE_ORDER,
    GovernancePhase,
    ProposalStatus,
    status_for_phase,
)
from src.domain.models.metadata import MetadataMap
from src.domain.models.phase_transition import (
    ConditionKind,
    PhaseStatusReport,
    PhaseTransitionRule,
    ProposalContext,
    TransitionCheck,
    TransitionCondition,
    TransitionEvent,
    TransitionOption,
)
from src.domain.models.proposal import Discussion, Proposal
from src.domain.models.vote import GovernanceSession, Vote, VoteDecision
from src.domain.models.voting_result import (
    DecisionTally,
    SessionResults,
    VotingOutcome,
    VotingResult,
)

__all__: list[str] = [
    "AuditChainEntry",
    "AuditEntryType",
    "ChainVerification",
    "ConditionKind",
    "DecisionTally",
    "Discussion",
    "GovernancePhase",
    "GovernanceSession",
    "MetadataMap",
    "PHASE_ORDER",
    "PhaseStatusReport",
    "PhaseTransitionRule",
    "Proposal",
    "ProposalContext",
    "ProposalStatus",
    "SessionResults",
    "TransitionCheck",
    "TransitionCondition",
    "TransitionEvent",
    "TransitionOption",
    "Vote",
    "VoteDecision",
    "VotingOutcome",
    "VotingResult",
    "status_for_phase",
]
