"""Proposal context provider port.

The state machine never reads stores directly when evaluating conditions;
it asks a provider for a ProposalContext snapshot.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models.phase_transition import ProposalContext


class ProposalContextProvider(ABC):
    """Builds the context transition conditions are evaluated against."""

    @abstractmethod
    async def get(self, proposal_id: str) -> ProposalContext | None:
        """Assemble the current context of a proposal.

        The context carries the proposal's phase/status, time in phase,
        participant set (union of proposer, discussion participants and
        voters), votes, discussions, phase start time and deadline.

        Args:
            proposal_id: Proposal identifier.

        Returns:
            ProposalContext, or None if the proposal does not exist.
        """
        ...
