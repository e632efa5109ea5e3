"""Proposal repository port.

The repository is the transactional record store for proposals and their
discussions. Phase and status changes go through compare_and_swap so that
two writers racing on the same proposal cannot both succeed.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models.governance_phase import GovernancePhase, ProposalStatus
from src.domain.models.proposal import Discussion, Proposal


class ProposalRepositoryProtocol(ABC):
    """Abstract interface for proposal storage.

    Implementations:
    - ProposalRepositoryStub: tests and local runs
    - PostgresProposalRepository: production (row lock per proposal)
    """

    @abstractmethod
    async def get(self, proposal_id: str) -> Proposal | None:
        """Fetch a proposal by id.

        Args:
            proposal_id: Proposal identifier.

        Returns:
            The proposal, or None if it does not exist.

        Raises:
            TransientStoreError: If the read fails.
        """
        ...

    @abstractmethod
    async def save(self, proposal: Proposal) -> None:
        """Insert or replace a proposal record.

        Used when proposals are created. Phase changes must use
        compare_and_swap instead.
        """
        ...

    @abstractmethod
    async def list_active(self) -> list[Proposal]:
        """List proposals whose status is not approved, rejected or executed.

        Returns:
            Proposals ordered by id.
        """
        ...

    @abstractmethod
    async def compare_and_swap(
        self,
        updated: Proposal,
        *,
        expected_phase: GovernancePhase,
        expected_status: ProposalStatus,
    ) -> bool:
        """Atomically replace a proposal if it is still in the expected state.

        Args:
            updated: The new proposal record.
            expected_phase: Phase the stored record must currently have.
            expected_status: Status the stored record must currently have.

        Returns:
            True if the write happened, False if the stored record changed
            (or vanished) since it was read.

        Raises:
            TransientStoreError: If the write fails.
        """
        ...

    @abstractmethod
    async def list_discussions(self, proposal_id: str) -> list[Discussion]:
        """List discussions attached to a proposal."""
        ...
