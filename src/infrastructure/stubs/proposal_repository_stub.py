"""Proposal repository stub.

In-memory implementation of ProposalRepositoryProtocol for tests and local
runs. compare_and_swap checks and writes in one synchronous step, which is
atomic under a single event loop.
"""

from __future__ import annotations

from src.application.ports.proposal_repository import ProposalRepositoryProtocol
from src.domain.models.governance_phase import GovernancePhase, ProposalStatus
from src.domain.models.proposal import Discussion, Proposal


class ProposalRepositoryStub(ProposalRepositoryProtocol):
    """In-memory proposal and discussion storage.

    Attributes:
        swap_count: Number of successful compare_and_swap writes.
    """

    def __init__(self) -> None:
        """Initialize the stub with empty storage."""
        self._proposals: dict[str, Proposal] = {}
        self._discussions: dict[str, list[Discussion]] = {}
        self._fail_reads = False
        self.swap_count = 0

    def clear(self) -> None:
        """Clear all stored data."""
        self._proposals.clear()
        self._discussions.clear()
        self._fail_reads = False
        self.swap_count = 0

    def add_proposal(self, proposal: Proposal) -> None:
        """Add a proposal directly to storage for testing."""
        self._proposals[proposal.proposal_id] = proposal

    def add_discussion(self, discussion: Discussion) -> None:
        """Attach a discussion to its proposal for testing."""
        self._discussions.setdefault(discussion.proposal_id, []).append(discussion)

    def set_fail_reads(self, fail: bool) -> None:
        """Make get() raise RuntimeError, simulating a broken store."""
        self._fail_reads = fail

    def snapshot(self, proposal_id: str) -> Proposal | None:
        """Synchronous read for assertions."""
        return self._proposals.get(proposal_id)

    async def get(self, proposal_id: str) -> Proposal | None:
        if self._fail_reads:
            raise RuntimeError("proposal store unavailable")
        return self._proposals.get(proposal_id)

    async def save(self, proposal: Proposal) -> None:
        self._proposals[proposal.proposal_id] = proposal

    async def list_active(self) -> list[Proposal]:
        return [
            self._proposals[proposal_id]
            for proposal_id in sorted(self._proposals)
            if not self._proposals[proposal_id].is_settled
        ]

    async def compare_and_swap(
        self,
        updated: Proposal,
        *,
        expected_phase: GovernancePhase,
        expected_status: ProposalStatus,
    ) -> bool:
        current = self._proposals.get(updated.proposal_id)
        if current is None:
            return False
        if (
            current.current_phase != expected_phase
            or current.current_status != expected_status
        ):
            return False
        self._proposals[updated.proposal_id] = updated
        self.swap_count += 1
        return True

    async def list_discussions(self, proposal_id: str) -> list[Discussion]:
        return list(self._discussions.get(proposal_id, []))
