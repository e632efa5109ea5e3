"""Default ProposalContextProvider.

Assembles a ProposalContext from the proposal repository and vote store.
The participant set is the union of the proposer, every discussion
participant and every agent that voted on the proposal, in first-seen
order.
"""

from __future__ import annotations

from src.application.ports.proposal_context import ProposalContextProvider
from src.application.ports.proposal_repository import ProposalRepositoryProtocol
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.ports.vote_store import VoteStoreProtocol
from src.domain.models.phase_transition import ProposalContext


class ProposalContextAssembler(ProposalContextProvider):
    """Builds proposal contexts from the stores."""

    def __init__(
        self,
        proposals: ProposalRepositoryProtocol,
        votes: VoteStoreProtocol,
        time_authority: TimeAuthorityProtocol,
    ) -> None:
        self._proposals = proposals
        self._votes = votes
        self._time = time_authority

    async def get(self, proposal_id: str) -> ProposalContext | None:
        proposal = await self._proposals.get(proposal_id)
        if proposal is None:
            return None

        discussions = await self._proposals.list_discussions(proposal_id)
        votes = await self._votes.list_by_proposal(proposal_id)

        participants: dict[str, None] = {proposal.author_id: None}
        for discussion in discussions:
            for agent_id in discussion.participants:
                participants.setdefault(agent_id, None)
        for vote in votes:
            participants.setdefault(vote.agent_id, None)

        return ProposalContext(
            proposal=proposal,
            participants=tuple(participants),
            votes=tuple(votes),
            discussions=tuple(discussions),
            time_in_phase=proposal.time_in_phase(self._time.now()),
        )
