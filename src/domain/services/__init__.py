"""Domain services for the governance core.

Domain services contain business logic that doesn't naturally fit in entities
or value objects. They must NOT depend on infrastructure.

Available services:
- calculate_voting_result: Quorum/consensus verdict over weighted votes
- build_audit_chain / verify_audit_chain: Hash-linked session chain
- build_default_transition_rules: Default phase transition rule table
- calculate_vote_weight: Agent voting power policy
"""

from src.domain.services.audit_chain_builder import (
    build_audit_chain,
    chain_head_hash,
    order_votes_for_chain,
    verify_audit_chain,
)
from src.domain.services.consensus_calculator import (
    DEFAULT_CONSENSUS_THRESHOLD,
    calculate_voting_result,
    group_votes_by_proposal,
    tally_votes,
)
from src.domain.services.transition_rules import (
    build_default_transition_rules,
    evaluate_conditions,
    find_rule,
)
from src.domain.services.vote_weight import calculate_vote_weight

__all__ = [
    "DEFAULT_CONSENSUS_THRESHOLD",
    "build_audit_chain",
    "build_default_transition_rules",
    "calculate_vote_weight",
    "calculate_voting_result",
    "chain_head_hash",
    "evaluate_conditions",
    "find_rule",
    "group_votes_by_proposal",
    "order_votes_for_chain",
    "tally_votes",
    "verify_audit_chain",
]
