"""Vote weight policy for agents.

weight = 1.0 + ((quality + consensus) / 2) * 0.3, then x1.2 for reviewers
and x1.1 for mediators, clamped to [0.1, 2.0]. Missing scores count as 0.5.

The consensus calculator never applies this policy itself; it is offered to
callers that derive weights from agent metrics before casting votes.
"""

from __future__ import annotations

from collections.abc import Iterable

BASE_WEIGHT = 1.0
SCORE_FACTOR = 0.3
DEFAULT_SCORE = 0.5
MIN_WEIGHT = 0.1
MAX_WEIGHT = 2.0

ROLE_MULTIPLIERS: dict[str, float] = {
    "reviewer": 1.2,
    "mediator": 1.1,
}


def calculate_vote_weight(
    quality_score: float | None = None,
    consensus_score: float | None = None,
    roles: Iterable[str] = (),
) -> float:
    """Derive an agent's voting power from its metrics and roles.

    Args:
        quality_score: Agent quality score (0-1), default 0.5.
        consensus_score: Agent consensus score (0-1), default 0.5.
        roles: Agent roles.

    Returns:
        Weight in [MIN_WEIGHT, MAX_WEIGHT].
    """
    quality = DEFAULT_SCORE if quality_score is None else quality_score
    consensus = DEFAULT_SCORE if consensus_score is None else consensus_score

    weight = BASE_WEIGHT + ((quality + consensus) / 2) * SCORE_FACTOR
    role_set = set(roles)
    for role, multiplier in ROLE_MULTIPLIERS.items():
        if role in role_set:
            weight *= multiplier

    return max(MIN_WEIGHT, min(MAX_WEIGHT, weight))
