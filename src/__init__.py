"""
Agora Governance Core - proposal lifecycle governance

Proposals move through six ordered governance phases. Agents cast weighted
votes that must meet quorum and consensus thresholds before a proposal can
progress, and every session and vote is replayable into a hash-linked audit
chain so the voting history can be verified after the fact.

Core components:
- PhaseStateMachineService: condition-gated phase transitions
- calculate_voting_result: quorum/consensus arithmetic over weighted votes
- build_audit_chain: deterministic SHA-256 chain over a session and its votes
- AutomaticTransitionScheduler: idempotent sweep of automatic transitions
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
