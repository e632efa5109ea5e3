"""Unit tests for audit chain construction and verification."""

from __future__ import annotations

from dataclasses import replace

import pytest

from src.domain.events.hash_utils import GENESIS_HASH, compute_chain_hash
from src.domain.models.audit_chain import AuditEntryType
from src.domain.services.audit_chain_builder import (
    build_audit_chain,
    chain_head_hash,
    order_votes_for_chain,
    session_entry_id,
    verify_audit_chain,
)
from tests.helpers.builders import make_session, make_vote


@pytest.fixture
def session():
    return make_session(eligible_voters=72)


@pytest.fixture
def votes():
    return [
        make_vote("agent-1", "approve", 1.5, offset_minutes=1, sequence=1),
        make_vote("agent-2", "reject", 1.0, offset_minutes=2, sequence=2),
        make_vote("agent-3", "abstain", 1.0, offset_minutes=3, sequence=3),
    ]


class TestOrderVotesForChain:
    def test_orders_by_cast_time(self) -> None:
        late = make_vote("a", offset_minutes=5, sequence=1)
        early = make_vote("b", offset_minutes=1, sequence=2)
        assert order_votes_for_chain([late, early]) == [early, late]

    def test_ties_broken_by_sequence(self) -> None:
        """Votes cast in the same instant keep insertion order."""
        second = make_vote("a", sequence=2)
        first = make_vote("b", sequence=1)
        assert order_votes_for_chain([second, first]) == [first, second]


class TestBuildAuditChain:
    """Tests for build_audit_chain()."""

    def test_session_entry_comes_first_and_links_to_genesis(
        self, session, votes
    ) -> None:
        chain = build_audit_chain(session, votes)

        assert len(chain) == 4
        first = chain[0]
        assert first.entry_type == AuditEntryType.SESSION
        assert first.entry_id == session_entry_id("session-1")
        assert first.previous_hash == GENESIS_HASH
        assert first.hash == compute_chain_hash(session.to_payload())

    def test_vote_entries_link_to_predecessor(self, session, votes) -> None:
        chain = build_audit_chain(session, votes)

        for previous, entry in zip(chain, chain[1:]):
            assert entry.entry_type == AuditEntryType.VOTE
            assert entry.previous_hash == previous.hash
            assert entry.hash == compute_chain_hash(dict(entry.payload), previous.hash)

    def test_votes_are_chained_in_cast_order(self, session, votes) -> None:
        chain = build_audit_chain(session, list(reversed(votes)))

        assert [entry.agent_id for entry in chain[1:]] == [
            "agent-1",
            "agent-2",
            "agent-3",
        ]

    def test_chain_without_session_starts_at_genesis(self, votes) -> None:
        chain = build_audit_chain(None, votes)

        assert len(chain) == 3
        assert chain[0].previous_hash == GENESIS_HASH
        assert chain[0].entry_type == AuditEntryType.VOTE

    def test_empty_chain(self) -> None:
        assert build_audit_chain(None, []) == ()
        assert chain_head_hash(()) is None

    def test_rebuild_is_deterministic(self, session, votes) -> None:
        first = build_audit_chain(session, votes)
        second = build_audit_chain(session, list(votes))

        assert [e.hash for e in first] == [e.hash for e in second]
        assert chain_head_hash(first) == chain_head_hash(second)

    def test_mutating_a_vote_changes_it_and_every_later_hash(
        self, session, votes
    ) -> None:
        original = build_audit_chain(session, votes)
        tampered_votes = [votes[0], replace(votes[1], weight=5.0), votes[2]]
        tampered = build_audit_chain(session, tampered_votes)

        assert original[0].hash == tampered[0].hash
        assert original[1].hash == tampered[1].hash
        assert original[2].hash != tampered[2].hash
        assert original[3].hash != tampered[3].hash

    def test_deleting_a_vote_changes_head(self, session, votes) -> None:
        original = build_audit_chain(session, votes)
        shortened = build_audit_chain(session, votes[:2] + votes[3:])

        assert chain_head_hash(original) != chain_head_hash(shortened)

    def test_session_edit_changes_every_hash(self, session, votes) -> None:
        original = build_audit_chain(session, votes)
        edited = build_audit_chain(replace(session, summary="Edited"), votes)

        assert all(a.hash != b.hash for a, b in zip(original, edited))

    def test_sequence_is_not_hashed(self, session, votes) -> None:
        """Insertion sequence orders entries but is not part of the payload."""
        renumbered = [replace(v, sequence=v.sequence + 100) for v in votes]

        assert chain_head_hash(build_audit_chain(session, votes)) == chain_head_hash(
            build_audit_chain(session, renumbered)
        )

    def test_integer_and_float_weights_hash_alike(self, session) -> None:
        as_int = make_vote("agent-1", weight=6, sequence=1)
        as_float = make_vote("agent-1", weight=6.0, sequence=1)

        assert as_int.weight == 6.0
        assert isinstance(as_int.weight, float)
        assert chain_head_hash(build_audit_chain(session, [as_int])) == (
            chain_head_hash(build_audit_chain(session, [as_float]))
        )

    def test_superseding_with_integer_weight_keeps_head(self, session) -> None:
        original = make_vote("agent-1", weight=6.0, sequence=1)
        resubmitted = original.superseded_by(
            make_vote("agent-1", weight=6, sequence=2)
        )

        assert chain_head_hash(build_audit_chain(session, [original])) == (
            chain_head_hash(build_audit_chain(session, [resubmitted]))
        )



class TestVerifyAuditChain:
    """Tests for verify_audit_chain()."""

    def test_built_chain_verifies(self, session, votes) -> None:
        chain = build_audit_chain(session, votes)

        verification = verify_audit_chain(chain)

        assert verification.is_valid is True
        assert verification.entries_checked == 4
        assert verification.head_hash == chain[-1].hash
        assert verification.broken_at_index is None

    def test_empty_chain_is_valid(self) -> None:
        verification = verify_audit_chain(())

        assert verification.is_valid is True
        assert verification.head_hash is None

    def test_payload_mutation_detected(self, session, votes) -> None:
        chain = list(build_audit_chain(session, votes))
        payload = dict(chain[2].payload)
        payload["decision"] = "approve"
        chain[2] = replace(chain[2], payload=payload)

        verification = verify_audit_chain(chain)

        assert verification.is_valid is False
        assert verification.broken_at_index == 2
        assert "hash does not match" in verification.reason

    def test_reordering_detected(self, session, votes) -> None:
        chain = list(build_audit_chain(session, votes))
        chain[1], chain[2] = chain[2], chain[1]

        verification = verify_audit_chain(chain)

        assert verification.is_valid is False
        assert verification.broken_at_index == 1
        assert "does not link" in verification.reason

    def test_session_entry_out_of_place_detected(self, session, votes) -> None:
        chain = build_audit_chain(session, votes)
        vote_only = build_audit_chain(None, votes[:1])
        misplaced = [vote_only[0], replace(chain[0], previous_hash=vote_only[0].hash)]

        verification = verify_audit_chain(misplaced)

        assert verification.is_valid is False
        assert verification.broken_at_index == 1
        assert "is not first" in verification.reason
