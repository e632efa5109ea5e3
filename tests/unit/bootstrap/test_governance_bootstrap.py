"""Unit tests for governance core wiring."""

import os
from unittest.mock import MagicMock, patch

import pytest

from src.bootstrap.governance import build_in_memory_core, build_postgres_core
from src.domain.models.governance_phase import GovernancePhase
from src.infrastructure.adapters.events import LoggingEventSink
from src.infrastructure.adapters.persistence import (
    PostgresProposalRepository,
    PostgresSessionStore,
    PostgresVoteStore,
)
from src.infrastructure.stubs import EventSinkStub, VoteStoreStub
from tests.helpers.builders import make_proposal


class TestBuildInMemoryCore:
    def test_wires_stubs(self, fake_time_authority, metrics) -> None:
        core = build_in_memory_core(time_authority=fake_time_authority, metrics=metrics)

        assert isinstance(core.votes, VoteStoreStub)
        assert isinstance(core.event_sink, EventSinkStub)
        assert core.time_authority is fake_time_authority

    def test_config_from_environment_when_omitted(self, metrics) -> None:
        with patch.dict(
            os.environ, {"GOVERNANCE_AUTOMATIC_TRANSITIONS": "false"}, clear=True
        ):
            core = build_in_memory_core(metrics=metrics)

        assert core.config.enable_automatic_transitions is False

    @pytest.mark.asyncio
    async def test_services_share_stores(self, core) -> None:
        core.proposals.add_proposal(make_proposal())

        result = await core.state_machine.transition_phase(
            "prop-1", GovernancePhase.DISCUSSION, "agent-author"
        )

        assert result.to_phase == GovernancePhase.DISCUSSION
        assert len(core.event_sink.events) == 1


class TestBuildPostgresCore:
    def test_wires_postgres_stores(self) -> None:
        core = build_postgres_core(session_factory=MagicMock())

        assert isinstance(core.proposals, PostgresProposalRepository)
        assert isinstance(core.votes, PostgresVoteStore)
        assert isinstance(core.sessions, PostgresSessionStore)
        assert isinstance(core.event_sink, LoggingEventSink)
