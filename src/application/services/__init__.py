"""Application services for the governance core.

Services orchestrate domain logic through ports:
- PhaseStateMachineService: condition-gated phase transitions
- GovernanceMinutesService: votes, sessions, results and audit chains
- AutomaticTransitionScheduler: single-call automatic sweep
- ProposalContextAssembler: default ProposalContextProvider
- SystemTimeAuthority: wall-clock TimeAuthorityProtocol
"""

from src.application.services.automatic_transition_scheduler import (
    AutomaticTransitionScheduler,
)
from src.application.services.base import LoggingMixin
from src.application.services.governance_minutes_service import (
    GovernanceMinutesService,
)
from src.application.services.phase_state_machine_service import (
    PhaseStateMachineService,
)
from src.application.services.proposal_context_assembler import (
    ProposalContextAssembler,
)
from src.application.services.proposal_locks import ProposalLockRegistry
from src.application.services.system_time_authority import SystemTimeAuthority

__all__: list[str] = [
    "AutomaticTransitionScheduler",
    "GovernanceMinutesService",
    "LoggingMixin",
    "PhaseStateMachineService",
    "ProposalContextAssembler",
    "ProposalLockRegistry",
    "SystemTimeAuthority",
]
