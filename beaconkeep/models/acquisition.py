"""Token acquisition state machine models."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class AcquisitionState(str, Enum):
    """Progress of the credential acquisition."""

    UNKNOWN = "unknown"
    CHECKING_DIRECT = "checking_direct"
    DIRECT_SUCCEEDED = "direct_succeeded"
    CHECKING_HELPER_INSTALLED = "checking_helper_installed"
    HELPER_NOT_INSTALLED = "helper_not_installed"
    HELPER_INSTALLED_INACTIVE = "helper_installed_inactive"
    HELPER_ACTIVE = "helper_active"


# Valid state transitions, enforced by TokenAcquisitionOrchestrator.
# Terminal states (DIRECT_SUCCEEDED, HELPER_ACTIVE) have no outgoing transitions.
ACQUISITION_TRANSITIONS: dict[AcquisitionState, set[AcquisitionState]] = {
    AcquisitionState.UNKNOWN: {
        AcquisitionState.CHECKING_DIRECT,
        AcquisitionState.CHECKING_HELPER_INSTALLED,
    },
    AcquisitionState.CHECKING_DIRECT: {
        AcquisitionState.DIRECT_SUCCEEDED,
        AcquisitionState.CHECKING_HELPER_INSTALLED,
    },
    AcquisitionState.CHECKING_HELPER_INSTALLED: {
        AcquisitionState.HELPER_NOT_INSTALLED,
        AcquisitionState.HELPER_INSTALLED_INACTIVE,
    },
    AcquisitionState.HELPER_NOT_INSTALLED: {
        AcquisitionState.CHECKING_DIRECT,
        AcquisitionState.CHECKING_HELPER_INSTALLED,
    },
    AcquisitionState.HELPER_INSTALLED_INACTIVE: {
        AcquisitionState.HELPER_ACTIVE,
        AcquisitionState.CHECKING_DIRECT,
        AcquisitionState.CHECKING_HELPER_INSTALLED,
    },
    AcquisitionState.DIRECT_SUCCEEDED: set(),  # terminal
    AcquisitionState.HELPER_ACTIVE: set(),  # terminal
}

TERMINAL_ACQUISITION_STATES: frozenset[AcquisitionState] = frozenset(
    state for state, targets in ACQUISITION_TRANSITIONS.items() if not targets
)


class AcquisitionTransition(BaseModel):
    """Records a single acquisition state change."""

    model_config = ConfigDict(frozen=True)

    from_state: AcquisitionState
    to_state: AcquisitionState
    silent: bool = False
    at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
