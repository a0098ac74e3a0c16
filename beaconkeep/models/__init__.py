"""BeaconKeep data models — all Pydantic v2, all frozen (immutable)."""

from beaconkeep.models.accessory import Accessory, LocationReport
from beaconkeep.models.acquisition import (
    ACQUISITION_TRANSITIONS,
    TERMINAL_ACQUISITION_STATES,
    AcquisitionState,
    AcquisitionTransition,
)
from beaconkeep.models.alerts import (
    AlertKind,
    NotificationKind,
    PendingAlert,
    PendingNotification,
)
from beaconkeep.models.deployment import (
    DEPLOYMENT_TRANSITIONS,
    DeploymentOutcome,
    DeploymentPhase,
    DeploymentRequest,
    HardwareProfile,
)
from beaconkeep.models.token import AuthToken, TokenProvenance

__all__ = [
    # token
    "AuthToken",
    "TokenProvenance",
    # acquisition
    "AcquisitionState",
    "AcquisitionTransition",
    "ACQUISITION_TRANSITIONS",
    "TERMINAL_ACQUISITION_STATES",
    # alerts
    "AlertKind",
    "NotificationKind",
    "PendingAlert",
    "PendingNotification",
    # deployment
    "HardwareProfile",
    "DeploymentPhase",
    "DeploymentOutcome",
    "DeploymentRequest",
    "DEPLOYMENT_TRANSITIONS",
    # accessories
    "Accessory",
    "LocationReport",
]
