"""Deployment request flow models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class HardwareProfile(str, Enum):
    """Hardware targets an accessory key can be deployed to."""

    TAG_A = "tagA"
    TAG_B = "tagB"


class DeploymentPhase(str, Enum):
    IDLE = "idle"
    TARGET_SELECTION_PENDING = "target_selection_pending"
    DEPLOYING = "deploying"
    RESOLVED = "resolved"


class DeploymentOutcome(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


# Valid phase transitions, enforced by DeploymentRequestFlow.
DEPLOYMENT_TRANSITIONS: dict[DeploymentPhase, set[DeploymentPhase]] = {
    DeploymentPhase.IDLE: {DeploymentPhase.TARGET_SELECTION_PENDING},
    DeploymentPhase.TARGET_SELECTION_PENDING: {
        DeploymentPhase.DEPLOYING,
        DeploymentPhase.IDLE,  # user dismissed the target prompt
    },
    DeploymentPhase.DEPLOYING: {DeploymentPhase.RESOLVED},
    DeploymentPhase.RESOLVED: {DeploymentPhase.IDLE},
}


class DeploymentRequest(BaseModel):
    """Pairs an accessory with the hardware profile chosen for it.

    Lives only while a deployment is being set up or running.
    """

    model_config = ConfigDict(frozen=True)

    accessory_id: str
    profile: HardwareProfile | None = None
