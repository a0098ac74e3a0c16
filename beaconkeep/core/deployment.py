"""Deployment request flow.

``idle -> target_selection_pending -> deploying(profile) -> resolved``

The user picks an accessory (``begin``), then one of the hardware profiles
offered in the ``select_deploy_target`` prompt (``select_target``).  The
outcome is surfaced once; there is no automatic retry.  The request is
discarded whichever way the deployment resolves.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future

from beaconkeep.bridge.gateways import Provisioner
from beaconkeep.core.scheduler import deliver
from beaconkeep.core.state import CompanionState
from beaconkeep.errors import InvalidTransitionError
from beaconkeep.models.accessory import Accessory
from beaconkeep.models.alerts import AlertKind
from beaconkeep.models.deployment import (
    DEPLOYMENT_TRANSITIONS,
    DeploymentOutcome,
    DeploymentPhase,
    DeploymentRequest,
    HardwareProfile,
)

logger = logging.getLogger(__name__)

TARGET_CHOICES: tuple[str, ...] = tuple(profile.value for profile in HardwareProfile)


class DeploymentRequestFlow:
    """Two-step accessory deployment.

    Parameters
    ----------
    state:
        Shared companion state.
    provisioner:
        Writes accessory keys onto hardware.
    """

    def __init__(self, state: CompanionState, provisioner: Provisioner) -> None:
        self._state = state
        self._provisioner = provisioner
        self._phase = DeploymentPhase.IDLE
        self._request: DeploymentRequest | None = None
        self._accessory: Accessory | None = None
        self._outcome: DeploymentOutcome | None = None

    @property
    def phase(self) -> DeploymentPhase:
        return self._phase

    @property
    def request(self) -> DeploymentRequest | None:
        return self._request

    @property
    def profile(self) -> HardwareProfile | None:
        return self._request.profile if self._request is not None else None

    @property
    def outcome(self) -> DeploymentOutcome | None:
        return self._outcome

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def begin(self, accessory: Accessory) -> DeploymentRequest:
        """Start deploying *accessory* and ask which hardware to target."""
        if self._phase == DeploymentPhase.RESOLVED:
            self._transition(DeploymentPhase.IDLE)
        self._transition(DeploymentPhase.TARGET_SELECTION_PENDING)

        self._accessory = accessory
        self._request = DeploymentRequest(accessory_id=accessory.identifier)
        self._outcome = None
        self._state.alerts.show(AlertKind.SELECT_DEPLOY_TARGET, choices=TARGET_CHOICES)
        return self._request

    def select_target(self, profile: HardwareProfile | str) -> DeploymentRequest:
        """Deploy the pending accessory to *profile*."""
        profile = HardwareProfile(profile)
        self._transition(DeploymentPhase.DEPLOYING)
        accessory, request = self._accessory, self._request
        if accessory is None or request is None:
            raise InvalidTransitionError("No accessory is waiting for a deployment target")

        request = request.model_copy(update={"profile": profile})
        self._request = request
        logger.info("Deploying %s to %s", accessory.name, profile.value)
        try:
            future = self._provisioner.deploy(accessory, profile)
        except Exception as exc:  # noqa: BLE001
            self._resolve_failure(exc)
            return request
        deliver(self._state.scheduler, future, self._on_result)
        return request

    def cancel(self) -> None:
        """The user dismissed the target prompt without choosing."""
        self._transition(DeploymentPhase.IDLE)
        self._request = None
        self._accessory = None

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def _on_result(self, future: Future[None]) -> None:
        try:
            future.result()
        except Exception as exc:  # noqa: BLE001
            self._resolve_failure(exc)
            return
        self._transition(DeploymentPhase.RESOLVED)
        self._outcome = DeploymentOutcome.SUCCESS
        logger.info("Deployment succeeded")
        self._clear_request()
        self._state.alerts.show(AlertKind.DEPLOY_SUCCEEDED)

    def _resolve_failure(self, exc: Exception) -> None:
        self._transition(DeploymentPhase.RESOLVED)
        self._outcome = DeploymentOutcome.FAILURE
        logger.error("Deployment failed: %s", exc)
        self._clear_request()
        self._state.alerts.show(AlertKind.DEPLOY_FAILED, description=str(exc) or None)

    def _clear_request(self) -> None:
        self._request = None
        self._accessory = None

    def _transition(self, target: DeploymentPhase) -> None:
        allowed = DEPLOYMENT_TRANSITIONS.get(self._phase, set())
        if target not in allowed:
            raise InvalidTransitionError(
                f"Cannot move deployment from {self._phase.value} to {target.value}. "
                f"Allowed: {sorted(p.value for p in allowed)}"
            )
        logger.debug("Deployment %s -> %s", self._phase.value, target.value)
        self._phase = target
