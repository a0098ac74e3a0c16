"""Companion — wires the companion core together.

Builds the shared ``CompanionState`` once and injects it into the token
acquisition orchestrator, the report download coordinator and the
deployment flow.  ``start()`` is the application startup path: it runs the
first, non-silent acquisition.
"""

from __future__ import annotations

import logging

from beaconkeep.bridge.gateways import (
    DirectTokenProbe,
    HelperLifecycleGateway,
    KeychainTokenProbe,
    KeyGenerator,
    Provisioner,
    ReportFetcher,
)
from beaconkeep.config import CompanionConfig
from beaconkeep.core.acquisition import TokenAcquisitionOrchestrator
from beaconkeep.core.alert_center import AlertCenter
from beaconkeep.core.deployment import DeploymentRequestFlow
from beaconkeep.core.registry import AccessoryRegistry
from beaconkeep.core.reports import ReportDownloadCoordinator
from beaconkeep.core.scheduler import Scheduler
from beaconkeep.core.state import CompanionState
from beaconkeep.core.token_store import TokenStore
from beaconkeep.models.acquisition import AcquisitionState

logger = logging.getLogger(__name__)


class Companion:
    """Composition root for the companion core.

    Parameters
    ----------
    scheduler:
        The control thread.
    helper:
        Gateway to the privileged helper.
    fetcher:
        Location report download capability.
    provisioner:
        Hardware deployment capability.
    probe:
        Direct token probe.  Defaults to the keychain probe built from
        *config*.
    key_generator:
        Key source for new accessories.
    config:
        Runtime settings.  Environment-driven defaults when omitted.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        *,
        helper: HelperLifecycleGateway,
        fetcher: ReportFetcher,
        provisioner: Provisioner,
        probe: DirectTokenProbe | None = None,
        key_generator: KeyGenerator | None = None,
        config: CompanionConfig | None = None,
    ) -> None:
        self.config = config or CompanionConfig()

        self.state = CompanionState(
            scheduler,
            notification_ttl=self.config.notification_ttl_seconds,
            key_generator=key_generator,
        )
        self.acquisition = TokenAcquisitionOrchestrator(
            self.state,
            probe
            or KeychainTokenProbe(
                self.config.keychain_service,
                binary=self.config.keychain_binary,
                timeout=self.config.probe_timeout_seconds,
            ),
            helper,
            retry_interval=self.config.retry_interval_seconds,
            token_encoding=self.config.token_encoding,
        )
        self.reports = ReportDownloadCoordinator(self.state, fetcher)
        self.deployment = DeploymentRequestFlow(self.state, provisioner)

    # ------------------------------------------------------------------
    # Shared state shortcuts
    # ------------------------------------------------------------------

    @property
    def alerts(self) -> AlertCenter:
        return self.state.alerts

    @property
    def tokens(self) -> TokenStore:
        return self.state.tokens

    @property
    def accessories(self) -> AccessoryRegistry:
        return self.state.accessories

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> AcquisitionState:
        """Run the startup acquisition."""
        logger.info("Companion starting (%s)", self.config.environment)
        return self.acquisition.acquire(silent=False)

    def shutdown(self) -> None:
        """Stop retrying and forget the token."""
        self.acquisition.shutdown()
        self.state.tokens.clear()
        logger.info("Companion stopped")
