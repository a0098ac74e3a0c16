"""Shared companion state container.

Constructed once and injected into the orchestrator, the report
coordinator and the deployment flow so they all see the same token, alert
slots and accessory list.
"""

from __future__ import annotations

from beaconkeep.bridge.gateways import KeyGenerator
from beaconkeep.core.alert_center import AlertCenter
from beaconkeep.core.registry import AccessoryRegistry
from beaconkeep.core.scheduler import Scheduler
from beaconkeep.core.token_store import TokenStore


class CompanionState:
    """Owns the control-thread scheduler and every piece of shared state.

    Parameters
    ----------
    scheduler:
        The control thread all result handlers run on.
    notification_ttl:
        Seconds a transient notification stays visible.
    key_generator:
        Key source for newly created accessories.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        *,
        notification_ttl: float = 2.0,
        key_generator: KeyGenerator | None = None,
    ) -> None:
        self.scheduler = scheduler
        self.tokens = TokenStore()
        self.alerts = AlertCenter(scheduler, notification_ttl=notification_ttl)
        self.accessories = AccessoryRegistry(self.alerts, key_generator)
