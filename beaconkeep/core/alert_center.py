"""Alert center — one modal slot and one transient slot.

The modal slot holds at most one ``PendingAlert``; showing a new one
overwrites the current one (last writer wins, no queue).  The transient slot
holds at most one ``PendingNotification``, which clears itself after a fixed
TTL; a newer notification replaces the content and restarts the countdown.

The presentation layer subscribes and reads; it never writes the slots
directly.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from beaconkeep.core.scheduler import ScheduledTask, Scheduler
from beaconkeep.models.alerts import (
    AlertKind,
    NotificationKind,
    PendingAlert,
    PendingNotification,
)

logger = logging.getLogger(__name__)

AlertListener = Callable[[PendingAlert | None, PendingNotification | None], None]


class AlertCenter:
    """Serializes user-facing prompts.

    Parameters
    ----------
    scheduler:
        Control-thread scheduler used for notification expiry.
    notification_ttl:
        Seconds a notification stays visible.
    """

    def __init__(self, scheduler: Scheduler, *, notification_ttl: float = 2.0) -> None:
        self._scheduler = scheduler
        self._notification_ttl = notification_ttl
        self._alert: PendingAlert | None = None
        self._notification: PendingNotification | None = None
        self._expiry: ScheduledTask | None = None
        self._listeners: list[AlertListener] = []

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def alert(self) -> PendingAlert | None:
        return self._alert

    @property
    def notification(self) -> PendingNotification | None:
        return self._notification

    @property
    def notification_ttl(self) -> float:
        return self._notification_ttl

    def subscribe(self, listener: AlertListener) -> None:
        """Register a presentation listener for slot changes."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    # ------------------------------------------------------------------
    # Modal channel
    # ------------------------------------------------------------------

    def show(
        self,
        kind: AlertKind,
        description: str | None = None,
        choices: Sequence[str] = (),
    ) -> PendingAlert:
        """Put *kind* in the modal slot, replacing whatever is there."""
        alert = PendingAlert(kind=kind, description=description, choices=tuple(choices))
        if self._alert is not None:
            logger.debug(
                "Alert %s replaces undismissed %s",
                kind.value,
                self._alert.kind.value,
            )
        self._alert = alert
        logger.info("Alert raised: %s", kind.value)
        self._publish()
        return alert

    def dismiss(self) -> PendingAlert | None:
        """Clear the modal slot.  Returns the alert that was dismissed."""
        dismissed, self._alert = self._alert, None
        if dismissed is not None:
            logger.debug("Alert dismissed: %s", dismissed.kind.value)
            self._publish()
        return dismissed

    # ------------------------------------------------------------------
    # Transient channel
    # ------------------------------------------------------------------

    def notify(self, kind: NotificationKind, message: str = "") -> PendingNotification:
        """Show a transient notice and (re)start its countdown."""
        if self._expiry is not None:
            self._expiry.cancel()
        now = self._scheduler.now()
        notification = PendingNotification(
            kind=kind,
            message=message,
            raised_at=now,
            expires_at=now + self._notification_ttl,
        )
        self._notification = notification
        self._expiry = self._scheduler.call_later(
            self._notification_ttl, self._expire, notification
        )
        logger.info("Notification shown: %s", kind.value)
        self._publish()
        return notification

    def _expire(self, notification: PendingNotification) -> None:
        if self._notification is not notification:
            return
        self._notification = None
        self._expiry = None
        self._publish()

    # ------------------------------------------------------------------
    # Fan-out
    # ------------------------------------------------------------------

    def _publish(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._alert, self._notification)
            except Exception:  # noqa: BLE001
                logger.exception("Alert listener %r failed", listener)
