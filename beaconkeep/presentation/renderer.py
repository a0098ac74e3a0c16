"""Rich terminal renderer for alert center signals.

Turns ``PendingAlert`` and ``PendingNotification`` into Rich panels.  It is
a plain ``AlertCenter`` subscriber: it only reads the slots.

Color scheme
------------
- red     : failures
- green   : successes
- yellow  : prompts waiting for a user decision
- cyan    : transient notifications
"""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel

from beaconkeep.models.alerts import (
    AlertKind,
    NotificationKind,
    PendingAlert,
    PendingNotification,
)

# ---------------------------------------------------------------------------
# Kind -> title / style mapping
# ---------------------------------------------------------------------------

_ALERT_TITLES: dict[AlertKind, str] = {
    AlertKind.KEY_CREATION_ERROR: "Could not create accessory",
    AlertKind.TOKEN_PASTE_REQUEST: "Add the search party token",
    AlertKind.DEPLOY_FAILED: "Could not deploy",
    AlertKind.DEPLOY_SUCCEEDED: "Deploy successful",
    AlertKind.DELETION_FAILED: "Could not delete accessory",
    AlertKind.NO_REPORTS_FOUND: "No reports found",
    AlertKind.DOWNLOAD_FAILED: "Downloading locations failed",
    AlertKind.ACTIVATE_HELPER_PROMPT: "Install & activate the helper",
    AlertKind.HELPER_INSTALL_FAILED: "Helper installation failed",
    AlertKind.SELECT_DEPLOY_TARGET: "Select target",
}

_ALERT_STYLES: dict[AlertKind, str] = {
    AlertKind.KEY_CREATION_ERROR: "red",
    AlertKind.DEPLOY_FAILED: "red",
    AlertKind.DELETION_FAILED: "red",
    AlertKind.DOWNLOAD_FAILED: "red",
    AlertKind.HELPER_INSTALL_FAILED: "red",
    AlertKind.DEPLOY_SUCCEEDED: "green",
}

_NOTIFICATION_TEXT: dict[NotificationKind, str] = {
    NotificationKind.NO_REPORTS_FOUND: "No reports found yet. Is the accessory powered?",
}


class AlertRenderer:
    """Prints alert center changes to a Rich console.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()
        self._last_alert: PendingAlert | None = None
        self._last_notification: PendingNotification | None = None

    def __call__(
        self,
        alert: PendingAlert | None,
        notification: PendingNotification | None,
    ) -> None:
        if alert is not None and alert is not self._last_alert:
            self.console.print(self.render_alert(alert))
        if notification is not None and notification is not self._last_notification:
            self.console.print(self.render_notification(notification))
        self._last_alert = alert
        self._last_notification = notification

    def render_alert(self, alert: PendingAlert) -> Panel:
        lines: list[str] = []
        if alert.description:
            lines.append(alert.description)
        if alert.choices:
            lines.append("Choices: " + ", ".join(f"[bold]{c}[/bold]" for c in alert.choices))
        return Panel(
            "\n".join(lines) or f"[dim]{alert.kind.value}[/dim]",
            title=f"[bold]{_ALERT_TITLES[alert.kind]}[/bold]",
            border_style=_ALERT_STYLES.get(alert.kind, "yellow"),
            padding=(0, 2),
        )

    def render_notification(self, notification: PendingNotification) -> Panel:
        return Panel(
            notification.message or _NOTIFICATION_TEXT[notification.kind],
            border_style="cyan",
            padding=(0, 2),
        )
