"""Tests for the Rich alert renderer."""

from __future__ import annotations

from rich.console import Console

from beaconkeep.models.alerts import AlertKind, NotificationKind
from beaconkeep.presentation.renderer import AlertRenderer


def _renderer() -> tuple[AlertRenderer, Console]:
    console = Console(record=True, width=100, force_terminal=False)
    return AlertRenderer(console=console), console


class TestAlertRenderer:
    """The renderer prints each new alert as a Rich panel."""

    def test_prints_new_alert_once(self, state):
        """A repeated snapshot of the same alert is printed once."""
        renderer, console = _renderer()
        state.alerts.subscribe(renderer)

        state.alerts.show(AlertKind.DOWNLOAD_FAILED, description="HTTP 500")
        state.alerts.notify(NotificationKind.NO_REPORTS_FOUND)

        text = console.export_text()
        assert text.count("Downloading locations failed") == 1
        assert "HTTP 500" in text
        assert "No reports found yet" in text

    def test_select_target_lists_choices(self, state):
        """The target prompt lists both hardware choices."""
        renderer, console = _renderer()
        state.alerts.subscribe(renderer)
        state.alerts.show(AlertKind.SELECT_DEPLOY_TARGET, choices=("tagA", "tagB"))

        text = console.export_text()
        assert "Select target" in text
        assert "tagA" in text and "tagB" in text

    def test_every_kind_renders(self):
        """Every alert kind has a title and renders."""
        renderer, console = _renderer()
        from beaconkeep.models.alerts import PendingAlert

        for kind in AlertKind:
            console.print(renderer.render_alert(PendingAlert(kind=kind)))
        assert console.export_text()
