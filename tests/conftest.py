"""Shared test fixtures and collaborator fakes for BeaconKeep."""

from __future__ import annotations

from collections.abc import Sequence
from concurrent.futures import Future
from typing import Any

import pytest

from beaconkeep.core.scheduler import ManualScheduler
from beaconkeep.core.state import CompanionState
from beaconkeep.errors import DownloadError, InstallError
from beaconkeep.models.accessory import Accessory, LocationReport
from beaconkeep.models.alerts import PendingAlert, PendingNotification
from beaconkeep.models.deployment import HardwareProfile
from beaconkeep.models.token import AuthToken


def resolved(value: Any) -> Future:
    """A future already completed with *value*, or failed if it is an exception."""
    future: Future = Future()
    if isinstance(value, BaseException):
        future.set_exception(value)
    else:
        future.set_result(value)
    return future


# ---------------------------------------------------------------------------
# Collaborator fakes
# ---------------------------------------------------------------------------


class FakeProbe:
    """Returns the queued outcomes in order, repeating the last one."""

    def __init__(self, outcomes: Sequence[bytes | None] = (None,)) -> None:
        self._outcomes = list(outcomes)
        self.calls = 0

    def fetch_token(self) -> bytes | None:
        index = min(self.calls, len(self._outcomes) - 1)
        self.calls += 1
        return self._outcomes[index]


class FakeHelper:
    """Helper gateway with scripted token responses.

    ``responses`` items are bytes (success) or exceptions (failure); the last
    one repeats.  With ``pending=True`` the returned futures stay unresolved
    and are collected in ``futures``.
    """

    def __init__(
        self,
        *,
        installed: bool = True,
        responses: Sequence[bytes | Exception] = (b"helper-token",),
        pending: bool = False,
        install_error: InstallError | None = None,
        download_error: DownloadError | None = None,
    ) -> None:
        self.installed = installed
        self._responses = list(responses)
        self._pending = pending
        self._install_error = install_error
        self._download_error = download_error
        self.requests = 0
        self.installed_checks = 0
        self.install_calls = 0
        self.download_calls = 0
        self.futures: list[Future] = []

    def is_installed(self) -> bool:
        self.installed_checks += 1
        return self.installed

    def install(self) -> None:
        self.install_calls += 1
        if self._install_error is not None:
            raise self._install_error
        self.installed = True

    def download_only(self) -> None:
        self.download_calls += 1
        if self._download_error is not None:
            raise self._download_error

    def request_token(self) -> Future:
        index = min(self.requests, len(self._responses) - 1)
        self.requests += 1
        future = Future() if self._pending else resolved(self._responses[index])
        self.futures.append(future)
        return future


class FakeFetcher:
    """Report fetcher returning a scripted outcome (or pending futures)."""

    def __init__(self, outcome: Any = None, *, pending: bool = False) -> None:
        self._outcome = {} if outcome is None else outcome
        self._pending = pending
        self.calls: list[tuple[AuthToken | None, list[Accessory]]] = []
        self.futures: list[Future] = []

    def fetch(self, token: AuthToken | None, accessories: Sequence[Accessory]) -> Future:
        self.calls.append((token, list(accessories)))
        future = Future() if self._pending else resolved(self._outcome)
        self.futures.append(future)
        return future


class FakeProvisioner:
    """Provisioner whose futures are resolved by the test."""

    def __init__(self) -> None:
        self.calls: list[tuple[Accessory, HardwareProfile]] = []
        self.futures: list[Future] = []

    def deploy(self, accessory: Accessory, profile: HardwareProfile) -> Future:
        self.calls.append((accessory, profile))
        future: Future = Future()
        self.futures.append(future)
        return future


class AlertRecorder:
    """AlertCenter subscriber that keeps every distinct alert and notification."""

    def __init__(self) -> None:
        self.alerts: list[PendingAlert] = []
        self.notifications: list[PendingNotification] = []
        self._last_alert: PendingAlert | None = None
        self._last_notification: PendingNotification | None = None

    def __call__(
        self, alert: PendingAlert | None, notification: PendingNotification | None
    ) -> None:
        if alert is not None and alert is not self._last_alert:
            self.alerts.append(alert)
        if notification is not None and notification is not self._last_notification:
            self.notifications.append(notification)
        self._last_alert = alert
        self._last_notification = notification

    @property
    def kinds(self) -> list:
        return [alert.kind for alert in self.alerts]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def scheduler() -> ManualScheduler:
    """Provide a virtual-clock scheduler starting at t=0."""
    return ManualScheduler()


@pytest.fixture
def state(scheduler: ManualScheduler) -> CompanionState:
    """Provide a fresh shared state container on the manual scheduler."""
    return CompanionState(scheduler)


@pytest.fixture
def recorder(state: CompanionState) -> AlertRecorder:
    """Record everything the alert center publishes."""
    rec = AlertRecorder()
    state.alerts.subscribe(rec)
    return rec


@pytest.fixture
def accessory() -> Accessory:
    return Accessory(identifier="acc-001", name="Backpack")


@pytest.fixture
def sample_reports() -> dict[str, list[LocationReport]]:
    from datetime import datetime, timezone

    return {
        "acc-001": [
            LocationReport(
                accessory_id="acc-001",
                timestamp=datetime(2026, 1, 1, tzinfo=timezone.utc),
                latitude=49.87,
                longitude=8.65,
                confidence=2,
            )
        ]
    }


# ---------------------------------------------------------------------------
# Collaborator factories shared across test modules
# ---------------------------------------------------------------------------


@pytest.fixture
def make_probe() -> type[FakeProbe]:
    """Factory fixture: ``make_probe([None, b"token"])``."""
    return FakeProbe


@pytest.fixture
def make_helper() -> type[FakeHelper]:
    """Factory fixture: ``make_helper(installed=..., responses=[...])``."""
    return FakeHelper


@pytest.fixture
def make_fetcher() -> type[FakeFetcher]:
    """Factory fixture: ``make_fetcher(outcome)`` or ``make_fetcher(pending=True)``."""
    return FakeFetcher


@pytest.fixture
def provisioner() -> FakeProvisioner:
    return FakeProvisioner()
